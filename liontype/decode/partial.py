# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Partial decoding of values that are still streaming.

Anything that has not (fully) arrived becomes ``Unset``: absent fields,
nulls standing in for values not yet produced, and pending scalars whose
final form may still change. A pending string is shown as-is, since strings
only ever grow. Structural mismatches still raise ``DecodeError``.
"""

from __future__ import annotations

from typing import Any

from .._errors import DecodeError, NoUnionVariantMatchedError
from ..ln import Unset
from ..schema import (
    ClassDef,
    EnumDef,
    EnumRef,
    FieldDef,
    LiteralType,
    MediaType,
    OptionalType,
    Primitive,
    PrimitiveKind,
    Schema,
    Type,
    UnionType,
)
from ..values import strip
from .decoder import Decoder

__all__ = ("PartialDecoder", "decode_partial")


class PartialDecoder(Decoder):
    def __init__(self, schema: Schema, *, allow_integral_float: bool | None = None):
        super().__init__(schema, allow_integral_float=allow_integral_float)
        self._full = Decoder(schema, allow_integral_float=self.allow_integral_float)

    def _defer(self, value: Any, target: Type) -> bool:
        if value is None:
            return True
        match target:
            case OptionalType(inner=inner):
                return self._defer(value, inner)
            case Primitive(kind=PrimitiveKind.STRING):
                return not isinstance(value, (str, list, dict))
            case Primitive() | LiteralType() | EnumRef():
                return not isinstance(value, (list, dict))
            case MediaType():
                return True
        return False

    def _on_null(self, target: Type) -> Any:
        return Unset

    def _on_missing(self, field: FieldDef, cdef: ClassDef, pending: bool) -> Any:
        # in a finished map only a required field is still outstanding
        if pending or field.required and not cdef.is_dynamic:
            return Unset
        return super()._on_missing(field, cdef, pending)

    def _on_unknown_enum(self, value: str, edef: EnumDef) -> Any:
        return Unset

    def _keep(self, value: Any) -> bool:
        return value is not Unset

    def _decode_untagged(self, raw: Any, target: UnionType) -> Any:
        # a complete value decodes exactly as the full decoder would
        if not strip(raw)[1]:
            try:
                return self._full._decode(raw, target)
            except DecodeError:
                pass

        matched = []
        attempts: dict[str, DecodeError] = {}
        for variant in target.variants:
            try:
                matched.append(self._decode(raw, variant))
            except DecodeError as e:
                attempts[variant.name] = e
        if len(matched) == 1:
            return matched[0]
        if matched:
            # ambiguous until more of the value arrives
            return Unset
        raise NoUnionVariantMatchedError(str(target), attempts=attempts)


def decode_partial(
    raw: Any,
    target: Type,
    schema: Schema,
    *,
    allow_integral_float: bool | None = None,
) -> Any:
    """Decode a possibly incomplete ``raw`` against ``target``.

    Example:
        >>> decode_partial({"name": "Jo"}, ClassRef("Resume"), schema)
        Resume(name='Jo', job_title=Unset, company=Unset)
    """
    return PartialDecoder(
        schema, allow_integral_float=allow_integral_float
    ).decode(raw, target)
