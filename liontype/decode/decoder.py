# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Full decoding of raw values into host values.

Dispatch is on the target ``Type``. Errors are raised at the innermost
failing value and gain path segments (field names, list indices, map keys)
as they propagate back out.
"""

from __future__ import annotations

import base64
from typing import Any

from .._errors import (
    DecodeError,
    MissingFieldError,
    NoUnionVariantMatchedError,
    TypeMismatchError,
    UnknownEnumValueError,
)
from ..config import settings
from ..ln import Undefined, Unset
from ..schema import (
    ClassDef,
    ClassRef,
    EnumDef,
    EnumRef,
    FieldDef,
    ListType,
    LiteralType,
    MapType,
    MediaType,
    OptionalType,
    Primitive,
    PrimitiveKind,
    Schema,
    Type,
    UnionType,
)
from ..values import (
    DynamicRecord,
    EnumValue,
    MediaRef,
    Pending,
    Record,
    raw_kind,
    strip,
    unwrap,
)

__all__ = ("Decoder", "decode")


class Decoder:
    """Validates raw values against types of one schema.

    Subclasses relax completeness by overriding the ``_defer`` and ``_on_*``
    hooks; the dispatch itself is shared.

    Args:
        schema: Schema every ``ClassRef``/``EnumRef`` resolves in.
        allow_integral_float: Accept ``3.0`` for an ``int`` target.
            Defaults to ``settings.LIONTYPE_ALLOW_INTEGRAL_FLOAT_AS_INT``.
    """

    def __init__(self, schema: Schema, *, allow_integral_float: bool | None = None):
        self.schema = schema
        if allow_integral_float is None:
            allow_integral_float = settings.LIONTYPE_ALLOW_INTEGRAL_FLOAT_AS_INT
        self.allow_integral_float = allow_integral_float

    def decode(self, raw: Any, target: Type) -> Any:
        self.schema.validate_type(target, where="decode target")
        return self._decode(raw, target)

    # -- hooks --------------------------------------------------------------

    def _defer(self, value: Any, target: Type) -> bool:
        """Whether a pending value is reported as ``Unset`` for ``target``."""
        return False

    def _on_null(self, target: Type) -> Any:
        raise TypeMismatchError(str(target), "null")

    def _on_missing(self, field: FieldDef, cdef: ClassDef, pending: bool) -> Any:
        """Value for an absent field; ``Undefined`` omits it.

        ``pending`` tells whether the enclosing map is still arriving.
        """
        if cdef.is_dynamic:
            return Undefined
        if not field.required:
            return None
        raise MissingFieldError(
            field.name, class_name=cdef.name, path=(field.name,)
        )

    def _on_unknown_enum(self, value: str, edef: EnumDef) -> Any:
        raise UnknownEnumValueError(
            value, enum_name=edef.name, allowed=edef.value_names
        )

    def _decode_untagged(self, raw: Any, target: UnionType) -> Any:
        attempts: dict[str, DecodeError] = {}
        for variant in target.variants:
            try:
                return self._decode(raw, variant)
            except DecodeError as e:
                attempts[variant.name] = e
        raise NoUnionVariantMatchedError(str(target), attempts=attempts)

    def _keep(self, value: Any) -> bool:
        """Whether a decoded list element or map entry is kept."""
        return True

    # -- dispatch -----------------------------------------------------------

    def _decode(self, raw: Any, target: Type) -> Any:
        value, tag, pending = unwrap(raw)
        if pending and self._defer(value, target):
            return Unset

        match target:
            case OptionalType(inner=inner):
                return None if value is None else self._decode(raw, inner)
            case UnionType():
                return self._decode_union(value, tag, pending, target)

        if value is None:
            return self._on_null(target)
        if tag is not None and not isinstance(target, Primitive):
            if tag != target.name:
                raise TypeMismatchError(target.name, f"checked<{tag}>")

        match target:
            case Primitive():
                return self._decode_primitive(value, target)
            case LiteralType():
                if not target.matches(value):
                    raise TypeMismatchError(str(target), repr(value))
                return value
            case ListType(inner=inner):
                return self._decode_list(value, inner, target)
            case MapType():
                return self._decode_map(value, target)
            case ClassRef(name=name):
                return self._decode_class(
                    value, self.schema.get_class(name), pending
                )
            case EnumRef(name=name):
                return self._decode_enum(value, self.schema.get_enum(name))
            case MediaType():
                return self._decode_media(raw, target)
        raise TypeMismatchError(str(target), raw_kind(value))

    def _decode_primitive(self, value: Any, target: Primitive) -> Any:
        match target.kind:
            case PrimitiveKind.STRING if isinstance(value, str):
                return value
            case PrimitiveKind.BOOL if isinstance(value, bool):
                return value
            case PrimitiveKind.INT if not isinstance(value, bool):
                if isinstance(value, int):
                    return value
                if (
                    self.allow_integral_float
                    and isinstance(value, float)
                    and value.is_integer()
                ):
                    return int(value)
            case PrimitiveKind.FLOAT if not isinstance(value, bool):
                if isinstance(value, float):
                    return value
                if isinstance(value, int):
                    return float(value)
            case PrimitiveKind.BYTES if isinstance(value, (bytes, bytearray)):
                return bytes(value)
        raise TypeMismatchError(str(target), raw_kind(value))

    def _decode_list(self, value: Any, inner: Type, target: ListType) -> list:
        if not isinstance(value, (list, tuple)):
            raise TypeMismatchError(str(target), raw_kind(value))
        out = []
        for i, item in enumerate(value):
            try:
                decoded = self._decode(item, inner)
            except DecodeError as e:
                raise e.with_prefix(i)
            if self._keep(decoded):
                out.append(decoded)
        return out

    def _decode_map(self, value: Any, target: MapType) -> dict:
        if not isinstance(value, dict):
            raise TypeMismatchError(str(target), raw_kind(value))
        out = {}
        for key, item in value.items():
            if not isinstance(unwrap(key)[0], str):
                raise TypeMismatchError("string key", raw_kind(key), path=(str(key),))
            try:
                k = self._decode(key, target.key)
                v = self._decode(item, target.value)
            except DecodeError as e:
                raise e.with_prefix(unwrap(key)[0])
            if self._keep(k) and self._keep(v):
                out[k] = v
        return out

    def _decode_class(
        self, value: Any, cdef: ClassDef, pending: bool = False
    ) -> Record | DynamicRecord:
        if not isinstance(value, dict):
            raise TypeMismatchError(cdef.name, raw_kind(value))

        fields: dict[str, Any] = {}
        for f in cdef.fields:
            if f.raw_key in value:
                try:
                    fields[f.name] = self._decode(value[f.raw_key], f.type)
                except DecodeError as e:
                    raise e.with_prefix(f.name)
                continue
            missing = self._on_missing(f, cdef, pending)
            if missing is not Undefined:
                fields[f.name] = missing

        if not cdef.is_dynamic:
            return Record(cdef.name, fields)

        declared = {f.raw_key for f in cdef.fields}
        extras = {
            k: strip(v)[0] for k, v in value.items() if k not in declared
        }
        return DynamicRecord(cdef.name, {**fields, **extras}, extras.keys())

    def _decode_enum(self, value: Any, edef: EnumDef) -> Any:
        if not isinstance(value, str):
            raise TypeMismatchError(edef.name, raw_kind(value))
        if not edef.has(value):
            return self._on_unknown_enum(value, edef)
        return EnumValue(edef.name, value)

    def _decode_media(self, raw: Any, target: MediaType) -> Any:
        value, pending = strip(raw)
        if pending and self._defer(value, target):
            return Unset

        kind = target.kind
        match value:
            case str() if value:
                return MediaRef.from_url(kind, value)
            case {"url": str() as url, **rest} if url:
                media_type = rest.get("media_type")
                if media_type is None or isinstance(media_type, str):
                    return MediaRef.from_url(kind, url, media_type)
            case {"base64": str() as data, "media_type": str() as media_type} if data:
                return MediaRef.from_base64(kind, data, media_type)
            case {"data": bytes() as data, "media_type": str() as media_type} if data:
                return MediaRef.from_base64(
                    kind, base64.b64encode(data).decode("ascii"), media_type
                )
        raise TypeMismatchError(kind, raw_kind(value))

    def _decode_union(
        self, value: Any, tag: str | None, pending: bool, target: UnionType
    ) -> Any:
        raw = Pending(value) if pending else value
        if tag is None:
            return self._decode_untagged(raw, target)
        variant = target.variant(tag)
        if variant is None:
            raise NoUnionVariantMatchedError(
                str(target), reason=f"Tag {tag!r} names no variant of {target}"
            )
        return self._decode(raw, variant)


def decode(
    raw: Any,
    target: Type,
    schema: Schema,
    *,
    allow_integral_float: bool | None = None,
) -> Any:
    """Decode ``raw`` against ``target``, raising ``DecodeError`` on mismatch."""
    return Decoder(schema, allow_integral_float=allow_integral_float).decode(
        raw, target
    )
