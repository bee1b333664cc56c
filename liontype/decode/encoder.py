# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Encoding of host arguments into raw values.

The inverse of :mod:`liontype.decode.decoder`: ``decode(encode(v, t), t)``
gives back ``v`` for non-dynamic classes, primitives, lists, maps and
enums. Union members and dynamic records are wrapped in ``Checked`` so the
receiving side never has to guess a variant.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from .._errors import (
    ArgumentError,
    DecodeError,
    MissingFieldError,
    NoUnionVariantMatchedError,
    TypeMismatchError,
    UnknownEnumValueError,
)
from ..schema import (
    ClassDef,
    ClassRef,
    EnumRef,
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
    Checked,
    DynamicRecord,
    EnumValue,
    MediaRef,
    Record,
    raw_kind,
    to_builtins,
)

__all__ = ("encode", "encode_args")


def encode(value: Any, target: Type, schema: Schema) -> Any:
    """Encode a host or plain Python value as a raw value of ``target``.

    Raises the same ``DecodeError`` subclasses as decoding, with a path.
    """
    schema.validate_type(target, where="encode target")
    return _encode(value, target, schema, strict=False)


def encode_args(
    args: Mapping[str, Any],
    params: Mapping[str, Type],
    schema: Schema,
    *,
    function_name: str | None = None,
) -> dict[str, Any]:
    """Encode a call's keyword arguments against its declared parameters.

    Raises:
        ArgumentError: an unknown or missing argument, or one that does not
            fit its parameter type (the ``DecodeError`` is the cause).
    """
    where = f" for {function_name}" if function_name else ""
    unknown = sorted(set(args) - set(params))
    if unknown:
        raise ArgumentError(
            f"Unknown argument(s){where}: {unknown}",
            details={"unknown": unknown, "allowed": list(params)},
        )
    missing = [
        name
        for name, t in params.items()
        if name not in args and not isinstance(t, OptionalType)
    ]
    if missing:
        raise ArgumentError(
            f"Missing argument(s){where}: {missing}", details={"missing": missing}
        )

    out = {}
    for name, t in params.items():
        if name not in args:
            continue
        try:
            out[name] = encode(args[name], t, schema)
        except DecodeError as e:
            e.with_prefix(name)
            raise ArgumentError(
                f"Invalid argument{where}: {e.message}",
                details={"argument": name, "path": e.path_str},
                cause=e,
            )
    return out


def _encode(value: Any, target: Type, schema: Schema, *, strict: bool) -> Any:
    if isinstance(value, BaseModel):
        value = value.model_dump()

    match target:
        case OptionalType(inner=inner):
            return None if value is None else _encode(value, inner, schema, strict=strict)
        case UnionType():
            return _encode_union(value, target, schema)

    if value is None:
        raise TypeMismatchError(str(target), "null")

    match target:
        case Primitive():
            return _encode_primitive(value, target, strict=strict)
        case LiteralType():
            if not target.matches(value):
                raise TypeMismatchError(str(target), repr(value))
            return value
        case ListType(inner=inner):
            if not isinstance(value, (list, tuple)):
                raise TypeMismatchError(str(target), raw_kind(value))
            out = []
            for i, item in enumerate(value):
                try:
                    out.append(_encode(item, inner, schema, strict=strict))
                except DecodeError as e:
                    raise e.with_prefix(i)
            return out
        case MapType(key=key_type, value=value_type):
            if not isinstance(value, Mapping):
                raise TypeMismatchError(str(target), raw_kind(value))
            out = {}
            for k, item in value.items():
                label = str(k)
                try:
                    out[_encode(k, key_type, schema, strict=strict)] = _encode(
                        item, value_type, schema, strict=strict
                    )
                except DecodeError as e:
                    raise e.with_prefix(label)
            return out
        case ClassRef(name=name):
            return _encode_class(value, schema.get_class(name), schema)
        case EnumRef(name=name):
            return _encode_enum(value, name, schema)
        case MediaType(kind=kind):
            if isinstance(value, MediaRef):
                if value.kind != kind:
                    raise TypeMismatchError(kind, value.kind)
                return value.to_raw()
            if isinstance(value, str) and value:
                return value
            if isinstance(value, Mapping) and (
                isinstance(value.get("url"), str)
                or isinstance(value.get("base64"), str)
                and isinstance(value.get("media_type"), str)
            ):
                return dict(value)
    raise TypeMismatchError(str(target), raw_kind(value))


def _encode_primitive(value: Any, target: Primitive, *, strict: bool) -> Any:
    match target.kind:
        case PrimitiveKind.STRING if isinstance(value, str):
            return value
        case PrimitiveKind.BOOL if isinstance(value, bool):
            return value
        case PrimitiveKind.INT if isinstance(value, int) and not isinstance(
            value, bool
        ):
            return value
        case PrimitiveKind.FLOAT if isinstance(value, float):
            return value
        case PrimitiveKind.FLOAT if (
            not strict and isinstance(value, int) and not isinstance(value, bool)
        ):
            return float(value)
        case PrimitiveKind.BYTES if isinstance(value, (bytes, bytearray)):
            return bytes(value)
    raise TypeMismatchError(str(target), raw_kind(value))


def _encode_class(value: Any, cdef: ClassDef, schema: Schema) -> Any:
    match value:
        case Record() | DynamicRecord():
            if value.class_name != cdef.name:
                raise TypeMismatchError(cdef.name, value.class_name)
            if isinstance(value, Record) and cdef.is_dynamic:
                raise TypeMismatchError(f"dynamic {cdef.name}", "Record")
            data = dict(value.fields)
        case Mapping():
            data = dict(value)
        case _:
            raise TypeMismatchError(cdef.name, raw_kind(value))

    out: dict[str, Any] = {}
    for f in cdef.fields:
        key = f.name if f.name in data else f.raw_key
        if key not in data:
            if f.required and not cdef.is_dynamic:
                raise MissingFieldError(
                    f.name, class_name=cdef.name, path=(f.name,)
                )
            continue
        try:
            out[f.raw_key] = _encode(data.pop(key), f.type, schema, strict=False)
        except DecodeError as e:
            raise e.with_prefix(f.name)

    if not cdef.is_dynamic:
        return out
    out.update((k, to_builtins(v)) for k, v in data.items())
    return Checked(out, cdef.name)


def _encode_enum(value: Any, enum_name: str, schema: Schema) -> str:
    edef = schema.get_enum(enum_name)
    match value:
        case EnumValue(enum_name=name, value=v):
            if name != enum_name:
                raise TypeMismatchError(enum_name, name)
        case enum.Enum(value=str() as v):
            pass
        case str():
            v = value
        case _:
            raise TypeMismatchError(enum_name, raw_kind(value))
    if not edef.has(v):
        raise UnknownEnumValueError(v, enum_name=enum_name, allowed=edef.value_names)
    return v


def _encode_union(value: Any, target: UnionType, schema: Schema) -> Any:
    # host values name their variant
    tag = None
    match value:
        case Record(class_name=tag) | DynamicRecord(class_name=tag):
            pass
        case EnumValue(enum_name=tag):
            pass
    if tag is not None and (variant := target.variant(tag)) is not None:
        return _checked(_encode(value, variant, schema, strict=False), variant)

    # exact kinds first, so 3 is not sent as the float variant of float | int
    attempts: dict[str, DecodeError] = {}
    for strict in (True, False):
        for variant in target.variants:
            try:
                raw = _encode(value, variant, schema, strict=strict)
            except DecodeError as e:
                attempts[variant.name] = e
                continue
            return _checked(raw, variant)
    raise NoUnionVariantMatchedError(str(target), attempts=attempts)


def _checked(raw: Any, variant: Type) -> Any:
    if raw is None or (isinstance(raw, Checked) and raw.type_name == variant.name):
        return raw
    return Checked(raw, variant.name)
