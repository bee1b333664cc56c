# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .builder import ClassHandle, EnumHandle, TypeBuilder, TypeExpr
from .model import ClassDef, EnumDef, EnumValueDef, FieldDef, Schema
from .types import (
    AUDIO,
    BOOL,
    BYTES,
    FLOAT,
    IMAGE,
    INT,
    STRING,
    ClassRef,
    EnumRef,
    ListType,
    LiteralType,
    MapType,
    MediaType,
    OptionalType,
    Primitive,
    PrimitiveKind,
    Type,
    UnionType,
)

__all__ = (
    "AUDIO",
    "BOOL",
    "BYTES",
    "FLOAT",
    "IMAGE",
    "INT",
    "STRING",
    "ClassDef",
    "ClassHandle",
    "ClassRef",
    "EnumDef",
    "EnumHandle",
    "EnumRef",
    "EnumValueDef",
    "FieldDef",
    "ListType",
    "LiteralType",
    "MapType",
    "MediaType",
    "OptionalType",
    "Primitive",
    "PrimitiveKind",
    "Schema",
    "Type",
    "TypeBuilder",
    "TypeExpr",
    "UnionType",
)
