# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Pydantic projection of schema classes."""

from __future__ import annotations

import functools
import typing
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, create_model

from ..ln import Enum
from ..schema import (
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
from ..values import DynamicRecord, Record

__all__ = ("PydanticSchemaAdapter",)

_PRIMITIVES: dict[PrimitiveKind, type] = {
    PrimitiveKind.STRING: str,
    PrimitiveKind.INT: int,
    PrimitiveKind.FLOAT: float,
    PrimitiveKind.BOOL: bool,
    PrimitiveKind.BYTES: bytes,
}

# raw media forms, as produced by MediaRef.to_raw()
_MEDIA = str | dict[str, str]


class _ModelBuilder:
    """Builds the models reachable from one class, sharing a namespace."""

    def __init__(self, schema: Schema):
        self.schema = schema
        self.models: dict[str, type[BaseModel]] = {}
        self.enums: dict[str, type[Enum]] = {}

    def build(self, class_name: str) -> type[BaseModel]:
        self._model(class_name)
        namespace = {**self.models, **self.enums}
        for model in self.models.values():
            model.model_rebuild(_types_namespace=namespace)
        return self.models[class_name]

    def _model(self, class_name: str) -> None:
        if class_name in self.models:
            return
        cdef = self.schema.get_class(class_name)
        # placeholder so self-references stop recursing
        self.models[class_name] = None  # type: ignore[assignment]

        fields = {}
        for f in cdef.fields:
            default = None if not f.required else ...
            fields[f.name] = (
                self._annotation(f.type),
                Field(default, alias=f.alias, description=f.description),
            )
        config = ConfigDict(
            extra="allow" if cdef.is_dynamic else "ignore",
            populate_by_name=True,
            use_enum_values=True,
        )
        model = create_model(
            class_name, __config__=config, __doc__=cdef.description, **fields
        )
        self.models[class_name] = model

    def _enum(self, enum_name: str) -> type[Enum]:
        if enum_name not in self.enums:
            edef = self.schema.get_enum(enum_name)
            self.enums[enum_name] = Enum(
                enum_name, [(v, v) for v in edef.value_names], type=str
            )
        return self.enums[enum_name]

    def _annotation(self, t: Type) -> Any:
        match t:
            case Primitive(kind=kind):
                return _PRIMITIVES[kind]
            case LiteralType(value=value):
                return Literal[value]
            case MediaType():
                return _MEDIA
            case OptionalType(inner=inner):
                return typing.Optional[self._annotation(inner)]
            case ListType(inner=inner):
                return list[self._annotation(inner)]
            case MapType(key=key, value=value):
                return dict[self._annotation(key), self._annotation(value)]
            case UnionType(variants=variants):
                return typing.Union[tuple(self._annotation(v) for v in variants)]
            case ClassRef(name=name):
                self._model(name)
                # resolved by model_rebuild()
                return typing.ForwardRef(name)
            case EnumRef(name=name):
                return self._enum(name)
        raise TypeError(f"No pydantic annotation for {t}")


@functools.lru_cache(maxsize=128)
def _cached_model(schema: Schema, class_name: str) -> type[BaseModel]:
    return _ModelBuilder(schema).build(class_name)


class PydanticSchemaAdapter:
    """Converts between schema classes and pydantic models.

    Models are cached per (schema, class name); equal schemas share them.
    """

    @classmethod
    def create_model(cls, class_name: str, schema: Schema) -> type[BaseModel]:
        """Pydantic model class for ``class_name``, nested classes included."""
        return _cached_model(schema, class_name)

    @classmethod
    def to_model(cls, record: Record | DynamicRecord, schema: Schema) -> BaseModel:
        """Validate a decoded record into its pydantic model."""
        model_cls = cls.create_model(record.class_name, schema)
        return model_cls.model_validate(record.to_dict())

    @classmethod
    def from_model(cls, instance: BaseModel) -> dict[str, Any]:
        """Dump a model instance for argument encoding."""
        return instance.model_dump()
