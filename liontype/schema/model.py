# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .._errors import DuplicateNameError, SchemaError, UnresolvedReferenceError
from .types import ClassRef, EnumRef, OptionalType, Type

__all__ = (
    "ClassDef",
    "EnumDef",
    "EnumValueDef",
    "FieldDef",
    "Schema",
)


def _check_name(name: Any, what: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise SchemaError(f"{what} name must be a non-empty string, got {name!r}")


def _check_unique(names: Iterable[str], namespace: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DuplicateNameError(name, namespace=namespace)
        seen.add(name)


@dataclass(frozen=True, slots=True)
class FieldDef:
    name: str
    type: Type
    description: str | None = None
    alias: str | None = None
    """Raw key to read instead of ``name``."""
    is_dynamic_extra: bool = False
    """True for fields added at runtime to a dynamic class."""

    def __post_init__(self):
        _check_name(self.name, "Field")
        if self.alias is not None:
            _check_name(self.alias, "Field alias")
        if not isinstance(self.type, Type):
            raise SchemaError(
                f"Field {self.name!r} needs a Type, got {type(self.type).__name__}"
            )

    @property
    def raw_key(self) -> str:
        return self.alias or self.name

    @property
    def required(self) -> bool:
        return not isinstance(self.type, OptionalType)


@dataclass(frozen=True, slots=True)
class ClassDef:
    name: str
    fields: tuple[FieldDef, ...] = ()
    is_dynamic: bool = False
    description: str | None = None

    def __post_init__(self):
        _check_name(self.name, "Class")
        object.__setattr__(self, "fields", tuple(self.fields))
        _check_unique(
            (f.name for f in self.fields), f"field of class {self.name}"
        )
        _check_unique(
            (f.raw_key for f in self.fields), f"raw key of class {self.name}"
        )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> FieldDef | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True, slots=True)
class EnumValueDef:
    value: str
    description: str | None = None

    def __post_init__(self):
        _check_name(self.value, "Enum value")


@dataclass(frozen=True, slots=True)
class EnumDef:
    name: str
    values: tuple[EnumValueDef, ...] = ()
    is_dynamic: bool = False
    """Dynamic enums may gain values from a builder overlay."""
    description: str | None = None

    def __post_init__(self):
        _check_name(self.name, "Enum")
        values = tuple(
            v if isinstance(v, EnumValueDef) else EnumValueDef(v)
            for v in self.values
        )
        object.__setattr__(self, "values", values)
        _check_unique((v.value for v in values), f"value of enum {self.name}")

    @property
    def value_names(self) -> tuple[str, ...]:
        return tuple(v.value for v in self.values)

    def has(self, value: str) -> bool:
        return any(v.value == value for v in self.values)


@dataclass(frozen=True, slots=True, eq=False)
class Schema:
    """Immutable set of class and enum definitions.

    Every ``ClassRef``/``EnumRef`` used by a field must resolve within the
    same schema; this is checked on construction, so a built schema never
    fails a lookup while decoding.
    """

    classes: Mapping[str, ClassDef] = field(default_factory=dict)
    enums: Mapping[str, EnumDef] = field(default_factory=dict)

    def __post_init__(self):
        for key, cdef in self.classes.items():
            if key != cdef.name:
                raise SchemaError(f"Class key {key!r} != name {cdef.name!r}")
        for key, edef in self.enums.items():
            if key != edef.name:
                raise SchemaError(f"Enum key {key!r} != name {edef.name!r}")
        object.__setattr__(self, "classes", MappingProxyType(dict(self.classes)))
        object.__setattr__(self, "enums", MappingProxyType(dict(self.enums)))
        for cdef in self.classes.values():
            for f in cdef.fields:
                self.validate_type(f.type, where=f"{cdef.name}.{f.name}")

    @classmethod
    def from_defs(
        cls,
        classes: Iterable[ClassDef] = (),
        enums: Iterable[EnumDef] = (),
    ) -> Schema:
        """Build a schema from definitions, rejecting duplicate names."""
        classes, enums = tuple(classes), tuple(enums)
        _check_unique((c.name for c in classes), "class")
        _check_unique((e.name for e in enums), "enum")
        return cls(
            classes={c.name: c for c in classes},
            enums={e.name: e for e in enums},
        )

    @classmethod
    def empty(cls) -> Schema:
        return cls()

    def merge(self, overlay: Schema | None) -> Schema:
        """Return a new schema where ``overlay`` wins on name collisions."""
        if overlay is None or overlay is self:
            return self
        return type(self)(
            classes={**self.classes, **overlay.classes},
            enums={**self.enums, **overlay.enums},
        )

    def validate_type(self, type_: Type, *, where: str | None = None) -> Type:
        """Raise ``UnresolvedReferenceError`` if ``type_`` names anything unknown."""
        for ref in type_.refs():
            if isinstance(ref, ClassRef) and ref.name not in self.classes:
                raise UnresolvedReferenceError(ref.name, kind="class", where=where)
            if isinstance(ref, EnumRef) and ref.name not in self.enums:
                raise UnresolvedReferenceError(ref.name, kind="enum", where=where)
        return type_

    def get_class(self, name: str) -> ClassDef:
        try:
            return self.classes[name]
        except KeyError:
            raise UnresolvedReferenceError(name, kind="class") from None

    def get_enum(self, name: str) -> EnumDef:
        try:
            return self.enums[name]
        except KeyError:
            raise UnresolvedReferenceError(name, kind="enum") from None

    def __contains__(self, name: object) -> bool:
        return name in self.classes or name in self.enums

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return dict(self.classes) == dict(other.classes) and dict(
            self.enums
        ) == dict(other.enums)

    def __hash__(self) -> int:
        return hash(
            (
                tuple(sorted(self.classes.items())),
                tuple(sorted(self.enums.items())),
            )
        )

    def __repr__(self) -> str:
        return (
            f"Schema(classes={list(self.classes)}, enums={list(self.enums)})"
        )
