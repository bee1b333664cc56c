# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Type expressions of the schema model.

Every type is a frozen, hashable dataclass. ``ClassRef``/``EnumRef`` point
into a :class:`~liontype.schema.model.Schema` by name; resolution happens
when a schema is built, never while decoding.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Literal

from .._errors import SchemaError
from ..ln import Enum

__all__ = (
    "AUDIO",
    "BOOL",
    "BYTES",
    "FLOAT",
    "IMAGE",
    "INT",
    "STRING",
    "ClassRef",
    "EnumRef",
    "ListType",
    "LiteralType",
    "MapType",
    "MediaType",
    "OptionalType",
    "Primitive",
    "PrimitiveKind",
    "Type",
    "UnionType",
)


class PrimitiveKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    BYTES = "bytes"


class Type:
    """Base of all type expressions."""

    __slots__ = ()

    @property
    def name(self) -> str:
        """Stable name, also used as the union tag of ``Checked`` values."""
        return str(self)

    def optional(self) -> OptionalType:
        if isinstance(self, OptionalType):
            return self
        return OptionalType(self)

    def list(self) -> ListType:
        return ListType(self)

    def children(self) -> tuple[Type, ...]:
        return ()

    def map_children(self, fn: Callable[[Type], Type]) -> Type:
        """Rebuild this type with ``fn`` applied to each direct child."""
        return self

    def walk(self) -> Iterator[Type]:
        yield self
        for child in self.children():
            yield from child.walk()

    def refs(self) -> Iterator[ClassRef | EnumRef]:
        for t in self.walk():
            if isinstance(t, (ClassRef, EnumRef)):
                yield t

    def is_string_keyable(self) -> bool:
        return False

    def _render_nested(self) -> str:
        return str(self)


@dataclass(frozen=True, slots=True)
class Primitive(Type):
    kind: PrimitiveKind

    def __post_init__(self):
        if not isinstance(self.kind, PrimitiveKind):
            try:
                object.__setattr__(self, "kind", PrimitiveKind(self.kind))
            except ValueError:
                raise SchemaError(
                    f"Unknown primitive kind: {self.kind!r}",
                    details={"allowed": list(PrimitiveKind.allowed())},
                ) from None

    def __str__(self) -> str:
        return self.kind.value

    def is_string_keyable(self) -> bool:
        return self.kind is PrimitiveKind.STRING


@dataclass(frozen=True, slots=True, eq=False)
class LiteralType(Type):
    """A singleton type: the raw value must equal ``value``."""

    value: str | int | bool

    def __post_init__(self):
        if not isinstance(self.value, (str, int, bool)):
            raise SchemaError(
                "Literal types accept str, int or bool values, got "
                f"{type(self.value).__name__}"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LiteralType):
            return NotImplemented
        return self.matches(other.value)

    def __hash__(self) -> int:
        return hash((LiteralType, type(self.value), self.value))

    def __str__(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if isinstance(self.value, str):
            return f'"{self.value}"'
        return str(self.value)

    def matches(self, raw: Any) -> bool:
        return type(raw) is type(self.value) and raw == self.value

    def is_string_keyable(self) -> bool:
        return isinstance(self.value, str)


@dataclass(frozen=True, slots=True)
class MediaType(Type):
    kind: Literal["image", "audio"]

    def __post_init__(self):
        if self.kind not in ("image", "audio"):
            raise SchemaError(f"Unknown media kind: {self.kind!r}")

    def __str__(self) -> str:
        return self.kind


@dataclass(frozen=True, slots=True)
class ClassRef(Type):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class EnumRef(Type):
    name: str

    def __str__(self) -> str:
        return self.name

    def is_string_keyable(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class OptionalType(Type):
    inner: Type

    def __str__(self) -> str:
        return f"{self.inner} | null"

    def _render_nested(self) -> str:
        return f"({self})"

    def children(self) -> tuple[Type, ...]:
        return (self.inner,)

    def map_children(self, fn):
        return OptionalType(fn(self.inner))


@dataclass(frozen=True, slots=True)
class ListType(Type):
    inner: Type

    def __str__(self) -> str:
        return f"{self.inner._render_nested()}[]"

    def children(self) -> tuple[Type, ...]:
        return (self.inner,)

    def map_children(self, fn):
        return ListType(fn(self.inner))


@dataclass(frozen=True, slots=True)
class MapType(Type):
    key: Type
    value: Type

    def __post_init__(self):
        if not self.key.is_string_keyable():
            raise SchemaError(
                f"Map keys must be string-typed, got {self.key}",
                details={"key": str(self.key)},
            )

    def __str__(self) -> str:
        return f"map<{self.key}, {self.value}>"

    def children(self) -> tuple[Type, ...]:
        return (self.key, self.value)

    def map_children(self, fn):
        return MapType(fn(self.key), fn(self.value))


@dataclass(frozen=True, slots=True)
class UnionType(Type):
    """Ordered variants; without a ``Checked`` tag the first match wins."""

    variants: tuple[Type, ...]

    def __post_init__(self):
        variants = tuple(self.variants)
        if not variants:
            raise SchemaError("A union needs at least one variant")
        names = [v.name for v in variants]
        if len(set(names)) != len(names):
            dupes = sorted({n for n in names if names.count(n) > 1})
            raise SchemaError(
                f"Union variants must have distinct names: {dupes}",
                details={"duplicates": dupes},
            )
        object.__setattr__(self, "variants", variants)

    def __str__(self) -> str:
        return " | ".join(str(v) for v in self.variants)

    def _render_nested(self) -> str:
        return f"({self})"

    def children(self) -> tuple[Type, ...]:
        return self.variants

    def map_children(self, fn):
        return UnionType(tuple(fn(v) for v in self.variants))

    def variant(self, name: str) -> Type | None:
        for v in self.variants:
            if v.name == name:
                return v
        return None


STRING = Primitive(PrimitiveKind.STRING)
INT = Primitive(PrimitiveKind.INT)
FLOAT = Primitive(PrimitiveKind.FLOAT)
BOOL = Primitive(PrimitiveKind.BOOL)
BYTES = Primitive(PrimitiveKind.BYTES)
IMAGE = MediaType("image")
AUDIO = MediaType("audio")
