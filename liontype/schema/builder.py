# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Runtime schema builder.

``TypeBuilder`` assembles a schema overlay from declarations made at call
time. Classes and enums are allocated in an arena: each handle gets a
stable id when created, field types refer to handles by id, and ids are
only turned into ``ClassRef``/``EnumRef`` by ``finalize()``. This lets
runtime classes reference each other (including mutually) before either
is complete.

Example:
    >>> tb = TypeBuilder(base=static_schema)
    >>> person = tb.new_class("Person")
    >>> pet = tb.new_class("Pet")
    >>> person.add_field("name", "string").add_field("pets", tb.list(pet))
    >>> pet.add_field("owner", tb.optional(person))
    >>> tb.extend_class("DynamicEmployee").add_field("team", str)
    >>> overlay = tb.finalize()
"""

from __future__ import annotations

import builtins
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Literal

from .._errors import DuplicateNameError, SchemaError, UnresolvedReferenceError
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
    OptionalType,
    Type,
    UnionType,
)

__all__ = (
    "ClassHandle",
    "EnumHandle",
    "TypeBuilder",
    "TypeExpr",
)

logger = logging.getLogger(__name__)

# shared by all builders, so a handle id never collides with a foreign one
_HANDLE_IDS = itertools.count(1)

_TAGS: dict[str, Type] = {
    "string": STRING,
    "str": STRING,
    "int": INT,
    "float": FLOAT,
    "bool": BOOL,
    "bytes": BYTES,
    "image": IMAGE,
    "audio": AUDIO,
}

_PY_TYPES: dict[type, Type] = {
    str: STRING,
    int: INT,
    float: FLOAT,
    bool: BOOL,
    bytes: BYTES,
}

TypeExpr = Any
"""Anything ``TypeBuilder.type_of`` accepts."""


@dataclass(frozen=True, slots=True)
class _PendingRef(Type):
    """Arena reference to a handle, resolved at ``finalize()``."""

    handle_id: int
    kind: Literal["class", "enum"]
    label: str

    def __str__(self) -> str:
        return self.label

    def is_string_keyable(self) -> bool:
        return self.kind == "enum"


class _Handle:
    __slots__ = ("_builder", "id", "name", "description", "is_dynamic", "_extends")

    kind: str = ""

    def __init__(
        self,
        builder: TypeBuilder,
        id: int,
        name: str,
        *,
        description: str | None,
        is_dynamic: bool,
        extends: bool = False,
    ):
        self._builder = builder
        self.id = id
        self.name = name
        self.description = description
        self.is_dynamic = is_dynamic
        self._extends = extends

    @property
    def type(self) -> Type:
        """A type expression referring to this handle."""
        return _PendingRef(self.id, self.kind, self.name)

    def optional(self) -> OptionalType:
        return self.type.optional()

    def list(self) -> ListType:
        return self.type.list()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, name={self.name!r})"


class ClassHandle(_Handle):
    kind = "class"
    __slots__ = ("fields",)

    def __init__(self, *args: Any, **kw: Any):
        super().__init__(*args, **kw)
        self.fields: list[FieldDef] = []

    def add_field(
        self,
        name: str,
        type_expr: TypeExpr,
        description: str | None = None,
        *,
        alias: str | None = None,
    ) -> ClassHandle:
        self._builder.add_field(self, name, type_expr, description, alias=alias)
        return self


class EnumHandle(_Handle):
    kind = "enum"
    __slots__ = ("values",)

    def __init__(self, *args: Any, **kw: Any):
        super().__init__(*args, **kw)
        self.values: list[EnumValueDef] = []

    def add_value(self, value: str, description: str | None = None) -> EnumHandle:
        self._builder.add_enum_value(self, value, description)
        return self


class TypeBuilder:
    """Mutable, single-use builder of a schema overlay.

    Args:
        base: The static schema. Named references (``class_ref``/
            ``enum_ref``) and ``extend_class``/``extend_enum`` resolve
            against it; the overlay returned by ``finalize()`` wins over it
            on name collisions when merged.
    """

    def __init__(self, base: Schema | None = None):
        self.base = base or Schema.empty()
        self._ids = _HANDLE_IDS
        self._classes: dict[int, ClassHandle] = {}
        self._enums: dict[int, EnumHandle] = {}
        self._overlay: Schema | None = None

    # -- handles ------------------------------------------------------------

    def new_class(
        self,
        name: str,
        *,
        dynamic: bool = False,
        description: str | None = None,
    ) -> ClassHandle:
        self._check_open()
        _require_name(name, "Class")
        handle = ClassHandle(
            self, next(self._ids), name, description=description, is_dynamic=dynamic
        )
        self._classes[handle.id] = handle
        return handle

    def new_enum(
        self,
        name: str,
        *,
        dynamic: bool = False,
        description: str | None = None,
    ) -> EnumHandle:
        self._check_open()
        _require_name(name, "Enum")
        handle = EnumHandle(
            self, next(self._ids), name, description=description, is_dynamic=dynamic
        )
        self._enums[handle.id] = handle
        return handle

    def extend_class(self, name: str) -> ClassHandle:
        """Handle seeded with a dynamic base class; new fields are extras."""
        self._check_open()
        for handle in self._classes.values():
            if handle.name == name and handle._extends:
                return handle
        cdef = self.base.get_class(name)
        if not cdef.is_dynamic:
            raise SchemaError(
                f"Class {name!r} is not dynamic and cannot be extended",
                details={"class_name": name},
            )
        handle = self.new_class(
            name, dynamic=True, description=cdef.description
        )
        handle._extends = True
        handle.fields.extend(cdef.fields)
        return handle

    def extend_enum(self, name: str) -> EnumHandle:
        """Handle seeded with a dynamic base enum; new values are appended."""
        self._check_open()
        for handle in self._enums.values():
            if handle.name == name and handle._extends:
                return handle
        edef = self.base.get_enum(name)
        if not edef.is_dynamic:
            raise SchemaError(
                f"Enum {name!r} is not dynamic and cannot be extended",
                details={"enum_name": name},
            )
        handle = self.new_enum(name, dynamic=True, description=edef.description)
        handle._extends = True
        handle.values.extend(edef.values)
        return handle

    # -- members ------------------------------------------------------------

    def add_field(
        self,
        handle: ClassHandle,
        name: str,
        type_expr: TypeExpr,
        description: str | None = None,
        *,
        alias: str | None = None,
    ) -> None:
        self._check_open()
        self._check_owned(handle, self._classes)
        _require_name(name, "Field")
        handle.fields.append(
            FieldDef(
                name=name,
                type=self.type_of(type_expr),
                description=description,
                alias=alias,
                is_dynamic_extra=handle._extends,
            )
        )

    def add_enum_value(
        self, handle: EnumHandle, value: str, description: str | None = None
    ) -> None:
        self._check_open()
        self._check_owned(handle, self._enums)
        _require_name(value, "Enum value")
        handle.values.append(EnumValueDef(value, description))

    # -- type expressions ---------------------------------------------------

    def type_of(self, expr: TypeExpr) -> Type:
        """Normalize a type expression into a ``Type``.

        Accepts a ``Type``, a handle, a primitive tag (``"string"``,
        ``"int"``...), a Python type (``str``, ``int``...), a tuple of
        expressions (a union), or an example value whose primitive kind is
        inferred (``42`` declares an int field).
        """
        match expr:
            case Type():
                return expr
            case ClassHandle() | EnumHandle():
                self._check_owned(
                    expr, self._classes if expr.kind == "class" else self._enums
                )
                return expr.type
            case str():
                try:
                    return _TAGS[expr]
                except KeyError:
                    raise SchemaError(
                        f"Unknown type tag: {expr!r}",
                        details={"allowed": sorted(_TAGS)},
                    ) from None
            case builtins.type() if expr in _PY_TYPES:
                return _PY_TYPES[expr]
            case tuple() if expr:
                return self.union(*expr)
            case bool():
                return BOOL
            case int():
                return INT
            case float():
                return FLOAT
            case bytes():
                return BYTES
        raise SchemaError(
            f"Cannot interpret {expr!r} as a type expression",
            details={"type": type(expr).__name__},
        )

    def string(self) -> Type:
        return STRING

    def int(self) -> Type:
        return INT

    def float(self) -> Type:
        return FLOAT

    def bool(self) -> Type:
        return BOOL

    def bytes(self) -> Type:
        return BYTES

    def image(self) -> Type:
        return IMAGE

    def audio(self) -> Type:
        return AUDIO

    def literal(self, value: str | builtins.int | builtins.bool) -> Type:
        return LiteralType(value)

    def list(self, inner: TypeExpr) -> Type:
        return ListType(self.type_of(inner))

    def optional(self, inner: TypeExpr) -> Type:
        return self.type_of(inner).optional()

    def map(self, key: TypeExpr, value: TypeExpr) -> Type:
        return MapType(self.type_of(key), self.type_of(value))

    def union(self, *variants: TypeExpr) -> Type:
        return UnionType(tuple(self.type_of(v) for v in variants))

    def class_ref(self, name: str) -> Type:
        """Reference a class by name (checked at ``finalize()``)."""
        _require_name(name, "Class")
        return ClassRef(name)

    def enum_ref(self, name: str) -> Type:
        """Reference an enum by name (checked at ``finalize()``)."""
        _require_name(name, "Enum")
        return EnumRef(name)

    # -- finalize -----------------------------------------------------------

    @property
    def finalized(self) -> bool:
        return self._overlay is not None

    def finalize(self) -> Schema:
        """Resolve references and return the overlay schema.

        Raises:
            DuplicateNameError: two classes/enums/fields/values share a name.
            UnresolvedReferenceError: a reference names nothing in this
                builder or in the base schema.
        """
        if self._overlay is not None:
            return self._overlay

        class_handles = builtins.list(self._classes.values())
        enum_handles = builtins.list(self._enums.values())
        _unique((h.name for h in class_handles), "class")
        _unique((h.name for h in enum_handles), "enum")

        names = {h.id: h.name for h in class_handles}
        names.update((h.id, h.name) for h in enum_handles)

        def resolve(t: Type) -> Type:
            if isinstance(t, _PendingRef):
                if t.handle_id not in names:
                    raise UnresolvedReferenceError(
                        t.label, kind=t.kind, where="another TypeBuilder"
                    )
                return (ClassRef if t.kind == "class" else EnumRef)(
                    names[t.handle_id]
                )
            return t.map_children(resolve)

        classes = [
            ClassDef(
                name=h.name,
                fields=tuple(
                    FieldDef(
                        name=f.name,
                        type=resolve(f.type),
                        description=f.description,
                        alias=f.alias,
                        is_dynamic_extra=f.is_dynamic_extra,
                    )
                    for f in h.fields
                ),
                is_dynamic=h.is_dynamic,
                description=h.description,
            )
            for h in class_handles
        ]
        enums = [
            EnumDef(
                name=h.name,
                values=tuple(h.values),
                is_dynamic=h.is_dynamic,
                description=h.description,
            )
            for h in enum_handles
        ]
        overlay = _self_contained(classes, enums, self.base)

        self._overlay = overlay
        logger.debug(
            "finalized overlay: %d classes, %d enums",
            len(overlay.classes),
            len(overlay.enums),
        )
        return overlay

    def schema(self) -> Schema:
        """The base schema merged with the finalized overlay."""
        return self.base.merge(self.finalize())

    # -- helpers ------------------------------------------------------------

    def _check_open(self) -> None:
        if self._overlay is not None:
            raise SchemaError("TypeBuilder is finalized; create a new builder")

    def _check_owned(self, handle: _Handle, registry: dict) -> None:
        if registry.get(handle.id) is not handle:
            raise SchemaError(
                f"{handle!r} belongs to a different TypeBuilder",
                details={"name": handle.name},
            )


def _require_name(name: Any, what: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise SchemaError(f"{what} name must be a non-empty string, got {name!r}")


def _unique(names, namespace: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DuplicateNameError(name, namespace=namespace)
        seen.add(name)


def _self_contained(
    classes: list[ClassDef], enums: list[EnumDef], base: Schema
) -> Schema:
    """Overlay plus every base definition it reaches through references.

    Pulling referenced base definitions in keeps the overlay a valid schema
    on its own; merging it back over ``base`` is unaffected since the
    copies are identical.
    """
    own_classes = {c.name: c for c in classes}
    own_enums = {e.name: e for e in enums}
    extra_classes: dict[str, ClassDef] = {}
    extra_enums: dict[str, EnumDef] = {}

    pending = [f.type for c in classes for f in c.fields]
    while pending:
        for ref in pending.pop().refs():
            if isinstance(ref, ClassRef):
                if ref.name in own_classes or ref.name in extra_classes:
                    continue
                if ref.name not in base.classes:
                    raise UnresolvedReferenceError(ref.name, kind="class")
                cdef = base.classes[ref.name]
                extra_classes[ref.name] = cdef
                pending.extend(f.type for f in cdef.fields)
            elif ref.name not in own_enums and ref.name not in extra_enums:
                if ref.name not in base.enums:
                    raise UnresolvedReferenceError(ref.name, kind="enum")
                extra_enums[ref.name] = base.enums[ref.name]

    return Schema.from_defs(
        classes=[*classes, *extra_classes.values()],
        enums=[*enums, *extra_enums.values()],
    )
