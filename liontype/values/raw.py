# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Raw values: the untyped trees an execution engine hands back.

A raw value is plain Python data (``None``, ``bool``, ``int``, ``float``,
``str``, ``bytes``, ``list``, ``dict`` with ``str`` keys) plus two wrappers:

- ``Checked(value, type_name)`` carries the concrete type the engine
  resolved for a union member or a dynamic class instance.
- ``Pending(value)`` marks a value that is still being streamed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

__all__ = (
    "Checked",
    "Pending",
    "RawValue",
    "raw_kind",
    "strip",
    "unwrap",
)


@dataclass(frozen=True, slots=True)
class Checked:
    """A raw value annotated with its resolved concrete type name."""

    value: Any
    type_name: str

    def __post_init__(self):
        if not isinstance(self.type_name, str) or not self.type_name:
            raise ValueError("Checked.type_name must be a non-empty string")


@dataclass(frozen=True, slots=True)
class Pending:
    """A raw value that has not finished arriving."""

    value: Any


RawValue: TypeAlias = Any


def unwrap(raw: RawValue) -> tuple[RawValue, str | None, bool]:
    """Strip wrappers, returning ``(value, checked_type_name, pending)``.

    Wrappers may nest in either order; the innermost ``Checked`` tag wins.
    """
    type_name = None
    pending = False
    while isinstance(raw, (Checked, Pending)):
        if isinstance(raw, Pending):
            pending = True
        else:
            type_name = raw.type_name
        raw = raw.value
    return raw, type_name, pending


def raw_kind(raw: RawValue) -> str:
    """Short kind name of a raw value, used in error messages."""
    match raw:
        case None:
            return "null"
        case bool():
            return "bool"
        case int():
            return "int"
        case float():
            return "float"
        case str():
            return "string"
        case bytes() | bytearray():
            return "bytes"
        case list() | tuple():
            return "list"
        case dict():
            return "map"
        case Checked(type_name=name):
            return f"checked<{name}>"
        case Pending(value=inner):
            return f"pending<{raw_kind(inner)}>"
    return type(raw).__name__


def strip(raw: RawValue) -> tuple[Any, bool]:
    """Remove every wrapper in a raw tree.

    Returns the plain tree and whether any ``Pending`` was found in it.
    """
    value, _, pending = unwrap(raw)
    match value:
        case list() | tuple():
            items = []
            for item in value:
                plain, p = strip(item)
                items.append(plain)
                pending = pending or p
            return items, pending
        case dict():
            entries = {}
            for key, item in value.items():
                plain, p = strip(item)
                entries[key] = plain
                pending = pending or p
            return entries, pending
    return value, pending
