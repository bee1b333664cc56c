# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Final, Literal, TypeVar, Union

__all__ = (
    "MaybeUnset",
    "Undefined",
    "UndefinedType",
    "Unset",
    "UnsetType",
    "is_sentinel",
)

T = TypeVar("T")


class _SingletonMeta(type):
    """Metaclass that guarantees exactly one instance per subclass."""

    _cache: dict[type, _SingletonType] = {}

    def __call__(cls, *a, **kw):
        if cls not in cls._cache:
            cls._cache[cls] = super().__call__(*a, **kw)
        return cls._cache[cls]


class _SingletonType(metaclass=_SingletonMeta):
    """Base class for singleton sentinel types.

    Sentinels keep their identity across copy/deepcopy/pickle and are
    always falsy, so ``value is Unset`` is the only test callers need.
    """

    __slots__: tuple[str, ...] = ()

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    # concrete classes *must* override the two methods below
    def __bool__(self) -> bool: ...
    def __repr__(self) -> str: ...


class UndefinedType(_SingletonType):
    """Sentinel for a key or field entirely missing from a namespace.

    Example:
        >>> d = {"a": 1}
        >>> d.get("b", Undefined) is Undefined
        True
    """

    __slots__ = ()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Undefined"]:
        return "Undefined"

    def __str__(self) -> Literal["Undefined"]:
        return "Undefined"

    def __reduce__(self):
        return "Undefined"


class UnsetType(_SingletonType):
    """Sentinel for a value that is expected but not materialized yet.

    The partial reconciler puts ``Unset`` wherever a streamed value has
    not arrived (a missing class field, a number still being written, an
    ambiguous union). It never appears in the result of a full decode.

    Example:
        >>> record = decode_partial({"name": "Jo"}, ClassRef("Resume"), schema)
        >>> record["company"] is Unset
        True
    """

    __slots__ = ()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Unset"]:
        return "Unset"

    def __str__(self) -> Literal["Unset"]:
        return "Unset"

    def __reduce__(self):
        return "Unset"


Undefined: Final = UndefinedType()
"""A key or field entirely missing from a namespace"""
Unset: Final = UnsetType()
"""A value expected but not yet materialized."""

MaybeUnset = Union[T, UnsetType]

_EMPTY_TUPLE = (tuple(), set(), frozenset(), dict(), list(), "")


def is_sentinel(
    value: Any,
    *,
    none_as_sentinel: bool = False,
    empty_as_sentinel: bool = False,
) -> bool:
    """Check if a value is any sentinel (Undefined or Unset).

    Args:
        value: Any value to check.
        none_as_sentinel: Also treat ``None`` as a sentinel.
        empty_as_sentinel: Also treat empty containers/strings as sentinel.
    """
    if isinstance(value, (UndefinedType, UnsetType)):
        return True
    if none_as_sentinel and value is None:
        return True
    if empty_as_sentinel and value in _EMPTY_TUPLE:
        return True
    return False
