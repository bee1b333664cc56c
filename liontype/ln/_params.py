# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar

from typing_extensions import Self

from ._sentinel import Undefined, Unset, is_sentinel

__all__ = ("Params",)


@dataclass(slots=True, frozen=True, init=False, eq=False)
class Params:
    """Base class for keyword-only option bundles.

    Fields that are not passed are prefilled with ``Unset`` so callers can
    tell "not provided" apart from an explicit ``None``. Subclasses declare
    their fields as a frozen slotted dataclass with ``init=False``.
    """

    _none_as_sentinel: ClassVar[bool] = False
    """If True, None is treated as a sentinel value."""

    _prefill_unset: ClassVar[bool] = True
    """If True, unset fields are prefilled with Unset."""

    def __init__(self, **kwargs: Any):
        allowed = self.allowed()
        for k, v in kwargs.items():
            if k not in allowed:
                raise ValueError(f"Invalid parameter: {k}")
            object.__setattr__(self, k, v)
        self._validate()

    @classmethod
    def allowed(cls) -> frozenset[str]:
        """Return the public field names of this params class."""
        cached = cls.__dict__.get("_allowed_keys")
        if cached is None:
            cached = frozenset(
                f.name for f in fields(cls) if not f.name.startswith("_")
            )
            type.__setattr__(cls, "_allowed_keys", cached)
        return cached

    @classmethod
    def _is_sentinel(cls, value: Any) -> bool:
        return is_sentinel(value, none_as_sentinel=cls._none_as_sentinel)

    def _validate(self) -> None:
        if not self._prefill_unset:
            return
        for k in self.allowed():
            if getattr(self, k, Undefined) is Undefined:
                object.__setattr__(self, k, Unset)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a field value, or ``default`` when it is a sentinel."""
        value = getattr(self, key, Unset)
        return default if self._is_sentinel(value) else value

    def to_dict(self, exclude: set[str] | None = None) -> dict[str, Any]:
        exclude = exclude or set()
        return {
            k: v
            for k in sorted(self.allowed())
            if k not in exclude
            and not self._is_sentinel(v := getattr(self, k, Unset))
        }

    def with_updates(self, **kwargs: Any) -> Self:
        """Return a new instance with updated fields."""
        dict_ = self.to_dict()
        dict_.update(kwargs)
        return type(self)(**dict_)

    def merged(self, other: Params | None) -> Self:
        """Overlay the explicitly set fields of ``other`` onto this one."""
        if other is None:
            return self
        return self.with_updates(**other.to_dict())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Params):
            return NotImplemented
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    __hash__ = None
