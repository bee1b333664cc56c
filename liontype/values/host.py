# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Host values: what decoding produces.

``Record`` and ``DynamicRecord`` are deliberately unrelated classes; match
on the class, then on ``class_name``.
"""

from __future__ import annotations

import base64 as _b64
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

from ..ln import Unset, is_sentinel

__all__ = (
    "DynamicRecord",
    "EnumValue",
    "MediaRef",
    "Record",
    "to_builtins",
)


class Record:
    """Instance of a non-dynamic class.

    Declared fields are readable as attributes and by key:

        >>> r.name, r["name"], r.get("name")
    """

    __slots__ = ("class_name", "fields")

    def __init__(self, class_name: str, fields: Mapping[str, Any] | None = None):
        object.__setattr__(self, "class_name", class_name)
        object.__setattr__(self, "fields", MappingProxyType(dict(fields or {})))

    def __getattr__(self, name: str) -> Any:
        # only reached when normal lookup fails
        if name in Record.__slots__:
            raise AttributeError(name)
        try:
            return self.fields[name]
        except KeyError:
            raise AttributeError(
                f"{self.class_name!r} record has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        return to_builtins(self)

    def __reduce__(self):
        return (Record, (self.class_name, dict(self.fields)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.class_name == other.class_name and dict(self.fields) == dict(
            other.fields
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self.fields.items())
        return f"{self.class_name}({body})"


class DynamicRecord(Mapping[str, Any]):
    """Instance of a dynamic class: a tagged, read-only mapping.

    ``fields`` holds declared and extra entries alike; ``extras`` is the
    view of the keys the schema does not declare. Equality ignores which
    keys are extra, since that follows from the schema.
    """

    __slots__ = ("class_name", "_fields", "extra_keys")

    def __init__(
        self,
        class_name: str,
        fields: Mapping[str, Any] | None = None,
        extra_keys: frozenset[str] | set[str] | tuple[str, ...] = frozenset(),
    ):
        self.class_name = class_name
        self._fields = MappingProxyType(dict(fields or {}))
        self.extra_keys = frozenset(extra_keys)

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._fields

    @property
    def extras(self) -> Mapping[str, Any]:
        return MappingProxyType(
            {k: v for k, v in self._fields.items() if k in self.extra_keys}
        )

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def to_dict(self) -> dict[str, Any]:
        return to_builtins(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DynamicRecord):
            return self.class_name == other.class_name and dict(
                self._fields
            ) == dict(other._fields)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DynamicRecord({self.class_name!r}, {dict(self._fields)!r})"


@dataclass(frozen=True, slots=True)
class EnumValue:
    enum_name: str
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MediaRef:
    """Reference to an image or audio resource, by URL or inline base64."""

    kind: Literal["image", "audio"]
    source: Literal["url", "base64"]
    url: str | None = None
    base64: str | None = None
    media_type: str | None = None

    def __post_init__(self):
        if self.source == "url" and not self.url:
            raise ValueError("A url MediaRef needs a url")
        if self.source == "base64" and not (self.base64 and self.media_type):
            raise ValueError("A base64 MediaRef needs base64 data and a media_type")

    @classmethod
    def from_url(
        cls, kind: Literal["image", "audio"], url: str, media_type: str | None = None
    ) -> MediaRef:
        return cls(kind=kind, source="url", url=url, media_type=media_type)

    @classmethod
    def from_base64(
        cls, kind: Literal["image", "audio"], data: str, media_type: str
    ) -> MediaRef:
        return cls(kind=kind, source="base64", base64=data, media_type=media_type)

    @classmethod
    def from_bytes(
        cls, kind: Literal["image", "audio"], data: bytes, media_type: str
    ) -> MediaRef:
        return cls.from_base64(kind, _b64.b64encode(data).decode("ascii"), media_type)

    def to_raw(self) -> str | dict[str, str]:
        """Raw form accepted back by the decoder."""
        if self.source == "url":
            if self.media_type is None:
                return self.url
            return {"url": self.url, "media_type": self.media_type}
        return {"base64": self.base64, "media_type": self.media_type}


def to_builtins(value: Any) -> Any:
    """Convert a host value tree to plain Python data.

    ``Unset`` entries are dropped from records and mappings.
    """
    match value:
        case Record() | DynamicRecord():
            return {
                k: to_builtins(v)
                for k, v in value.fields.items()
                if not is_sentinel(v)
            }
        case EnumValue():
            return value.value
        case MediaRef():
            return value.to_raw()
        case list() | tuple():
            return [to_builtins(v) for v in value if v is not Unset]
        case dict():
            return {k: to_builtins(v) for k, v in value.items() if v is not Unset}
    return value
