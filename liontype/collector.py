# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Usage collection.

A ``Collector`` is attached to calls through ``CallOptions.collectors``;
the runtime records every usage event the engine reports for those calls.
One collector may be shared by concurrent calls.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ln import now_utc

__all__ = (
    "Collector",
    "UsageEvent",
    "UsageStats",
)


class UsageEvent(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        use_attribute_docstrings=True,
    )

    input_tokens: int = Field(default=0, ge=0)
    """Prompt tokens consumed."""

    output_tokens: int = Field(default=0, ge=0)
    """Completion tokens produced."""

    calls: int = Field(default=1, ge=0)
    """Number of LLM requests this event covers."""

    function_name: str | None = None
    client: str | None = None
    """Name of the LLM client that served the request."""

    created_at: datetime = Field(default_factory=now_utc)


class UsageStats(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    input_tokens: int = 0
    output_tokens: int = 0
    calls: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @classmethod
    def from_events(cls, events: Iterable[UsageEvent]) -> UsageStats:
        input_tokens = output_tokens = calls = 0
        for e in events:
            input_tokens += e.input_tokens
            output_tokens += e.output_tokens
            calls += e.calls
        return cls(
            input_tokens=input_tokens, output_tokens=output_tokens, calls=calls
        )


class Collector:
    """Append-only, thread-safe log of usage events.

    ``usage()`` is recomputed from the log on every call. Names need not be
    unique; a report addressed to a name reaches every attached collector
    carrying it.

    Example:
        >>> c = Collector("billing")
        >>> c.record(UsageEvent(input_tokens=10, output_tokens=5))
        >>> c.usage().total_tokens
        15
    """

    __slots__ = ("name", "_log", "_lock")

    def __init__(self, name: str):
        if not isinstance(name, str) or not name:
            raise ValueError("Collector name must be a non-empty string")
        self.name = name
        self._log: list[UsageEvent] = []
        self._lock = threading.Lock()

    def record(self, event: UsageEvent | Mapping[str, Any]) -> UsageEvent:
        if not isinstance(event, UsageEvent):
            event = UsageEvent.model_validate(event)
        with self._lock:
            self._log.append(event)
        return event

    def usage(self) -> UsageStats:
        return UsageStats.from_events(self.events)

    @property
    def events(self) -> tuple[UsageEvent, ...]:
        with self._lock:
            return tuple(self._log)

    @property
    def last(self) -> UsageEvent | None:
        with self._lock:
            return self._log[-1] if self._log else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._log)

    def __repr__(self) -> str:
        return f"Collector(name={self.name!r}, events={len(self)})"
