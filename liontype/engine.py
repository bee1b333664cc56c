# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Boundary with the execution engine.

The engine receives a ``FunctionRequest`` and reports back through
``EngineEvent`` values: any number of partials (as raw values or raw text),
then exactly one terminal value or failure. Usage reports may arrive at
any point.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

from .collector import UsageEvent
from .schema import Schema, Type

__all__ = (
    "AsyncEngine",
    "Engine",
    "EngineEvent",
    "EngineFailure",
    "FinalValue",
    "FunctionRequest",
    "PartialValue",
    "TextDelta",
    "TextDone",
    "UsageReport",
)


@dataclass(frozen=True, slots=True)
class FunctionRequest:
    function_name: str
    args: Mapping[str, Any]
    """Arguments already encoded to raw values."""
    schema: Schema
    """Static schema merged with the call's overlay."""
    return_type: Type
    collectors: tuple[str, ...] = ()
    """Names of the collectors attached to the call."""
    llm_client: str | None = None
    stream: bool = False


@dataclass(frozen=True, slots=True)
class PartialValue:
    raw: Any


@dataclass(frozen=True, slots=True)
class FinalValue:
    raw: Any


@dataclass(frozen=True, slots=True)
class TextDelta:
    """A chunk of raw model text; accumulated and parsed by the runtime."""

    text: str


@dataclass(frozen=True, slots=True)
class TextDone:
    """The accumulated text is complete and is the terminal value."""


@dataclass(frozen=True, slots=True)
class EngineFailure:
    error: BaseException | str


@dataclass(frozen=True, slots=True)
class UsageReport:
    event: UsageEvent
    collector: str | None = None
    """Deliver only to attached collectors with this name; all if None."""


EngineEvent: TypeAlias = (
    PartialValue | FinalValue | TextDelta | TextDone | EngineFailure | UsageReport
)


@runtime_checkable
class Engine(Protocol):
    def execute(
        self, request: FunctionRequest, emit: Callable[[EngineEvent], None]
    ) -> None:
        """Run the function, reporting through ``emit`` before returning."""
        ...


@runtime_checkable
class AsyncEngine(Protocol):
    def aexecute(self, request: FunctionRequest) -> AsyncIterator[EngineEvent]: ...
