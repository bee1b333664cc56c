# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Host-facing entry point for calling schema-typed functions."""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import anyio.to_thread

from ._errors import ArgumentError, EngineError
from .collector import Collector
from .config import settings
from .decode import encode_args
from .engine import (
    AsyncEngine,
    Engine,
    EngineFailure,
    FinalValue,
    FunctionRequest,
    PartialValue,
    TextDelta,
    TextDone,
    UsageReport,
)
from .ln import Params, Undefined
from .ln.fuzzy import RawTextAccumulator
from .schema import Schema, Type
from .stream import (
    AsyncFunctionStream,
    EventKind,
    SessionHandle,
    StreamEvent,
    StreamHandler,
    StreamSession,
)

__all__ = (
    "CallOptions",
    "FunctionDef",
    "FunctionRuntime",
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True, init=False, eq=False)
class CallOptions(Params):
    """Per-call options; fields left out stay ``Unset``.

    Example:
        >>> CallOptions(collectors=[c], llm_client="fast")
    """

    collectors: Sequence[Collector]
    llm_client: str
    """Client name; falls back to ``settings.LIONTYPE_DEFAULT_CLIENT``."""
    schema_overlay: Schema
    """Overlay from ``TypeBuilder.finalize()``, merged over the static schema."""


@dataclass(frozen=True, slots=True)
class FunctionDef:
    name: str
    params: Mapping[str, Type]
    returns: Type
    description: str | None = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Function name must be a non-empty string")
        if not isinstance(self.returns, Type):
            raise ValueError(f"Function {self.name!r} needs a return Type")
        object.__setattr__(self, "params", dict(self.params))

    def validate(self, schema: Schema) -> None:
        for pname, t in self.params.items():
            schema.validate_type(t, where=f"{self.name}({pname})")
        schema.validate_type(self.returns, where=f"{self.name} -> return")


class _Invocation:
    """Routes the engine events of one call into its session and collectors."""

    __slots__ = ("session", "collectors", "_text")

    def __init__(self, session: StreamSession, collectors: Sequence[Collector]):
        self.session = session
        self.collectors = tuple(collectors)
        self._text = RawTextAccumulator(max_size=settings.LIONTYPE_MAX_RAW_TEXT_SIZE)

    def __call__(self, event: Any) -> StreamEvent | None:
        match event:
            case PartialValue(raw=raw):
                return self.session.feed_partial(raw)
            case FinalValue(raw=raw):
                return self.session.finish(raw)
            case TextDelta(text=text):
                try:
                    self._text.append(text)
                except (TypeError, ValueError) as e:
                    return self.session.fail(e)
                snapshot = self._text.snapshot()
                if snapshot is Undefined:
                    return None
                return self.session.feed_partial(snapshot)
            case TextDone():
                return self.session.finish(self._text.complete())
            case EngineFailure(error=error):
                return self.session.fail(error)
            case UsageReport(event=usage, collector=name):
                for c in self.collectors:
                    if name is None or c.name == name:
                        c.record(usage)
                return None
        raise TypeError(f"Unknown engine event: {event!r}")


class FunctionRuntime:
    """Calls functions of a schema through an execution engine.

    Args:
        engine: An ``Engine``, an ``AsyncEngine``, or both.
        schema: Static schema the functions' types resolve in.
        functions: Declared functions, by ``FunctionDef``.
        options: Defaults merged under each call's own options.
    """

    def __init__(
        self,
        engine: Engine | AsyncEngine,
        schema: Schema | None = None,
        functions: Iterable[FunctionDef] = (),
        *,
        options: CallOptions | None = None,
    ):
        self.engine = engine
        self.schema = schema or Schema.empty()
        self.functions: dict[str, FunctionDef] = {}
        self.options = options or CallOptions()
        for fn in functions:
            self.register(fn)

    def register(self, fn: FunctionDef) -> FunctionDef:
        if fn.name in self.functions:
            raise ValueError(f"Function {fn.name!r} is already registered")
        self.functions[fn.name] = fn
        return fn

    def with_options(self, **options: Any) -> FunctionRuntime:
        """Runtime sharing this one's engine and functions, with new defaults."""
        new = type(self)(
            self.engine, self.schema, options=self.options.with_updates(**options)
        )
        new.functions = self.functions
        return new

    # -- sync ---------------------------------------------------------------

    def call(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        """Run a function and return its decoded result.

        Raises:
            ArgumentError: unknown function or bad arguments.
            SchemaError: a type of the function does not resolve.
            DecodeError: the result does not fit the return type.
            EngineError: the engine failed.
        """
        request, invocation = self._start(name, args, options, stream=False)
        self._execute(request, invocation)
        return invocation.session.wait()

    def stream(
        self,
        name: str,
        args: Mapping[str, Any] | None,
        handler: StreamHandler,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> SessionHandle:
        """Run a function, pushing each stream event to ``handler``."""
        request, invocation = self._start(
            name, args, options, stream=True, handler=handler
        )
        self._execute(request, invocation)
        return SessionHandle(invocation.session)

    def sync_stream(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        handler: StreamHandler | None = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        """Run a function, block for its result; partials go to ``handler``."""
        on_partial = None
        if handler is not None:

            def on_partial(event: StreamEvent) -> None:
                if event.kind is EventKind.PARTIAL:
                    handler(event)

        request, invocation = self._start(
            name, args, options, stream=True, handler=on_partial
        )
        self._execute(request, invocation)
        return invocation.session.wait()

    # -- async --------------------------------------------------------------

    async def acall(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        """Async ``call``; a sync-only engine runs in a worker thread."""
        if isinstance(self.engine, AsyncEngine):
            request, invocation = self._start(name, args, options, stream=False)
            return await self._astream(request, invocation).get_final_response()
        return await anyio.to_thread.run_sync(
            functools.partial(self.call, name, args, options)
        )

    def astream(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> AsyncFunctionStream:
        if not isinstance(self.engine, AsyncEngine):
            raise TypeError(
                f"{type(self.engine).__name__} does not implement aexecute()"
            )
        request, invocation = self._start(name, args, options, stream=True)
        return self._astream(request, invocation)

    # -- internals ----------------------------------------------------------

    def _start(
        self,
        name: str,
        args: Mapping[str, Any] | None,
        options: CallOptions | Mapping[str, Any] | None,
        *,
        stream: bool,
        handler: StreamHandler | None = None,
    ) -> tuple[FunctionRequest, _Invocation]:
        if options is not None and not isinstance(options, CallOptions):
            options = CallOptions(**options)
        opts = self.options.merged(options)

        fn = self.functions.get(name)
        if fn is None:
            raise ArgumentError(
                f"Unknown function: {name!r}",
                details={"function": name, "known": sorted(self.functions)},
            )

        schema = self.schema.merge(opts.get("schema_overlay"))
        fn.validate(schema)
        raw_args = encode_args(args or {}, fn.params, schema, function_name=name)

        collectors = tuple(opts.get("collectors", ()))
        request = FunctionRequest(
            function_name=name,
            args=raw_args,
            schema=schema,
            return_type=fn.returns,
            collectors=tuple(c.name for c in collectors),
            llm_client=opts.get("llm_client") or settings.LIONTYPE_DEFAULT_CLIENT,
            stream=stream,
        )
        session = StreamSession(fn.returns, schema, handler=handler, name=name)
        logger.debug(
            "calling %s (stream=%s, client=%s)", name, stream, request.llm_client
        )
        return request, _Invocation(session, collectors)

    def _execute(self, request: FunctionRequest, invocation: _Invocation) -> None:
        if not isinstance(self.engine, Engine):
            raise TypeError(
                f"{type(self.engine).__name__} does not implement execute(); "
                "use acall()/astream()"
            )
        try:
            self.engine.execute(request, invocation)
        except Exception as e:
            invocation.session.fail(EngineError.wrap(e))

    def _astream(
        self, request: FunctionRequest, invocation: _Invocation
    ) -> AsyncFunctionStream:
        return AsyncFunctionStream(
            invocation.session, self.engine.aexecute(request), invocation
        )
