# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Front ends over a ``StreamSession``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import anyio

from .._errors import EngineError
from ..ln import MaybeUnset, Unset
from .session import StreamEvent, StreamSession, StreamState

__all__ = ("AsyncFunctionStream", "SessionHandle")

logger = logging.getLogger(__name__)


class SessionHandle:
    """Push-mode handle returned by ``FunctionRuntime.stream``."""

    __slots__ = ("_session",)

    def __init__(self, session: StreamSession):
        self._session = session

    @property
    def session(self) -> StreamSession:
        return self._session

    @property
    def state(self) -> StreamState:
        return self._session.state

    def done(self) -> bool:
        return self._session.done()

    def detach(self) -> None:
        self._session.detach()

    def result(self, timeout: MaybeUnset[float | None] = Unset) -> Any:
        return self._session.wait(timeout)

    def __repr__(self) -> str:
        return f"SessionHandle({self._session!r})"


class AsyncFunctionStream:
    """Async iterator of stream events, driven by an async engine.

    Iterating pulls engine events, routes each through the session and
    yields whatever the session delivers. The iterator ends after the
    terminal event. An engine that stops without a terminal value fails
    the session, since an exhausted engine cannot produce one later.

    Example:
        >>> stream = runtime.astream("ExtractResume", {"text": text})
        >>> async for event in stream:
        ...     print(event.kind, event.value)
        >>> resume = await stream.get_final_response()
    """

    def __init__(
        self,
        session: StreamSession,
        events: AsyncIterator[Any],
        route: Callable[[Any], StreamEvent | None],
    ):
        self._session = session
        self._events = events
        self._route = route
        self._iterator: AsyncIterator[StreamEvent] | None = None

    @property
    def session(self) -> StreamSession:
        return self._session

    @property
    def state(self) -> StreamState:
        return self._session.state

    def detach(self) -> None:
        self._session.detach()

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        # one underlying iteration, shared with get_final_response()
        if self._iterator is None:
            self._iterator = self._iterate()
        return self._iterator

    async def _iterate(self) -> AsyncIterator[StreamEvent]:
        session = self._session
        try:
            async for item in self._events:
                event = self._route(item)
                if event is not None and not session.detached:
                    yield event
                if session.done():
                    break
        except Exception as e:
            event = session.fail(e)
            if event is not None and not session.detached:
                yield event
        finally:
            aclose = getattr(self._events, "aclose", None)
            if aclose is not None:
                await aclose()

        if not session.done():
            logger.debug("%s: engine stream ended without a terminal value", session.name)
            event = session.fail(
                EngineError("Engine stream ended without a terminal value")
            )
            if event is not None and not session.detached:
                yield event

    async def get_final_response(self, timeout: float | None = None) -> Any:
        """Drain the stream and return the terminal value or raise its error.

        Raises:
            TimeoutError: the stream did not finish within ``timeout``.
        """
        with anyio.fail_after(timeout):
            async for _ in self:
                pass
        return self._session.result()
