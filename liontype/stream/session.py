# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .._errors import DecodeError, EngineError, LionTypeError
from ..config import settings
from ..decode import Decoder, PartialDecoder
from ..ln import Enum, MaybeUnset, Unset
from ..schema import Schema, Type

__all__ = (
    "EventKind",
    "StreamEvent",
    "StreamHandler",
    "StreamSession",
    "StreamState",
)

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    """Lifecycle of a stream session.

    Attributes:
        ACTIVE: Accepting partial values.
        DONE: Terminal value decoded.
        FAILED: Terminal decode or engine failure.
    """

    ACTIVE = "active"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self is not StreamState.ACTIVE


class EventKind(str, Enum):
    PARTIAL = "partial"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class StreamEvent:
    kind: EventKind
    value: Any = None
    error: LionTypeError | None = None

    @property
    def terminal(self) -> bool:
        return self.kind is not EventKind.PARTIAL


StreamHandler = Callable[[StreamEvent], Any]


class StreamSession:
    """State machine for one streamed invocation.

    Partial raw values are reconciled as they arrive; exactly one terminal
    value or error ends the session. Every delivered event goes through
    one lock, so the handler sees events in arrival order and the terminal
    event last. Push and pull front ends share a session: the handler is the
    push side, ``wait()`` the pull side.

    Args:
        target: Return type every value is decoded against.
        schema: Merged schema ``target`` resolves in.
        handler: Called once per delivered event. Exceptions it raises are
            logged and do not affect the session.
        name: Label used in log records.
    """

    def __init__(
        self,
        target: Type,
        schema: Schema,
        *,
        handler: StreamHandler | None = None,
        name: str | None = None,
        allow_integral_float: bool | None = None,
    ):
        schema.validate_type(target, where="stream target")
        self.target = target
        self.name = name or str(target)
        self._decoder = Decoder(schema, allow_integral_float=allow_integral_float)
        self._partial = PartialDecoder(
            schema, allow_integral_float=allow_integral_float
        )
        self._handler = handler
        # reentrant: a handler may detach or inspect the session
        self._cond = threading.Condition(threading.RLock())
        self._state = StreamState.ACTIVE
        self._value: Any = None
        self._error: LionTypeError | None = None
        self._partials_aborted = False
        self._detached = False

    # -- inspection ---------------------------------------------------------

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def detached(self) -> bool:
        return self._detached

    @property
    def partials_aborted(self) -> bool:
        return self._partials_aborted

    def done(self) -> bool:
        return self._state.terminal

    def result(self) -> Any:
        """Terminal value; raises the terminal error, or if still active."""
        with self._cond:
            match self._state:
                case StreamState.DONE:
                    return self._value
                case StreamState.FAILED:
                    raise self._error
        raise RuntimeError(f"Stream {self.name!r} has not finished")

    # -- inbound ------------------------------------------------------------

    def feed_partial(self, raw: Any) -> StreamEvent | None:
        """Reconcile a partial raw value and deliver it.

        Returns the event, or ``None`` when the value was dropped.
        """
        with self._cond:
            if self._state.terminal:
                logger.debug("%s: partial after %s ignored", self.name, self._state)
                return None
            if self._partials_aborted:
                return None
            try:
                value = self._partial._decode(raw, self.target)
            except DecodeError as e:
                self._partials_aborted = True
                logger.warning(
                    "%s: partial value does not fit %s, dropping remaining "
                    "partials: %s",
                    self.name,
                    self.target,
                    e,
                )
                return None
            return self._deliver(StreamEvent(EventKind.PARTIAL, value=value))

    def finish(self, raw: Any) -> StreamEvent | None:
        """Decode the terminal raw value and end the session."""
        with self._cond:
            if self._state.terminal:
                logger.debug("%s: terminal value after %s ignored", self.name, self._state)
                return None
            try:
                value = self._decoder._decode(raw, self.target)
            except DecodeError as e:
                return self._terminate(StreamState.FAILED, error=e)
            return self._terminate(StreamState.DONE, value=value)

    def fail(self, error: BaseException | str) -> StreamEvent | None:
        """End the session with an upstream error."""
        if not isinstance(error, LionTypeError):
            error = EngineError.wrap(error)
        with self._cond:
            if self._state.terminal:
                logger.debug("%s: error after %s ignored: %s", self.name, self._state, error)
                return None
            return self._terminate(StreamState.FAILED, error=error)

    def detach(self) -> None:
        """Stop delivering events; the session still records its result."""
        with self._cond:
            if not self._detached:
                logger.debug("%s: detached in state %s", self.name, self._state)
            self._detached = True

    # -- pull side ----------------------------------------------------------

    def wait(self, timeout: MaybeUnset[float | None] = Unset) -> Any:
        """Block until the session ends, then return or raise its result.

        Args:
            timeout: Seconds to wait. Unset uses
                ``settings.LIONTYPE_STREAM_WAIT_TIMEOUT``; ``None`` waits
                forever.

        Raises:
            TimeoutError: the session did not end within ``timeout``.
        """
        if timeout is Unset:
            timeout = settings.LIONTYPE_STREAM_WAIT_TIMEOUT
        with self._cond:
            if not self._cond.wait_for(self.done, timeout):
                raise TimeoutError(
                    f"Stream {self.name!r} did not finish within {timeout}s"
                )
            return self.result()

    # -- internals ----------------------------------------------------------

    def _terminate(
        self,
        state: StreamState,
        *,
        value: Any = None,
        error: LionTypeError | None = None,
    ) -> StreamEvent:
        self._state = state
        self._value = value
        self._error = error
        logger.debug("%s: -> %s", self.name, state)
        self._cond.notify_all()
        if state is StreamState.DONE:
            event = StreamEvent(EventKind.DONE, value=value)
        else:
            event = StreamEvent(EventKind.ERROR, error=error)
        return self._deliver(event)

    def _deliver(self, event: StreamEvent) -> StreamEvent:
        if self._detached or self._handler is None:
            return event
        try:
            self._handler(event)
        except Exception as e:
            logger.error(f"Error in stream handler: {e}", exc_info=True)
        return event

    def __repr__(self) -> str:
        return f"StreamSession(name={self.name!r}, state={self._state.value})"
