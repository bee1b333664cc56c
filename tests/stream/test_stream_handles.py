"""Tests for SessionHandle and AsyncFunctionStream."""

import anyio
import pytest

from liontype._errors import EngineError, MissingFieldError
from liontype.schema import ClassRef, INT
from liontype.stream import (
    AsyncFunctionStream,
    EventKind,
    SessionHandle,
    StreamSession,
    StreamState,
)
from liontype.values import Pending

RESUME = ClassRef("Resume")
FULL = {"name": "John", "job_title": "Engineer", "company": "Acme"}


def _router(session):
    """Routes ("partial" | "final" | "error", payload) tuples."""

    def route(item):
        kind, payload = item
        if kind == "partial":
            return session.feed_partial(payload)
        if kind == "final":
            return session.finish(payload)
        return session.fail(payload)

    return route


async def _script(items, *, raises=None, closed=None):
    try:
        for item in items:
            await anyio.sleep(0)
            yield item
        if raises is not None:
            raise raises
    finally:
        if closed is not None:
            closed.append(True)


def _stream(session, items, **kw):
    return AsyncFunctionStream(session, _script(items, **kw), _router(session))


class TestSessionHandle:
    def test_delegates(self, resume_schema):
        session = StreamSession(INT, resume_schema)
        handle = SessionHandle(session)
        assert handle.session is session
        assert handle.state is StreamState.ACTIVE
        assert not handle.done()

        session.finish(3)
        assert handle.done()
        assert handle.result() == 3

    def test_result_timeout(self, resume_schema):
        handle = SessionHandle(StreamSession(INT, resume_schema))
        with pytest.raises(TimeoutError):
            handle.result(timeout=0.01)

    def test_detach(self, resume_schema):
        seen = []
        session = StreamSession(INT, resume_schema, handler=seen.append)
        SessionHandle(session).detach()
        session.finish(1)
        assert seen == []


class TestAsyncFunctionStream:
    @pytest.mark.anyio
    async def test_iterates_to_terminal(self, resume_schema):
        session = StreamSession(RESUME, resume_schema)
        stream = _stream(
            session,
            [
                ("partial", Pending({"name": Pending("Jo")})),
                ("partial", Pending({"name": "John"})),
                ("final", FULL),
            ],
        )
        kinds = [event.kind async for event in stream]
        assert kinds == [EventKind.PARTIAL, EventKind.PARTIAL, EventKind.DONE]
        result = await stream.get_final_response()
        assert result.company == "Acme"

    @pytest.mark.anyio
    async def test_stops_after_terminal(self, resume_schema):
        closed = []
        session = StreamSession(INT, resume_schema)
        stream = _stream(
            session, [("final", 1), ("partial", 2), ("final", 3)], closed=closed
        )
        assert await stream.get_final_response() == 1
        assert closed == [True]

    @pytest.mark.anyio
    async def test_decode_failure_raised(self, resume_schema):
        session = StreamSession(RESUME, resume_schema)
        stream = _stream(session, [("final", {"name": "John"})])
        with pytest.raises(MissingFieldError):
            await stream.get_final_response()
        assert stream.state is StreamState.FAILED

    @pytest.mark.anyio
    async def test_engine_exception_fails_session(self, resume_schema):
        session = StreamSession(INT, resume_schema)
        stream = _stream(session, [("partial", 1)], raises=OSError("socket closed"))
        events = [event async for event in stream]
        assert events[-1].kind is EventKind.ERROR
        with pytest.raises(EngineError, match="socket closed"):
            await stream.get_final_response()

    @pytest.mark.anyio
    async def test_exhausted_without_terminal(self, resume_schema):
        session = StreamSession(INT, resume_schema)
        stream = _stream(session, [("partial", 1)])
        with pytest.raises(EngineError, match="without a terminal value"):
            await stream.get_final_response()

    @pytest.mark.anyio
    async def test_detached_stream_yields_nothing(self, resume_schema):
        session = StreamSession(INT, resume_schema)
        stream = _stream(session, [("partial", 1), ("final", 2)])
        stream.detach()
        assert [event async for event in stream] == []
        assert session.result() == 2

    @pytest.mark.anyio
    async def test_final_response_timeout(self, resume_schema):
        async def never():
            await anyio.sleep_forever()
            yield  # pragma: no cover

        session = StreamSession(INT, resume_schema)
        stream = AsyncFunctionStream(session, never(), _router(session))
        with pytest.raises(TimeoutError):
            await stream.get_final_response(timeout=0.05)
