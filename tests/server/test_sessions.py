"""Tests for herald.server.sessions.

Tests cover:
- handshake frame order
- heartbeat cadence and live readiness
- close semantics (idempotent, no frames after close)
- EventStreamResponse over a raw ASGI connection
"""

from __future__ import annotations

import asyncio
import json

import pytest

from herald.server.sessions import (
    SSE_HEADERS,
    EventStreamResponse,
    SessionManager,
    SessionState,
    StreamSession,
    encode_frame,
)
from herald.tools.registry import ToolRegistry

INTERVAL = 0.05


def decode(raw: bytes) -> dict:
    text = raw.decode()
    assert text.startswith("data: ")
    assert text.endswith("\n\n")
    return json.loads(text[len("data: ") :])


async def next_frame(frames, timeout: float = 1.0) -> dict:
    return decode(await asyncio.wait_for(frames.__anext__(), timeout))


async def collect(frames) -> list[bytes]:
    return [frame async for frame in frames]


@pytest.fixture
def manager(connectors) -> SessionManager:
    return SessionManager(connectors, ToolRegistry(), service_name="herald", heartbeat_interval=INTERVAL)


@pytest.fixture
async def session(manager):
    session = manager.open_session()
    yield session
    session.close()


class TestEncodeFrame:
    def test_sse_framing(self):
        assert encode_frame({"type": "heartbeat"}) == b'data: {"type": "heartbeat"}\n\n'


class TestHandshake:
    async def test_connection_then_tools(self, session):
        frames = session.frames()

        connection = await next_frame(frames)
        assert connection["type"] == "connection"
        assert connection["status"] == "ready"
        assert connection["message"] == "herald connected"
        assert connection["timestamp"].endswith("Z")

        tools = await next_frame(frames)
        assert tools["type"] == "tools_available"
        assert tools["tools"] == ToolRegistry().names()

    async def test_cannot_open_twice(self, session):
        with pytest.raises(RuntimeError, match="cannot open"):
            session.open()

    async def test_registered_while_open(self, manager, session):
        assert manager.active_count == 1
        assert session.state is SessionState.OPEN


class TestHeartbeats:
    @pytest.mark.slow
    async def test_three_heartbeats_follow_handshake(self, session):
        frames = session.frames()
        types = [(await next_frame(frames))["type"] for _ in range(5)]
        assert types == ["connection", "tools_available", "heartbeat", "heartbeat", "heartbeat"]

    @pytest.mark.slow
    async def test_heartbeat_reads_readiness_at_emission(self, session, chat):
        frames = session.frames()
        await next_frame(frames)
        await next_frame(frames)

        first = await next_frame(frames)
        assert first["discord_status"] == "connected"

        chat.set_ready(False)
        second = await next_frame(frames)
        assert second["discord_status"] == "disconnected"

        chat.set_ready(True)
        third = await next_frame(frames)
        assert third["discord_status"] == "connected"

    async def test_no_chat_connector_reports_disconnected(self, manager):
        manager.connectors.chat = None
        session = manager.open_session()
        try:
            assert session.heartbeat_frame()["discord_status"] == "disconnected"
        finally:
            session.close()


class TestClose:
    async def test_close_is_idempotent(self, manager, session):
        session.close("first")
        session.close("second")

        assert session.state is SessionState.CLOSED
        assert session.close_reason == "first"
        assert manager.active_count == 0

    async def test_no_frames_after_close(self, session):
        frames = session.frames()
        await next_frame(frames)

        session.close()
        await asyncio.sleep(INTERVAL * 3)

        remaining = await asyncio.wait_for(collect(frames), 1.0)
        assert remaining == []

    async def test_heartbeat_task_cancelled(self, session):
        task = session._heartbeat
        session.close()
        await asyncio.sleep(0.01)
        assert task.done()

    async def test_close_before_open(self, connectors):
        session = StreamSession("s1", connectors, [], "herald", INTERVAL)
        session.close()
        assert session.state is SessionState.CLOSED
        with pytest.raises(RuntimeError):
            session.open()

    async def test_close_all(self, manager):
        sessions = [manager.open_session() for _ in range(3)]
        manager.close_all()

        assert manager.active_count == 0
        assert all(s.close_reason == "server shutdown" for s in sessions)


class ASGIConnection:
    """Hand-driven ASGI receive/send pair for streaming responses."""

    def __init__(self, fail_after: int | None = None):
        self.messages: list[dict] = []
        self.disconnected = asyncio.Event()
        self.fail_after = fail_after
        self._request_sent = False

    async def receive(self) -> dict:
        if not self._request_sent:
            self._request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await self.disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: dict) -> None:
        if self.fail_after is not None and len(self.bodies()) >= self.fail_after and message.get("body"):
            raise ConnectionResetError("peer went away")
        self.messages.append(message)

    def bodies(self) -> list[bytes]:
        return [m["body"] for m in self.messages if m["type"] == "http.response.body" and m.get("body")]

    async def wait_for_bodies(self, count: int, timeout: float = 1.0) -> None:
        async def poll():
            while len(self.bodies()) < count:
                await asyncio.sleep(0.005)

        await asyncio.wait_for(poll(), timeout)


def http_scope(path: str = "/sse", headers: list[tuple[bytes, bytes]] | None = None) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": headers or [],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }


class TestEventStreamResponse:
    async def test_streams_until_disconnect(self, manager):
        session = manager.open_session()
        conn = ASGIConnection()
        response = EventStreamResponse(session)

        task = asyncio.create_task(response(http_scope(), conn.receive, conn.send))
        await conn.wait_for_bodies(3)
        conn.disconnected.set()
        await asyncio.wait_for(task, 1.0)

        start = conn.messages[0]
        assert start["type"] == "http.response.start"
        assert start["status"] == 200
        headers = {k.decode(): v.decode() for k, v in start["headers"]}
        assert headers["content-type"].startswith("text/event-stream")
        for name, value in SSE_HEADERS.items():
            assert headers[name.lower()] == value

        frames = [decode(body) for body in conn.bodies()]
        assert [f["type"] for f in frames[:3]] == ["connection", "tools_available", "heartbeat"]
        assert session.state is SessionState.CLOSED
        assert session.close_reason == "client disconnected"
        assert manager.active_count == 0

    async def test_write_failure_closes_session(self, manager, caplog):
        session = manager.open_session()
        conn = ASGIConnection(fail_after=1)

        await asyncio.wait_for(EventStreamResponse(session)(http_scope(), conn.receive, conn.send), 1.0)

        assert len(conn.bodies()) == 1
        assert session.close_reason == "write failed"
        assert "Write failed on stream session" in caplog.text

    async def test_server_close_ends_stream(self, manager):
        session = manager.open_session()
        conn = ASGIConnection()

        task = asyncio.create_task(EventStreamResponse(session)(http_scope(), conn.receive, conn.send))
        await conn.wait_for_bodies(2)
        manager.close_all()
        await asyncio.wait_for(task, 1.0)

        assert conn.messages[-1] == {"type": "http.response.body", "body": b"", "more_body": False}
        assert session.close_reason == "server shutdown"
