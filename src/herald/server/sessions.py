# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Server-sent event sessions.

A session goes CONNECTING -> OPEN -> CLOSED. Opening queues a ``connection``
frame and a ``tools_available`` frame, then a heartbeat task queues a
``heartbeat`` frame every interval until the session closes. Closing is
synchronous and idempotent: it cancels the heartbeat task and drops anything
still queued.

``EventStreamResponse`` is the ASGI side: it drains a session's frames onto
the connection and closes the session when the client goes away.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
import uuid
from collections.abc import AsyncIterator, Callable
from typing import Any

from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from ..connectors.base import Connectors
from ..core.logging import request_scope
from ..core.timestamps import utc_now
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_CLOSED = object()


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


def encode_frame(frame: dict[str, Any]) -> bytes:
    """One SSE event: ``data: <json>`` followed by a blank line."""
    return f"data: {json.dumps(frame)}\n\n".encode()


class StreamSession:
    """One event-stream connection's lifecycle."""

    def __init__(
        self,
        session_id: str,
        connectors: Connectors,
        tool_names: list[str],
        service_name: str,
        heartbeat_interval: float,
        on_close: Callable[[StreamSession], None] | None = None,
    ):
        self.id = session_id
        self.connectors = connectors
        self.tool_names = list(tool_names)
        self.service_name = service_name
        self.heartbeat_interval = heartbeat_interval
        self.state = SessionState.CONNECTING
        self.close_reason: str | None = None
        self._on_close = on_close
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._heartbeat: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def connection_frame(self) -> dict[str, Any]:
        return {
            "type": "connection",
            "timestamp": utc_now(),
            "message": f"{self.service_name} connected",
            "status": "ready",
        }

    def tools_frame(self) -> dict[str, Any]:
        return {
            "type": "tools_available",
            "tools": list(self.tool_names),
            "timestamp": utc_now(),
        }

    def heartbeat_frame(self) -> dict[str, Any]:
        # Readiness is read now, at emission time
        return {
            "type": "heartbeat",
            "timestamp": utc_now(),
            "discord_status": "connected" if self.connectors.chat_ready() else "disconnected",
        }

    def _emit(self, frame: dict[str, Any]) -> None:
        if self.state is SessionState.OPEN:
            self._queue.put_nowait(encode_frame(frame))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Complete the handshake. Must be called from a running event loop."""
        if self.state is not SessionState.CONNECTING:
            raise RuntimeError(f"Session {self.id} cannot open from state {self.state.value}")

        self.state = SessionState.OPEN
        self._emit(self.connection_frame())
        self._emit(self.tools_frame())
        self._heartbeat = asyncio.get_running_loop().create_task(
            self._heartbeat_loop(), name=f"heartbeat-{self.id}"
        )
        logger.info("Stream session opened", extra={"session_id": self.id})

    async def _heartbeat_loop(self) -> None:
        while self.state is SessionState.OPEN:
            await asyncio.sleep(self.heartbeat_interval)
            self._emit(self.heartbeat_frame())

    def close(self, reason: str = "closed") -> None:
        """Tear the session down. Calling it again has no effect."""
        if self.state is SessionState.CLOSED:
            return

        self.state = SessionState.CLOSED
        self.close_reason = reason
        if self._heartbeat is not None and not self._heartbeat.done():
            self._heartbeat.cancel()
        self._queue.put_nowait(_CLOSED)
        logger.info(f"Stream session closed: {reason}", extra={"session_id": self.id})

        if self._on_close is not None:
            self._on_close(self)

    async def frames(self) -> AsyncIterator[bytes]:
        """Yield encoded frames in emission order until the session closes."""
        while True:
            item = await self._queue.get()
            if item is _CLOSED or self.state is SessionState.CLOSED:
                return
            yield item


class SessionManager:
    """Creates stream sessions and tracks the ones still open."""

    def __init__(
        self,
        connectors: Connectors,
        registry: ToolRegistry,
        service_name: str,
        heartbeat_interval: float,
    ):
        self.connectors = connectors
        self.registry = registry
        self.service_name = service_name
        self.heartbeat_interval = heartbeat_interval
        self._sessions: dict[str, StreamSession] = {}

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def open_session(self) -> StreamSession:
        """Create, register and open a new session."""
        session_id = uuid.uuid4().hex
        session = StreamSession(
            session_id=session_id,
            connectors=self.connectors,
            tool_names=self.registry.names(),
            service_name=self.service_name,
            heartbeat_interval=self.heartbeat_interval,
            on_close=self._forget,
        )
        self._sessions[session_id] = session
        # The heartbeat task inherits the request id
        with request_scope(session_id):
            session.open()
        return session

    def _forget(self, session: StreamSession) -> None:
        self._sessions.pop(session.id, None)

    def close_all(self, reason: str = "server shutdown") -> None:
        for session in list(self._sessions.values()):
            session.close(reason)


class EventStreamResponse(Response):
    """ASGI response that streams a session's frames as ``text/event-stream``.

    A client disconnect closes the session. A failed write also closes it and is
    logged rather than raised.
    """

    media_type = "text/event-stream"

    def __init__(self, session: StreamSession, headers: dict[str, str] | None = None):
        self.session = session
        self.status_code = 200
        self.background = None
        self.client_disconnected = False
        self.init_headers({**SSE_HEADERS, **(headers or {})})

    async def _watch_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                self.client_disconnected = True
                self.session.close("client disconnected")
                return

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            }
        )

        watcher = asyncio.create_task(self._watch_disconnect(receive))
        try:
            async for frame in self.session.frames():
                try:
                    await send({"type": "http.response.body", "body": frame, "more_body": True})
                except OSError as e:
                    logger.warning(f"Write failed on stream session: {e}", extra={"session_id": self.session.id})
                    self.client_disconnected = True
                    self.session.close("write failed")
                    break

            if not self.client_disconnected:
                try:
                    await send({"type": "http.response.body", "body": b"", "more_body": False})
                except OSError as e:
                    logger.debug(f"Could not finish stream session: {e}", extra={"session_id": self.session.id})
        finally:
            watcher.cancel()
            self.session.close("stream ended")
