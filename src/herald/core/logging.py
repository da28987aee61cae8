# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Logging for the gateway process.

Records can carry gateway fields through ``extra``: ``tool``, ``params``,
``success``, ``duration_ms`` and ``session_id``. ``JSONFormatter`` emits them as
top-level keys and ``TextFormatter`` appends them as ``key=value`` pairs.

A request id opened with ``request_scope()`` tags every record logged inside it.
Tasks created inside the scope (a stream session's heartbeat) keep the id.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .timestamps import isoformat

if TYPE_CHECKING:
    from .config import GatewaySettings

GATEWAY_FIELDS = ("tool", "params", "success", "duration_ms", "session_id")
QUIET_LOGGERS = ("discord", "discord.gateway", "httpx", "hpack", "asyncio")

_request_id: ContextVar[str | None] = ContextVar("herald_request_id", default=None)


def current_request_id() -> str | None:
    return _request_id.get()


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Tag log records with ``request_id`` (a fresh short id when omitted)."""
    rid = request_id or uuid.uuid4().hex[:12]
    token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(token)


def gateway_fields(record: logging.LogRecord) -> dict[str, Any]:
    """The gateway fields present on ``record``, in ``GATEWAY_FIELDS`` order."""
    return {name: getattr(record, name) for name in GATEWAY_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": isoformat(datetime.fromtimestamp(record.created, UTC)),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = current_request_id()
        if request_id:
            entry["request_id"] = request_id
        entry.update(gateway_fields(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL logger [request] message key=value ...`` for terminals."""

    def __init__(self):
        super().__init__(datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record, self.datefmt), f"{record.levelname:<7}", record.name]
        request_id = current_request_id()
        if request_id:
            parts.append(f"[{request_id}]")
        parts.append(record.getMessage())
        parts.extend(f"{name}={value}" for name, value in gateway_fields(record).items())

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(settings: GatewaySettings | None = None) -> None:
    """Install the gateway's handlers on the root logger.

    ``log_format`` picks the formatter: ``json``, ``text``, or empty for JSON
    unless stderr is a terminal. ``log_file`` adds a JSON file handler.
    uvicorn's loggers propagate here when it runs with ``log_config=None``.
    """
    if settings is None:
        from .config import get_settings

        settings = get_settings()

    log_format = settings.log_format.lower()
    use_json = log_format == "json" or (log_format != "text" and not sys.stderr.isatty())

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if use_json else TextFormatter())
    handlers: list[logging.Handler] = [console]

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class ToolCallLogger:
    """Logs each dispatched tool call before and after it runs.

    Parameters are logged with credential-like keys redacted and long text
    (message bodies, embed descriptions) trimmed.
    """

    REDACTED_KEYS = ("token", "secret", "password", "api_key", "apikey", "auth", "credential")
    MAX_TEXT = 200

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("herald.tools")

    def started(self, tool: str, params: Any) -> None:
        self.logger.info(f"Executing tool: {tool}", extra={"tool": tool, "params": self.redact(params)})

    def finished(self, tool: str, success: bool, duration_ms: float) -> None:
        outcome = "succeeded" if success else "failed"
        self.logger.info(
            f"Tool {tool} {outcome} in {duration_ms:.1f}ms",
            extra={"tool": tool, "success": success, "duration_ms": round(duration_ms, 1)},
        )

    def redact(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: "[REDACTED]" if any(word in str(key).lower() for word in self.REDACTED_KEYS) else self.redact(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self.redact(item) for item in value]
        if isinstance(value, str) and len(value) > self.MAX_TEXT:
            return f"{value[: self.MAX_TEXT]}... ({len(value)} chars)"
        return value


tool_logger = ToolCallLogger()
