# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Custom exception hierarchy for Herald.

Handlers and connectors raise these; the dispatcher turns them into
failure envelopes carrying ``message``.
"""

from __future__ import annotations

from typing import Any


class HeraldException(Exception):  # noqa: N818
    """Base exception for all Herald errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationException(HeraldException):
    """Exception for invalid tool parameters.

    Raised when:
    - A required parameter is missing
    - A value falls outside its allowed set
    - A value has the wrong type
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class UnknownToolError(HeraldException):
    """Raised when a tool name is not in the registry."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", {"tool": tool_name})
        self.tool_name = tool_name


class ConnectorNotReadyError(HeraldException):
    """Raised when the chat platform is absent or not logged in."""

    def __init__(self, message: str = "Discord bot is not connected"):
        super().__init__(message)


class NotFoundException(HeraldException):
    """Raised when a channel, member, role or server cannot be resolved."""

    def __init__(self, resource_type: str, resource_id: str | None = None, message: str | None = None):
        if message is None and resource_id is None:
            message = f"{resource_type} not found"
        elif message is None:
            message = f"{resource_type} {resource_id} not found"
        super().__init__(message, {"resource_type": resource_type, "resource_id": resource_id})
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotConfiguredError(HeraldException):
    """Raised when an optional connector was not configured."""

    def __init__(self, service: str):
        super().__init__(f"{service} not configured", {"service": service})
        self.service = service


class DownstreamException(HeraldException):
    """Raised when the chat platform or data store rejects a request."""

    def __init__(self, message: str, status: int | None = None):
        details = {"status": status} if status is not None else {}
        super().__init__(message, details)
        self.status = status


class ConfigException(HeraldException):
    """Exception for configuration errors."""
