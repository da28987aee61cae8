# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Result envelope returned by the dispatcher.

Every tool invocation resolves to exactly one ``ToolResult``: either
``{success: true, result}`` or ``{success: false, error}``.

Usage::

    from herald.core.response import ok, err

    return ok({"message_id": "123"})
    return err("Discord bot is not connected")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ToolResult:
    """Uniform success/failure envelope.

    Attributes:
        success: True when the handler returned normally.
        result:  Handler payload on success, passed through untouched.
        error:   Human-readable failure message. None on success.
    """

    success: bool
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire shape of the execute endpoint."""
        if self.success:
            return {"success": True, "result": self.result}
        return {"success": False, "error": self.error}


def ok(result: Any = None) -> ToolResult:
    """Create a successful ToolResult."""
    return ToolResult(success=True, result=result)


def err(error: str) -> ToolResult:
    """Create a failed ToolResult."""
    return ToolResult(success=False, error=error)
