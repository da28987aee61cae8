# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Health and identity snapshots.

Both snapshots read connector state at call time and never raise; a missing
chat connector is reported as disconnected.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..connectors.base import Connectors
from ..core.timestamps import utc_now

TOOL_ENDPOINTS = ("/sse", "/tools", "/execute")
PUBLIC_ENDPOINTS = ("/health", "/sse", "/tools", "/execute")


class StatusReporter:
    """Builds ``/health`` and ``/`` payloads from live connector state."""

    def __init__(
        self,
        connectors: Connectors,
        service_name: str,
        version: str,
        display_name: str | None = None,
        documentation_url: str | None = None,
        active_sessions: Callable[[], int] | None = None,
    ):
        self.connectors = connectors
        self.service_name = service_name
        self.version = version
        self.display_name = display_name or service_name
        self.documentation_url = documentation_url
        self._active_sessions = active_sessions

    def _session_count(self) -> int:
        if self._active_sessions is None:
            return 0
        return self._active_sessions()

    def health(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "service": self.service_name,
            "discord": {
                "connected": self.connectors.chat_ready(),
                "guilds": self.connectors.guild_count(),
            },
            "supabase": {
                "configured": self.connectors.datastore is not None,
            },
            "endpoints": {path: "available" for path in TOOL_ENDPOINTS},
            "active_sessions": self._session_count(),
            "timestamp": utc_now(),
            "version": self.version,
        }

    def info(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.display_name,
            "status": "running",
            "discord_connected": self.connectors.chat_ready(),
            "endpoints": list(PUBLIC_ENDPOINTS),
            "version": self.version,
        }
        if self.documentation_url:
            data["documentation"] = self.documentation_url
        return data
