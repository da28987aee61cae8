# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Read-only catalog of the tools the gateway can dispatch."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from mcp.types import Tool

from .definitions import GATEWAY_TOOLS


class ToolRegistry:
    """Static tool catalog.

    Built once from a sequence of descriptors; enumeration order and content
    never change afterwards.
    """

    def __init__(self, tools: Iterable[Tool] = GATEWAY_TOOLS):
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._by_name: dict[str, Tool] = {}
        for tool in self._tools:
            if tool.name in self._by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._by_name[tool.name] = tool

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def required_parameters(self, name: str) -> list[str]:
        """Required parameter names for ``name``, empty if unknown."""
        tool = self._by_name.get(name)
        if tool is None:
            return []
        return list(tool.inputSchema.get("required", []))

    def describe(self) -> list[dict[str, Any]]:
        """Full descriptors in the shape served by ``GET /tools``."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.inputSchema,
            }
            for tool in self._tools
        ]


_default_registry: ToolRegistry | None = None


def get_registry() -> ToolRegistry:
    """Get the process-wide registry of gateway tools."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ToolRegistry()
    return _default_registry
