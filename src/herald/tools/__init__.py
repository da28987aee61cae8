# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Tool catalog, handlers and dispatcher."""

from .definitions import GATEWAY_TOOLS
from .dispatcher import Dispatcher
from .handlers import HANDLERS, collection_name
from .registry import ToolRegistry, get_registry

__all__ = [
    "GATEWAY_TOOLS",
    "HANDLERS",
    "Dispatcher",
    "ToolRegistry",
    "collection_name",
    "get_registry",
]
