# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Route a tool name and parameters to its handler.

``Dispatcher.execute`` never raises: every outcome, including unknown tools
and unexpected handler errors, comes back as a ``ToolResult``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from ..connectors.base import Connectors
from ..core.exceptions import HeraldException, UnknownToolError, ValidationException
from ..core.logging import ToolCallLogger, tool_logger
from ..core.response import ToolResult, err, ok
from .handlers import HANDLERS, Handler
from .registry import ToolRegistry, get_registry

logger = logging.getLogger(__name__)


class Dispatcher:
    """Executes registered tools against the injected connectors."""

    def __init__(
        self,
        connectors: Connectors,
        registry: ToolRegistry | None = None,
        handlers: Mapping[str, Handler] | None = None,
        call_logger: ToolCallLogger | None = None,
    ):
        self.connectors = connectors
        self.registry = registry or get_registry()
        self.handlers = dict(HANDLERS if handlers is None else handlers)
        self.call_logger = call_logger or tool_logger

        missing = [name for name in self.registry.names() if name not in self.handlers]
        if missing:
            raise ValueError(f"No handler registered for tools: {', '.join(missing)}")

    def _check_parameters(self, tool_name: str, parameters: Any) -> dict[str, Any]:
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            raise ValidationException("parameters must be an object", field="parameters")

        missing = [key for key in self.registry.required_parameters(tool_name) if key not in parameters]
        if missing:
            raise ValidationException(
                f"Missing required parameter(s) for {tool_name}: {', '.join(missing)}",
                field=missing[0],
            )
        return parameters

    async def execute(self, tool_name: Any, parameters: Any = None) -> ToolResult:
        """Run one tool and wrap its outcome.

        Args:
            tool_name: Registered tool name. Anything else, including None, is an
                unknown tool
            parameters: Raw parameter mapping, handed to the handler unchanged

        Returns:
            ``ok(payload)`` with the handler's payload, or ``err(message)``
        """
        name = str(tool_name)
        self.call_logger.started(name, parameters)
        start = time.perf_counter()

        try:
            if not isinstance(tool_name, str) or tool_name not in self.registry:
                raise UnknownToolError(name)
            checked = self._check_parameters(tool_name, parameters)
            payload = await self.handlers[tool_name](self.connectors, checked)
            result = ok(payload)
        except HeraldException as e:
            logger.warning(f"Tool {name} failed: {e.message}", extra={"tool": name})
            result = err(e.message)
        except Exception as e:  # Intentionally broad: top-level tool handler
            logger.exception(f"Unexpected error in tool {name}", extra={"tool": name})
            result = err(str(e) or type(e).__name__)

        duration_ms = (time.perf_counter() - start) * 1000
        self.call_logger.finished(name, result.success, duration_ms)
        return result
