# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Herald Core - settings, logging, errors and the result envelope."""

from .exceptions import (
    ConfigException,
    ConnectorNotReadyError,
    DownstreamException,
    HeraldException,
    NotConfiguredError,
    NotFoundException,
    UnknownToolError,
    ValidationException,
)
from .response import ToolResult, err, ok

__all__ = [
    "ConfigException",
    "ConnectorNotReadyError",
    "DownstreamException",
    "HeraldException",
    "NotConfiguredError",
    "NotFoundException",
    "ToolResult",
    "UnknownToolError",
    "ValidationException",
    "err",
    "ok",
]
