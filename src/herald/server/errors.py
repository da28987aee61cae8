# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Standardized HTTP error responses.

Request-level failures (authentication, bodies that are not JSON) use:
{
    "success": false,
    "error": {
        "code": "ERROR_CODE",
        "message": "Human readable message"
    }
}

Tool failures from ``POST /execute`` keep their own flat shape
(``{"success": false, "error": "<message>"}``), see ``tool_result_response``.
"""

from __future__ import annotations

from starlette.responses import JSONResponse

from ..core.response import ToolResult

# Validation errors (400)
VALIDATION_INVALID_JSON = "VALIDATION_INVALID_JSON"

# Authentication errors (401)
AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        {
            "success": False,
            "error": {
                "code": code,
                "message": message,
            },
        },
        status_code=status_code,
        headers=headers,
    )


def invalid_json_error() -> JSONResponse:
    """Create a 400 error for invalid JSON body."""
    return error_response(VALIDATION_INVALID_JSON, "Invalid JSON body", status_code=400)


def auth_error(message: str = "Authentication failed", code: str = AUTH_INVALID_TOKEN) -> JSONResponse:
    """Create a 401 authentication error response."""
    return error_response(
        code,
        message,
        status_code=401,
        headers={"WWW-Authenticate": 'Bearer realm="herald"'},
    )


def tool_result_response(result: ToolResult) -> JSONResponse:
    """Render a dispatcher result: 200 on success, 500 on failure."""
    return JSONResponse(result.to_dict(), status_code=200 if result.success else 500)
