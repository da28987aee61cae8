# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Shared-secret bearer authentication for the HTTP endpoints.

Every protected endpoint is wrapped with ``requires_bearer``; the wrapped
endpoint does not run unless the request carries
``Authorization: Bearer <shared secret>``.
"""

from __future__ import annotations

import enum
import functools
import hmac
import logging
from collections.abc import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response

from .errors import AUTH_INVALID_TOKEN, AUTH_MISSING_TOKEN, auth_error

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

Endpoint = Callable[[Request], Awaitable[Response]]


class AuthFailure(enum.Enum):
    """Why a request was rejected."""

    MISSING = "missing"  # no header, or not a bearer credential
    INVALID = "invalid"  # bearer credential that does not match


def check_bearer(authorization: str | None, secret: str) -> AuthFailure | None:
    """Validate an Authorization header value against the shared secret.

    Returns:
        None if accepted, otherwise the kind of failure.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return AuthFailure.MISSING

    presented = authorization[len(BEARER_PREFIX) :]
    if not presented:
        return AuthFailure.MISSING

    if not hmac.compare_digest(presented.encode("utf-8"), secret.encode("utf-8")):
        return AuthFailure.INVALID

    return None


def rejection_response(failure: AuthFailure) -> Response:
    """401 body for a failure. Never includes the presented credential."""
    if failure is AuthFailure.MISSING:
        return auth_error("Missing or invalid authorization header, expected 'Bearer <token>'", AUTH_MISSING_TOKEN)
    return auth_error("Invalid token", AUTH_INVALID_TOKEN)


def requires_bearer(endpoint: Endpoint) -> Endpoint:
    """Wrap an endpoint so it only runs for authenticated requests.

    The shared secret is read from ``request.app.state.settings``.
    """

    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        secret = request.app.state.settings.auth_token
        failure = check_bearer(request.headers.get("Authorization"), secret)
        if failure is not None:
            client = request.client.host if request.client else "unknown"
            logger.warning(f"Rejected {request.method} {request.url.path} from {client}: {failure.value} credential")
            return rejection_response(failure)
        return await endpoint(request)

    return wrapper
