# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Herald HTTP gateway.

Usage:
    # Start the server
    herald serve

    # Or with uvicorn directly
    uvicorn --factory herald.server.app:create_app --port 8080

    # Inspect
    herald tools --names
    herald generate-secret
"""

from .auth import check_bearer, requires_bearer
from .sessions import SessionManager, StreamSession

__all__ = [
    "SessionManager",
    "StreamSession",
    "check_bearer",
    "requires_bearer",
]
