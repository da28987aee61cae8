# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Observable readiness state for the chat platform connection."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ReadinessCell:
    """Boolean readiness published by a connector and read by everyone else.

    The connector is the only writer (from its gateway event callbacks, on the
    event loop). Readers see the value at the instant of the read; nothing is
    cached on their side.
    """

    def __init__(self, name: str = "discord"):
        self.name = name
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    def publish(self, ready: bool, reason: str | None = None) -> None:
        """Record a readiness transition. Repeated values are ignored."""
        if ready == self._ready:
            return
        self._ready = ready
        logger.info(f"{self.name} readiness -> {'ready' if ready else 'not ready'}" + (f" ({reason})" if reason else ""))
