# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""ISO-8601 timestamps in the form clients already parse (``...T12:00:00.000Z``)."""

from __future__ import annotations

from datetime import UTC, datetime


def isoformat(moment: datetime) -> str:
    """Render ``moment`` in UTC with millisecond precision and a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> str:
    """The current time via ``isoformat``."""
    return isoformat(datetime.now(UTC))
