"""Timestamp helpers shared by the services and the record store."""

from __future__ import annotations

import time
from datetime import datetime
from datetime import timezone
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def iso_timestamp(epoch_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC timestamp.

    Examples:
        >>> iso_timestamp(0)
        '1970-01-01T00:00:00.000Z'
    """
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{epoch_ms % 1000:03d}Z"
