"""Epoch-millisecond clock helpers.

Policies store instants as epoch milliseconds. Services take a ``Clock``
so tests can pin "now".
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], int]

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY = 24 * MILLIS_PER_HOUR

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_datetime(millis: int) -> datetime:
    """Epoch milliseconds to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=millis)


def to_millis(value: datetime) -> int:
    """Aware (or UTC-naive) datetime to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MILLI
