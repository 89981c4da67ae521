"""UTC datetime utilities.

The rate limiter speaks epoch milliseconds; everything stored speaks
timezone-aware UTC datetimes. These helpers convert between the two.
"""

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(ensure_utc(value).timestamp() * 1000)


def seconds_until(epoch_ms: int, now: datetime) -> int:
    """Whole seconds from `now` until `epoch_ms`, rounded up, never negative."""
    return max(0, math.ceil((epoch_ms - to_epoch_ms(now)) / 1000))
