"""Auction deadline rules shared by listing and reactivation."""

from datetime import datetime, timedelta

from src.at_common.datetime_utils import ensure_utc
from src.at_common.errors import InvalidEndTimeError


def resolve_end_time(
    requested: datetime | None, now: datetime, max_duration: timedelta
) -> datetime:
    """Validate a requested deadline, or default to the longest allowed one.

    Naive datetimes are read as UTC.
    """
    latest = now + max_duration
    if requested is None:
        return latest
    requested = ensure_utc(requested)
    if requested <= now:
        raise InvalidEndTimeError("End time must be in the future")
    if requested > latest:
        hours = int(max_duration.total_seconds() // 3600)
        if hours % 24 == 0:
            raise InvalidEndTimeError(f"Auction duration cannot exceed {hours // 24} days")
        raise InvalidEndTimeError(f"Auction duration cannot exceed {hours} hours")
    return requested
