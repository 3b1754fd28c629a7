"""
Time utility functions.

All timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(moment: datetime = None) -> datetime:
    """Midnight of the (UTC) calendar day containing `moment` (defaults to now)."""
    moment = moment or utc_now()
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def is_same_day(first: datetime, second: datetime) -> bool:
    """True if both datetimes fall on the same calendar day."""
    return first.date() == second.date()
