"""Compute when a reminder should fire."""

from datetime import datetime, timedelta
from typing import Any, Optional

from . import config
from .types import coerce_datetime


def compute_trigger(
    due_date: Any,
    remind_before_days: Optional[int] = config.DEFAULT_REMIND_BEFORE_DAYS,
    now: Optional[datetime] = None
) -> Optional[datetime]:
    """Reminder time for an obligation due at `due_date`.

    Steps back `remind_before_days` whole days and pins the time of day to
    REMINDER_HOUR:00 local time.

    Args:
        due_date: When the obligation is due (datetime, date or ISO string)
        remind_before_days: Lead time in days (None means the default)
        now: Current time (defaults to datetime.now())

    Returns:
        The trigger time, or None if it is not strictly in the future
        (or the due date cannot be read)
    """
    try:
        due = coerce_datetime(due_date)
    except ValueError:
        return None
    try:
        days = config.DEFAULT_REMIND_BEFORE_DAYS if remind_before_days is None else max(0, int(remind_before_days))
        trigger = (due - timedelta(days=days)).replace(
            hour=config.REMINDER_HOUR, minute=0, second=0, microsecond=0
        )
    except (OverflowError, TypeError, ValueError):
        # Lead time reaches before year 1, or is not a number
        trigger = None

    now = now or datetime.now()
    if trigger is None or trigger <= now:
        return None
    return trigger
