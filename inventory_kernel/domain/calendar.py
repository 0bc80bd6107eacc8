"""
Calendar helpers shared by the expiration and usage-rate engines.

Day counts are whole 24-hour periods truncated toward zero, so an
expiration 36 hours away is 1 day out and one 36 hours past is -1.
"""

from datetime import datetime, timedelta

ONE_DAY = timedelta(days=1)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Signed whole days from ``start`` to ``end``, truncated toward zero."""
    delta = end - start
    if delta < timedelta(0):
        return -((-delta).days)
    return delta.days


def same_calendar_day(a: datetime, b: datetime) -> bool:
    """True if both instants fall on the same date in their own timezone."""
    return a.date() == b.date()
