"""Business Day Calculator — expiry dates counted in weekdays.

Invariants:
    - Only Monday–Friday increment the counter; no holiday calendar
    - Result is a calendar date (time component dropped)
    - add_business_days(start, 0) == start date
"""

from datetime import date, datetime, timedelta

_SATURDAY = 5


def is_business_day(day: date) -> bool:
    return day.weekday() < _SATURDAY


def add_business_days(start: date | datetime, n: int) -> date:
    """Walk forward day by day from `start` until `n` weekdays have been counted."""
    if n < 0:
        raise ValueError(f"Business day count cannot be negative: {n}")
    current = start.date() if isinstance(start, datetime) else start
    added = 0
    while added < n:
        current += timedelta(days=1)
        if is_business_day(current):
            added += 1
    return current
