"""Date helpers for travel documents and passenger ages."""

from __future__ import annotations

import calendar
from datetime import date, datetime


def parse_date(value: date | str | None) -> date | None:
    """Coerce a form value into a date.

    Empty values give None. Strings must be ISO ``YYYY-MM-DD`` (a trailing
    time part is ignored). Raises ValueError for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def add_months(start: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the month's last day."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_age(date_of_birth: date, today: date) -> int:
    """Full years between birth and today; one less if the birthday is still ahead."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return max(0, age)
