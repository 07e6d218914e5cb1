"""
Calendar-month windows for report periods.

A month window is half-open: [month_start, add_months(month_start, 1)).
Month ends are always derived with calendar arithmetic, never by adding days.
"""
from __future__ import annotations

import calendar
import re
from datetime import date
from typing import List, Tuple

_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-(\d{1,2}))?\s*$")


def month_start(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day to the target month's length."""
    total = d.year * 12 + (d.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_window(month: date) -> Tuple[date, date]:
    start = month_start(month)
    return start, add_months(start, 1)


def in_window(d: date | None, window: Tuple[date, date]) -> bool:
    if d is None:
        return False
    start, end = window
    return start <= d < end


def parse_month(value: str | date) -> date:
    """
    Parse a month selector ("2025-03", "2025-03-01") into its first day.
    Raises ValueError on malformed input, an out-of-range month or an
    impossible day.
    """
    if isinstance(value, date):
        return month_start(value)
    m = _MONTH_RE.match(str(value or ""))
    if not m:
        raise ValueError(f"Invalid month: {value!r} (expected YYYY-MM)")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {value!r} (month must be 1-12)")
    if m.group(3) is not None:
        try:
            date(year, month, int(m.group(3)))
        except ValueError as e:
            raise ValueError(f"Invalid month: {value!r} ({e})") from e
    return date(year, month, 1)


def year_months(year: int) -> List[date]:
    return [date(year, m, 1) for m in range(1, 13)]


def trailing_months(as_of: date, count: int) -> List[date]:
    """The month containing as_of and the count-1 months before it, newest first."""
    start = month_start(as_of)
    return [add_months(start, -i) for i in range(count)]


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"
