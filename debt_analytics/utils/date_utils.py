"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import List
from dateutil.relativedelta import relativedelta

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def month_key(day: date) -> tuple[int, int]:
    """(year, month) grouping key for a calendar date"""
    return day.year, day.month


def month_label(year: int, month: int) -> str:
    """Format a month as e.g. "Jan 2025" """
    return f"{MONTH_LABELS[month - 1]} {year}"


def month_end(year: int, month: int) -> date:
    """Last calendar day of a month"""
    return date(year, month, calendar.monthrange(year, month)[1])


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the end of shorter months (Jan 31 + 1 -> Feb 28)"""
    return from_date + relativedelta(months=months)


def months_between(start: date, end: date) -> int:
    """Number of calendar month boundaries crossed from start to end (never negative)"""
    diff = (end.year - start.year) * 12 + (end.month - start.month)
    return max(diff, 0)


def generate_month_range(start: date, end: date) -> List[tuple[int, int]]:
    """List of (year, month) keys from start's month to end's month (inclusive)"""
    keys = []
    cursor = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    while cursor <= last:
        keys.append((cursor.year, cursor.month))
        cursor = add_months(cursor, 1)
    return keys


def count_due_cycles(start: date, end: date, due_day: int | None = None) -> int:
    """
    Count billing cycles between start (exclusive) and end (inclusive).

    Without a due day every calendar month boundary is one cycle. With a due
    day, each month contributes one cycle when its due date (clamped to the
    month's length, so 31 means "last day") falls inside the range.
    """
    if end <= start:
        return 0
    if due_day is None:
        return months_between(start, end)

    cycles = 0
    for year, month in generate_month_range(start, end):
        due = date(year, month, min(due_day, calendar.monthrange(year, month)[1]))
        if start < due <= end:
            cycles += 1
    return cycles
