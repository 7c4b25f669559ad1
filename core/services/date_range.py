"""
Date range resolution for the planning views.

Given a view mode and an anchor date, compute the inclusive boundary of
the period shown by the planning grid and the ordered list of calendar
days inside it.  Weeks are ISO weeks (Monday to Sunday).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List

VIEW_DAILY = 'daily'
VIEW_WEEKLY = 'weekly'
VIEW_MONTHLY = 'monthly'
VIEW_YEARLY = 'yearly'
VIEW_MODES = (VIEW_DAILY, VIEW_WEEKLY, VIEW_MONTHLY, VIEW_YEARLY)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    days: List[date] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.days)

    def __contains__(self, value: date) -> bool:
        return self.start <= value <= self.end


def as_date(value) -> date:
    """Drop the time-of-day part of ``value``.

    Aware datetimes are converted to the current Django time zone first so
    that an instant late in the evening UTC does not land on the previous
    or next calendar day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            from django.utils import timezone
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise TypeError(f'cannot interpret {value!r} as a date')


def _last_day_of_month(year: int, month: int) -> date:
    # day zero of the next month
    if month == 12:
        return date(year + 1, 1, 1) - timedelta(days=1)
    return date(year, month + 1, 1) - timedelta(days=1)


def days_between(start: date, end: date) -> List[date]:
    """Every calendar day from ``start`` to ``end``, both included."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def resolve_range(view_mode: str, anchor) -> DateRange:
    anchor = as_date(anchor)
    if view_mode == VIEW_DAILY:
        start = end = anchor
    elif view_mode == VIEW_WEEKLY:
        start = anchor - timedelta(days=anchor.weekday())
        end = start + timedelta(days=6)
    elif view_mode == VIEW_MONTHLY:
        start = anchor.replace(day=1)
        end = _last_day_of_month(anchor.year, anchor.month)
    elif view_mode == VIEW_YEARLY:
        start = date(anchor.year, 1, 1)
        end = date(anchor.year, 12, 31)
    else:
        raise ValueError(f'unknown view mode: {view_mode!r}')
    return DateRange(start=start, end=end, days=days_between(start, end))
