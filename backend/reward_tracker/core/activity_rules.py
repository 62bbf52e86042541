"""Activity Rules: the weekly and monthly visit windows.

Invariants:
    - A visit counts for a window when window_start < visit < now (both bounds open)
    - The weekly window starts 7 days before now; the monthly window starts on the same
      day-of-month one calendar month earlier
    - Pure: the clock is passed in

Design Decisions:
    - A day that does not exist in the previous month (March 31 -> February) is clamped
      to that month's last day rather than rolling over into the current month
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class ActivityWindows:
    week_start: datetime
    month_start: datetime
    now: datetime


def one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def activity_windows(now: datetime) -> ActivityWindows:
    return ActivityWindows(week_start=now - WEEK, month_start=one_month_before(now), now=now)


def count_in_window(visits: list[datetime], start: datetime, now: datetime) -> int:
    return sum(1 for visit in visits if start < visit < now)
