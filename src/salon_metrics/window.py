"""Report windows and calendar helpers.

A report window is the inclusive ``[start, end]`` period selected by the
caller. All instants are tz-aware pandas Timestamps in the report timezone,
so month boundaries, "today" and hour-of-day grouping agree with the
establishment's wall clock.

Examples:
    >>> w = ReportWindow.from_dates("2025-03-01", "2025-03-31")
    >>> w.is_single_month
    True
    >>> w.prior().end == w.start
    True
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

import pandas as pd

from salon_metrics.config import DEFAULT_TIMEZONE

TimeLike = Union[str, date, datetime, pd.Timestamp]


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2025-01-15")
        datetime.date(2025, 1, 15)
    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def to_timestamp(value: TimeLike, tz: str = DEFAULT_TIMEZONE) -> pd.Timestamp:
    """Return value as a Timestamp in tz; naive values are taken as wall-clock in tz."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return localize(ts, tz)
    return ts.tz_convert(tz)


def localize(naive: pd.Timestamp, tz) -> pd.Timestamp:
    """Attach tz to a wall-clock time.

    A time skipped by a DST jump moves forward to the first instant that
    exists, and a repeated time resolves to its first (DST) occurrence.
    """
    return naive.tz_localize(tz, ambiguous=True, nonexistent="shift_forward")


def start_of_day(ts: pd.Timestamp) -> pd.Timestamp:
    """First instant of ts's calendar day, 01:00 on days whose midnight is skipped."""
    if ts.tzinfo is None:
        return ts.normalize()
    return localize(ts.tz_localize(None).normalize(), ts.tz)


def shift_days(ts: pd.Timestamp, days: int) -> pd.Timestamp:
    """Move ts by whole calendar days keeping the wall-clock time."""
    tz = ts.tz
    naive = ts.tz_localize(None) + pd.Timedelta(days=days)
    return localize(naive, tz) if tz is not None else naive


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month.

    Examples:
        >>> days_in_month(2024, 2)
        29
    """
    return calendar.monthrange(year, month)[1]


def inactivity_cutoff(now: pd.Timestamp, threshold_days: int) -> pd.Timestamp:
    """Midnight of now's day minus threshold_days.

    Clients whose last service is at or after this instant are active.
    """
    return start_of_day(shift_days(now, -int(threshold_days)))


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive reporting period.

    Attributes:
        start: First instant of the window (tz-aware).
        end: Last instant of the window (tz-aware), inclusive.
    """

    start: pd.Timestamp
    end: pd.Timestamp

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    @classmethod
    def from_bounds(
        cls, start: TimeLike, end: TimeLike, tz: str = DEFAULT_TIMEZONE
    ) -> ReportWindow:
        """Build a window from two instants."""
        return cls(start=to_timestamp(start, tz), end=to_timestamp(end, tz))

    @classmethod
    def from_dates(
        cls, start: TimeLike, end: TimeLike, tz: str = DEFAULT_TIMEZONE
    ) -> ReportWindow:
        """Build a window covering whole days, from start 00:00 to the last instant of end."""
        first = start_of_day(to_timestamp(start, tz))
        last_day = start_of_day(to_timestamp(end, tz))
        last = start_of_day(shift_days(last_day, 1)) - pd.Timedelta(microseconds=1)
        return cls(start=first, end=last)

    @classmethod
    def month_to_date(cls, now: pd.Timestamp) -> ReportWindow:
        """First day of now's month up to now."""
        return cls(start=start_of_day(shift_days(now, 1 - now.day)), end=now)

    @classmethod
    def day_of(cls, now: pd.Timestamp) -> ReportWindow:
        """Whole calendar day containing now."""
        return cls.from_dates(now, now, tz=str(now.tz))

    @property
    def length(self) -> pd.Timedelta:
        return self.end - self.start

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def is_single_month(self) -> bool:
        """True when start and end fall in the same calendar month."""
        return self.start.month == self.end.month and self.start.year == self.end.year

    def prior(self) -> ReportWindow:
        """Window of identical length ending exactly where this one begins."""
        return ReportWindow(start=self.start - self.length, end=self.start)

    def contains(self, ts: pd.Timestamp) -> bool:
        return self.start <= ts <= self.end

    def is_current_month(self, now: pd.Timestamp) -> bool:
        """True for a single-month window whose month is now's month."""
        now = now.tz_convert(self.start.tz) if now.tzinfo is not None else now
        return self.is_single_month and (now.year, now.month) == (self.year, self.month)
