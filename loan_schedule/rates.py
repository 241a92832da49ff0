"""Interest rate timeline.

A ``RateTimeline`` is an immutable, date-sorted sequence of ``RatePoint``
objects. It answers two questions for the engine: which annual rate applies
on a given day, and what the day-weighted average rate is over a period in
which the rate may have changed one or more times.
"""

from __future__ import annotations

import bisect
import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, List, Tuple

from .data_models import RatePoint
from .exceptions import NoApplicableRate

logger = logging.getLogger(__name__)


class RateTimeline:
    """Sorted rate points with binary-search lookup.

    Points sharing an effective date keep their input order, so the one
    supplied last wins for that date.
    """

    def __init__(self, points: Iterable[RatePoint]) -> None:
        self._points: Tuple[RatePoint, ...] = tuple(sorted(points, key=lambda p: p.effective_date))
        self._dates: List[date] = [p.effective_date for p in self._points]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[RatePoint]:
        return iter(self._points)

    @property
    def first_effective_date(self):
        return self._dates[0] if self._dates else None

    def rate_at(self, on_date: date) -> Decimal:
        """Return the annual percent of the latest point effective on ``on_date``."""
        idx = bisect.bisect_right(self._dates, on_date) - 1
        if idx < 0:
            raise NoApplicableRate(on_date, self.first_effective_date)
        return self._points[idx].annual_percent

    def change_dates_between(self, start: date, end: date) -> List[date]:
        """Return distinct effective dates strictly inside ``(start, end)``."""
        lo = bisect.bisect_right(self._dates, start)
        hi = bisect.bisect_left(self._dates, end)
        return sorted(set(self._dates[lo:hi]))

    def weighted_average_rate(self, period_start: date, period_end: date) -> Decimal:
        """Return the day-weighted mean rate over ``[period_start, period_end)``.

        The interval is cut at every rate change falling inside it and each
        piece contributes its rate weighted by its number of days.
        """
        total_days = (period_end - period_start).days
        if total_days <= 0:
            return self.rate_at(period_start)

        weighted = Decimal(0)
        cursor = period_start
        rate = self.rate_at(cursor)
        for boundary in self.change_dates_between(period_start, period_end):
            weighted += rate * (boundary - cursor).days
            cursor = boundary
            rate = self.rate_at(cursor)
        weighted += rate * (period_end - cursor).days

        average = weighted / Decimal(total_days)
        logger.debug("Weighted rate %s..%s = %s", period_start, period_end, average)
        return average


def annual_to_monthly_rate(annual_percent: Decimal, months_per_year: int = 12) -> Decimal:
    """Convert an annual rate in percent into a periodic monthly fraction."""
    return annual_percent / Decimal(100) / Decimal(months_per_year)


def annual_to_daily_rate(annual_percent: Decimal, on_date: date) -> Decimal:
    """Convert an annual rate in percent into a daily fraction for ``on_date``'s year."""
    days_in_year = 366 if calendar.isleap(on_date.year) else 365
    return annual_percent / Decimal(100) / Decimal(days_in_year)


def effective_annual_rate(annual_percent: Decimal, periods_per_year: int = 12) -> Decimal:
    """Return the effective annual rate (as a fraction) of a nominal rate compounded ``periods_per_year`` times."""
    if periods_per_year <= 0:
        raise ValueError("periods_per_year must be positive")
    nominal = annual_percent / Decimal(100)
    return (1 + nominal / Decimal(periods_per_year)) ** periods_per_year - 1
