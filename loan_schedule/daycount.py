"""Day count conventions used to turn elapsed days into a year fraction."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DayCountFunc = Callable[[date, date], Decimal]


def _days(start: date, end: date) -> int:
    if end < start:
        logger.debug("Swapping start/end for day count: %s, %s", start, end)
        start, end = end, start
    return (end - start).days


def _act_365f(start: date, end: date) -> Decimal:
    """Return the ACT/365F year fraction between two dates.

    Follows the convention:
        yearfrac(d1, d2) = ActualDays(d1, d2) / 365
    """
    return Decimal(_days(start, end)) / Decimal(365)


def _act_360(start: date, end: date) -> Decimal:
    return Decimal(_days(start, end)) / Decimal(360)


def _act_365l(start: date, end: date) -> Decimal:
    """ACT/365 with a 366-day year when the accrual starts in a leap year."""
    basis = 366 if calendar.isleap(min(start, end).year) else 365
    return Decimal(_days(start, end)) / Decimal(basis)


_REGISTRY: Dict[str, DayCountFunc] = {
    "ACT/365F": _act_365f,
    "ACT/360": _act_360,
    "ACT/365L": _act_365l,
}


def get_day_count(name: str) -> DayCountFunc:
    """Return a callable implementing the requested day-count convention."""
    key = name.upper()
    try:
        return _REGISTRY[key]
    except KeyError as exc:
        raise ValueError(f"Unsupported day count convention: {name}") from exc


def register_day_count(name: str, func: DayCountFunc) -> None:
    """Register a custom day-count convention."""
    key = name.upper()
    if key in _REGISTRY:
        raise ValueError(f"Day count '{name}' already registered")
    _REGISTRY[key] = func


def available_day_counts():
    return sorted(_REGISTRY)
