"""Utility functions for the schedule engine.

This module provides helpers for parsing user input into Python data types,
for month arithmetic on ``datetime.date`` instances and for rounding money
amounts. It uses Python's ``calendar`` module to find month lengths.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
import calendar


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date`` object.

    A bare ``YYYY-MM`` string is accepted as well and yields the first day of
    that month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    text = value.strip()
    for fmt in ("%Y-%m-%d", "%Y-%m"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date string: {value}")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, days_in_month(year, month))
    return date(year, month, day)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        result = Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("500000"), signed numbers ("-25000") and shorthand
    such as "500k" meaning 500 000 or "10m" meaning 10 000 000.
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return decimal_from_str(text) * factor


def parse_percent(value: str) -> Decimal:
    """Parse an annual rate such as "9.9" or "9.90%" into percent units."""
    text = value.strip()
    if text.endswith("%"):
        text = text[:-1]
    return decimal_from_str(text)


def round_money(value: Decimal, quantum: Decimal = Decimal("0.01")) -> Decimal:
    return value.quantize(quantum, rounding=ROUND_HALF_UP)
