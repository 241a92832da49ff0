"""Due date generation.

Period ``k`` falls due on ``payment_day`` of the month ``k`` months after the
start month. Months shorter than ``payment_day`` clamp to their last day
rather than rolling into the following month, so a payment day of 31 gives
Feb 28/29, Apr 30 and so on.
"""

from __future__ import annotations

from datetime import date
from typing import Iterator, List, Sequence, Tuple

from .exceptions import InvalidTerm
from .utils import add_months, days_in_month


def due_date_for_period(start_date: date, payment_day: int, period_number: int) -> date:
    """Return the due date of ``period_number`` (1-based)."""
    month_anchor = add_months(start_date.replace(day=1), period_number)
    day = min(payment_day, days_in_month(month_anchor.year, month_anchor.month))
    return month_anchor.replace(day=day)


def due_dates(start_date: date, payment_day: int, term_months: int) -> List[date]:
    """Return the ordered due dates of all ``term_months`` periods."""
    if not 1 <= payment_day <= 31:
        raise InvalidTerm("Payment day must be between 1 and 31", {"payment_day": payment_day})
    if term_months <= 0:
        raise InvalidTerm("Term must be positive", {"term_months": term_months})
    return [due_date_for_period(start_date, payment_day, k) for k in range(1, term_months + 1)]


def period_bounds(start_date: date, dates: Sequence[date]) -> Iterator[Tuple[date, date]]:
    """Yield ``(period_start, due_date)`` for each due date.

    The first period accrues from ``start_date``; every later period accrues
    from the previous due date.
    """
    previous = start_date
    for due in dates:
        yield previous, due
        previous = due
