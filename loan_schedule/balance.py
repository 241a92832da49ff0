"""Outstanding principal bookkeeping.

``BalanceTracker`` owns the running principal of one schedule run. Scheduled
principal reductions and out-of-schedule adjustments are applied in date
order: before a period is computed, every adjustment effective strictly
before that period's due date is applied. An adjustment dated exactly on a
due date therefore takes effect after that period's scheduled principal.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import date
from decimal import Decimal
from typing import Deque, Iterable, List, Sequence, Set, Tuple

from .data_models import PrincipalAdjustment
from .exceptions import BalanceUnderflow

logger = logging.getLogger(__name__)


class BalanceTracker:
    def __init__(
        self,
        principal: Decimal,
        adjustments: Iterable[PrincipalAdjustment],
        due_dates: Sequence[date],
    ) -> None:
        self._principal = principal
        self._balance = principal
        self._due_dates = list(due_dates)
        self._pending: Deque[PrincipalAdjustment] = deque(
            sorted(adjustments, key=lambda a: a.effective_date)
        )
        self._events: List[Tuple[date, Decimal]] = []
        self._changed_periods: Set[int] = set()

    @property
    def balance(self) -> Decimal:
        return self._balance

    def balance_entering_period(self, period_number: int) -> Decimal:
        """Apply adjustments effective before the period's due date and return the balance."""
        due = self._due_dates[period_number - 1]
        while self._pending and self._pending[0].effective_date < due:
            self.apply_adjustment(self._pending.popleft())
            self._changed_periods.add(period_number)
        return self._balance

    def changed_in_period(self, period_number: int) -> bool:
        """Whether an adjustment was applied on entering ``period_number``."""
        return period_number in self._changed_periods

    def apply_scheduled_principal(self, period_number: int, amount: Decimal) -> Decimal:
        due = self._due_dates[period_number - 1]
        if amount > self._balance:
            raise BalanceUnderflow(self._balance, -amount, due)
        self._balance -= amount
        self._events.append((due, -amount))
        return self._balance

    def apply_adjustment(self, adjustment: PrincipalAdjustment) -> Decimal:
        new_balance = self._balance + adjustment.amount
        if new_balance < 0:
            raise BalanceUnderflow(self._balance, adjustment.amount, adjustment.effective_date)
        logger.debug(
            "Adjustment %s on %s: balance %s -> %s",
            adjustment.amount,
            adjustment.effective_date,
            self._balance,
            new_balance,
        )
        self._balance = new_balance
        self._events.append((adjustment.effective_date, adjustment.amount))
        return self._balance

    def pending_adjustments(self) -> Tuple[PrincipalAdjustment, ...]:
        return tuple(self._pending)

    def balance_as_of(self, on_date: date) -> Decimal:
        """Outstanding principal after every recorded event dated on or before ``on_date``."""
        return self._principal + sum(
            (delta for when, delta in self._events if when <= on_date), Decimal(0)
        )
