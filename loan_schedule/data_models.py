"""Data models for the schedule engine.

This module defines dataclasses representing the entities the engine consumes
and produces: the credit terms, interest rate points, principal adjustments,
individual schedule items and the totals summary. Inputs are frozen so a
schedule run can rely on them not changing underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator, List, Optional


class CalculationMethod(str, Enum):
    """Amortization method of a credit.

    ``classic`` methods use one fixed annual rate for the whole loan while
    ``floating`` methods follow the rate timeline. ``annuity`` keeps the total
    payment level, ``differentiated`` keeps the principal instalment level.
    """

    CLASSIC_ANNUITY = "classic_annuity"
    CLASSIC_DIFFERENTIATED = "classic_differentiated"
    FLOATING_ANNUITY = "floating_annuity"
    FLOATING_DIFFERENTIATED = "floating_differentiated"

    @property
    def is_floating(self) -> bool:
        return self in (CalculationMethod.FLOATING_ANNUITY, CalculationMethod.FLOATING_DIFFERENTIATED)

    @property
    def is_annuity(self) -> bool:
        return self in (CalculationMethod.CLASSIC_ANNUITY, CalculationMethod.FLOATING_ANNUITY)


class PaymentStatus(str, Enum):
    SCHEDULED = "scheduled"
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"
    CANCELED = "canceled"


@dataclass(frozen=True)
class CreditTerms:
    """Terms of a credit contract.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed. Must be positive.
    term_months: int
        Number of monthly periods in the schedule.
    start_date: date
        Disbursement date. Interest for period 1 accrues from this date.
    method: CalculationMethod
        How principal and interest are split each period.
    deferment_months: int
        Number of leading interest-only periods.
    payment_day: int
        Day of the month payments fall due (1-31). Months shorter than this
        day use their last day instead.
    """

    principal: Decimal
    term_months: int
    start_date: date
    method: CalculationMethod
    deferment_months: int = 0
    payment_day: int = 1


@dataclass(frozen=True)
class RatePoint:
    """An annual interest rate (in percent) effective from ``effective_date`` inclusive."""

    annual_percent: Decimal
    effective_date: date
    note: Optional[str] = None


@dataclass(frozen=True)
class PrincipalAdjustment:
    """An out-of-schedule change to the outstanding principal.

    A positive ``amount`` increases the principal (an additional drawdown),
    a negative one decreases it (an early repayment).
    """

    amount: Decimal
    effective_date: date
    note: Optional[str] = None


@dataclass
class ScheduleItem:
    """One period of the payment schedule."""

    period_number: int
    due_date: date
    principal_due: Decimal
    interest_due: Decimal
    total_due: Decimal
    remaining_balance: Decimal
    average_rate: Decimal


@dataclass
class ScheduleTotals:
    total_payments: Decimal
    total_interest: Decimal
    overpayment: Decimal


@dataclass
class ScheduleResult:
    """Items and totals of a schedule run.

    Iterating yields ``items`` then ``totals`` so the result unpacks like the
    ``(schedule, summary)`` tuple callers are used to.
    """

    items: List[ScheduleItem] = field(default_factory=list)
    totals: Optional[ScheduleTotals] = None

    def __iter__(self) -> Iterator[object]:
        yield self.items
        yield self.totals

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class PaymentRecord:
    """A tracked payment of an existing schedule, used for recalculation."""

    period_number: int
    due_date: date
    principal_due: Decimal
    interest_due: Decimal
    status: PaymentStatus = PaymentStatus.SCHEDULED
    paid_amount: Optional[Decimal] = None
