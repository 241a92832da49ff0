"""Amortization strategies.

Each strategy turns the state of one period (balance, rate, days, remaining
periods) into a ``(principal, interest)`` split. Strategies are stateful only
within one schedule run: annuity strategies cache their level payment and
differentiated strategies their level instalment, and re-solve them from the
current period forward when the balance is perturbed by an adjustment (or,
for floating annuities, when the rate changes). Already emitted periods are
never revisited.

Interest is always ``balance * rate / 100 * year_fraction`` where the year
fraction comes from the configured day-count convention applied to the real
elapsed days of the period.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple, Type, Union

from .data_models import CalculationMethod
from .rates import annual_to_monthly_rate

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


@dataclass(frozen=True)
class PeriodInputs:
    period_number: int
    balance: Decimal
    day_count: int
    year_fraction: Decimal
    annual_rate: Decimal
    remaining_periods: int
    deferred: bool = False
    balance_changed: bool = False
    months_per_year: int = 12


def accrue_interest(balance: Decimal, annual_rate: Decimal, year_fraction: Decimal) -> Decimal:
    return balance * annual_rate / Decimal(100) * year_fraction


def annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


class ClassicAnnuity:
    """Level total payment at one fixed rate.

    The payment is solved when amortization begins (right after deferment)
    and re-solved whenever an adjustment changes the balance.
    """

    method = CalculationMethod.CLASSIC_ANNUITY
    floating_rate = False

    def __init__(self) -> None:
        self._payment: Optional[Decimal] = None
        self._solved_rate: Optional[Decimal] = None

    @property
    def payment(self) -> Optional[Decimal]:
        return self._payment

    def _needs_resolve(self, inputs: PeriodInputs) -> bool:
        return self._payment is None or inputs.balance_changed

    def split(self, inputs: PeriodInputs) -> Tuple[Decimal, Decimal]:
        interest = accrue_interest(inputs.balance, inputs.annual_rate, inputs.year_fraction)
        if inputs.deferred:
            return ZERO, interest
        if self._needs_resolve(inputs):
            rate_per_month = annual_to_monthly_rate(inputs.annual_rate, inputs.months_per_year)
            self._payment = annuity_payment(inputs.balance, rate_per_month, inputs.remaining_periods)
            self._solved_rate = inputs.annual_rate
            logger.debug(
                "Period %d: annuity solved at %s%% over %d periods -> %s",
                inputs.period_number,
                inputs.annual_rate,
                inputs.remaining_periods,
                self._payment,
            )
        # a long first period can accrue more than the level payment
        principal = max(self._payment - interest, ZERO)
        return principal, interest


class FloatingAnnuity(ClassicAnnuity):
    """Level total payment between rate changes.

    Re-solved from the current period whenever the period's weighted-average
    rate differs from the rate of the previous solve.
    """

    method = CalculationMethod.FLOATING_ANNUITY
    floating_rate = True

    def _needs_resolve(self, inputs: PeriodInputs) -> bool:
        return super()._needs_resolve(inputs) or inputs.annual_rate != self._solved_rate


class ClassicDifferentiated:
    """Level principal instalment at one fixed rate; the total declines with the balance."""

    method = CalculationMethod.CLASSIC_DIFFERENTIATED
    floating_rate = False

    def __init__(self) -> None:
        self._instalment: Optional[Decimal] = None

    @property
    def instalment(self) -> Optional[Decimal]:
        return self._instalment

    def split(self, inputs: PeriodInputs) -> Tuple[Decimal, Decimal]:
        interest = accrue_interest(inputs.balance, inputs.annual_rate, inputs.year_fraction)
        if inputs.deferred:
            return ZERO, interest
        if self._instalment is None or inputs.balance_changed:
            self._instalment = inputs.balance / Decimal(inputs.remaining_periods)
            logger.debug(
                "Period %d: instalment %s over %d periods",
                inputs.period_number,
                self._instalment,
                inputs.remaining_periods,
            )
        return min(self._instalment, inputs.balance), interest


class FloatingDifferentiated(ClassicDifferentiated):
    """Level principal instalment; interest follows each period's weighted-average rate.

    Rate changes never re-solve the instalment since principal does not
    depend on the rate.
    """

    method = CalculationMethod.FLOATING_DIFFERENTIATED
    floating_rate = True


Strategy = Union[ClassicAnnuity, FloatingAnnuity, ClassicDifferentiated, FloatingDifferentiated]

_REGISTRY: Dict[CalculationMethod, Type] = {
    cls.method: cls
    for cls in (ClassicAnnuity, ClassicDifferentiated, FloatingAnnuity, FloatingDifferentiated)
}


def get_strategy(method: Union[CalculationMethod, str]) -> Strategy:
    """Return a fresh strategy instance for ``method``."""
    try:
        key = CalculationMethod(method)
    except ValueError as exc:
        raise ValueError(f"Unsupported calculation method: {method}") from exc
    return _REGISTRY[key]()
