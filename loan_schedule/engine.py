"""Core calculation engine for the schedule.

This module assembles a credit's payment schedule from its terms, its
interest rate timeline and its principal adjustments. It supports the four
calculation methods (classic and floating, annuity and differentiated),
interest-only deferment, mid-life rate changes and out-of-schedule principal
changes. Results are returned as a ``ScheduleResult`` holding the list of
``ScheduleItem`` objects and the ``ScheduleTotals`` summary.

The computation is a single forward pass over the periods. All working state
lives inside one call, and decimal arithmetic runs in a local context, so
concurrent calls need no coordination.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional, Union

from .balance import BalanceTracker
from .config import DECIMAL_PRECISION, DEFAULT_SETTINGS, ScheduleSettings
from .data_models import (
    CalculationMethod,
    CreditTerms,
    PaymentRecord,
    PaymentStatus,
    PrincipalAdjustment,
    RatePoint,
    ScheduleItem,
    ScheduleResult,
    ScheduleTotals,
)
from .daycount import get_day_count
from .due_dates import due_dates, period_bounds
from .exceptions import BalanceUnderflow, InvalidPrincipal, InvalidTerm, RoundingToleranceExceeded
from .rates import RateTimeline
from .strategies import PeriodInputs, get_strategy
from .utils import round_money

logger = logging.getLogger(__name__)

Rates = Union[RateTimeline, Iterable[RatePoint]]


def validate_terms(terms: CreditTerms) -> None:
    """Raise if ``terms`` cannot produce a schedule."""
    if terms.principal <= 0:
        raise InvalidPrincipal(terms.principal)
    if terms.term_months <= 0:
        raise InvalidTerm("Term must be positive", {"term_months": terms.term_months})
    if terms.deferment_months < 0:
        raise InvalidTerm(
            "Deferment must not be negative", {"deferment_months": terms.deferment_months}
        )
    if terms.term_months <= terms.deferment_months:
        raise InvalidTerm(
            "Term must be longer than the deferment period",
            {"term_months": terms.term_months, "deferment_months": terms.deferment_months},
        )
    if not 1 <= terms.payment_day <= 31:
        raise InvalidTerm("Payment day must be between 1 and 31", {"payment_day": terms.payment_day})


def totals_for(items: Iterable[ScheduleItem], principal: Decimal) -> ScheduleTotals:
    """Return the totals summary of ``items`` for a loan of ``principal``."""
    total_payments = Decimal(0)
    total_interest = Decimal(0)
    for item in items:
        total_payments += item.total_due
        total_interest += item.interest_due
    return ScheduleTotals(
        total_payments=total_payments,
        total_interest=total_interest,
        overpayment=total_payments - principal,
    )


def generate_schedule(
    terms: CreditTerms,
    rates: Rates,
    adjustments: Iterable[PrincipalAdjustment] = (),
    settings: Optional[ScheduleSettings] = None,
) -> ScheduleResult:
    """Compute the payment schedule and totals of a credit.

    Parameters
    ----------
    terms: CreditTerms
        Principal, term, method, start date, deferment and payment day.
    rates: RateTimeline or iterable of RatePoint
        Annual rates with their effective dates. Classic methods use the rate
        in effect on the start date for the whole loan.
    adjustments: iterable of PrincipalAdjustment
        Out-of-schedule principal changes. An adjustment effective before a
        period's due date changes the balance that period accrues on; one
        dated exactly on a due date takes effect in the following period.
    settings: ScheduleSettings
        Rounding quanta, tolerance and day-count convention.

    Returns
    -------
    ScheduleResult
        One item per period plus the totals. Unpacks as ``items, totals``.

    Raises
    ------
    InvalidPrincipal, InvalidTerm, NoApplicableRate, BalanceUnderflow,
    RoundingToleranceExceeded
    """
    settings = settings or DEFAULT_SETTINGS
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return _assemble(terms, rates, list(adjustments), settings)


def _assemble(
    terms: CreditTerms,
    rates: Rates,
    adjustments: List[PrincipalAdjustment],
    settings: ScheduleSettings,
) -> ScheduleResult:
    validate_terms(terms)
    method = CalculationMethod(terms.method)
    timeline = rates if isinstance(rates, RateTimeline) else RateTimeline(rates)
    dates = due_dates(terms.start_date, terms.payment_day, terms.term_months)
    year_fraction = get_day_count(settings.day_count)
    strategy = get_strategy(method)
    tracker = BalanceTracker(terms.principal, adjustments, dates)

    fixed_rate = None if strategy.floating_rate else timeline.rate_at(terms.start_date)
    quantum = settings.money_quantum

    logger.debug(
        "Building %s schedule: principal=%s term=%d deferment=%d start=%s",
        method.value,
        terms.principal,
        terms.term_months,
        terms.deferment_months,
        terms.start_date,
    )

    items: List[ScheduleItem] = []
    for period_number, (period_start, due) in enumerate(period_bounds(terms.start_date, dates), start=1):
        balance = tracker.balance_entering_period(period_number)
        if fixed_rate is not None:
            annual_rate = fixed_rate
        else:
            annual_rate = timeline.weighted_average_rate(period_start, due)

        inputs = PeriodInputs(
            period_number=period_number,
            balance=balance,
            day_count=(due - period_start).days,
            year_fraction=year_fraction(period_start, due),
            annual_rate=annual_rate,
            remaining_periods=terms.term_months - period_number + 1,
            deferred=period_number <= terms.deferment_months,
            balance_changed=tracker.changed_in_period(period_number),
            months_per_year=settings.months_per_year,
        )
        principal, interest = strategy.split(inputs)
        interest = round_money(interest, quantum)
        if period_number == terms.term_months:
            # the last period absorbs every rounding remainder
            principal = balance
        else:
            principal = min(round_money(principal, quantum), balance)

        remaining = tracker.apply_scheduled_principal(period_number, principal)
        items.append(
            ScheduleItem(
                period_number=period_number,
                due_date=due,
                principal_due=principal,
                interest_due=interest,
                total_due=principal + interest,
                remaining_balance=remaining,
                average_rate=annual_rate.quantize(settings.rate_quantum),
            )
        )

    _reconcile(tracker, settings)
    totals = totals_for(items, terms.principal)
    logger.debug(
        "Schedule built: %d periods, total payments %s, total interest %s",
        len(items),
        totals.total_payments,
        totals.total_interest,
    )
    return ScheduleResult(items=items, totals=totals)


def _reconcile(tracker: BalanceTracker, settings: ScheduleSettings) -> None:
    """Check that nothing is left outstanding after the last period.

    Adjustments dated on or after the final due date cannot be amortized by
    any period. Repayments among them may not take the balance below zero;
    additions are only tolerated when they are within the tolerance.
    """
    residual = tracker.balance
    for adjustment in tracker.pending_adjustments():
        logger.warning(
            "Adjustment of %s on %s falls after the final due date",
            adjustment.amount,
            adjustment.effective_date,
        )
        if residual + adjustment.amount < 0:
            raise BalanceUnderflow(residual, adjustment.amount, adjustment.effective_date)
        residual += adjustment.amount
    if abs(residual) > settings.tolerance:
        raise RoundingToleranceExceeded(residual, settings.tolerance)


def recalculate_schedule_from(
    terms: CreditTerms,
    rates: Rates,
    adjustments: Iterable[PrincipalAdjustment],
    from_date: date,
    payments: Iterable[PaymentRecord],
    settings: Optional[ScheduleSettings] = None,
) -> ScheduleResult:
    """Rebuild the unpaid remainder of a schedule starting at ``from_date``.

    Payments marked paid with a due date before ``from_date`` are settled:
    their principal is taken off the loan and they shorten the term and the
    deferment. Adjustments effective before ``from_date`` are folded into the
    starting principal, later ones are replayed. Classic methods keep the rate
    in effect on the original start date. The new items continue the
    existing period numbering and their totals measure the overpayment
    against the remaining principal.
    """
    adjustments = list(adjustments)
    timeline = rates if isinstance(rates, RateTimeline) else RateTimeline(rates)
    if not CalculationMethod(terms.method).is_floating:
        # the fixed rate stays the one in effect at disbursement
        timeline = RateTimeline([RatePoint(timeline.rate_at(terms.start_date), from_date)])
    settled = [p for p in payments if p.status == PaymentStatus.PAID and p.due_date < from_date]
    paid_principal = sum((p.principal_due for p in settled), Decimal(0))
    prior_adjustments = sum(
        (a.amount for a in adjustments if a.effective_date < from_date), Decimal(0)
    )
    later_adjustments = [a for a in adjustments if a.effective_date >= from_date]

    remaining_terms = replace(
        terms,
        principal=terms.principal + prior_adjustments - paid_principal,
        start_date=from_date,
        term_months=terms.term_months - len(settled),
        deferment_months=max(terms.deferment_months - len(settled), 0),
    )
    logger.info(
        "Recalculating from %s: %d settled payments, remaining principal %s over %d periods",
        from_date,
        len(settled),
        remaining_terms.principal,
        remaining_terms.term_months,
    )
    result = generate_schedule(remaining_terms, timeline, later_adjustments, settings)
    for item in result.items:
        item.period_number += len(settled)
    return result
