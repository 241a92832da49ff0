from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_schedule.data_models import (
    CalculationMethod,
    PaymentRecord,
    PaymentStatus,
    PrincipalAdjustment,
    RatePoint,
)
from loan_schedule.engine import generate_schedule, recalculate_schedule_from
from loan_schedule.exceptions import InvalidPrincipal


def _payments(items, paid_periods):
    return [
        PaymentRecord(
            period_number=item.period_number,
            due_date=item.due_date,
            principal_due=item.principal_due,
            interest_due=item.interest_due,
            status=PaymentStatus.PAID if item.period_number <= paid_periods else PaymentStatus.SCHEDULED,
            paid_amount=item.total_due if item.period_number <= paid_periods else None,
        )
        for item in items
    ]


def test_continues_after_paid_periods(make_terms, flat_rate):
    terms = make_terms(method=CalculationMethod.CLASSIC_DIFFERENTIATED)
    base = generate_schedule(terms, flat_rate)
    from_date = base.items[2].due_date + timedelta(days=1)

    result = recalculate_schedule_from(terms, flat_rate, [], from_date, _payments(base.items, 3))

    assert len(result.items) == 9
    assert [i.period_number for i in result.items] == list(range(4, 13))
    assert [i.due_date for i in result.items] == [i.due_date for i in base.items[3:]]
    assert all(i.principal_due == Decimal("10000") for i in result.items)
    assert result.items[-1].remaining_balance == 0
    assert result.totals.overpayment == result.totals.total_payments - Decimal("90000")


def test_unpaid_payments_are_not_settled(make_terms, flat_rate):
    terms = make_terms(method=CalculationMethod.CLASSIC_DIFFERENTIATED)
    base = generate_schedule(terms, flat_rate)
    payments = _payments(base.items, 0)
    result = recalculate_schedule_from(terms, flat_rate, [], date(2024, 4, 11), payments)
    assert len(result.items) == 12
    assert result.items[0].principal_due == Decimal("10000")


def test_earlier_adjustments_fold_into_principal(make_terms, flat_rate):
    terms = make_terms(method=CalculationMethod.CLASSIC_DIFFERENTIATED)
    adjustments = [
        PrincipalAdjustment(Decimal("-9000"), date(2024, 2, 20)),
        PrincipalAdjustment(Decimal("-9000"), date(2024, 6, 20)),
    ]
    base = generate_schedule(terms, flat_rate, adjustments)
    from_date = base.items[2].due_date + timedelta(days=1)

    result = recalculate_schedule_from(terms, flat_rate, adjustments, from_date, _payments(base.items, 3))

    paid = sum(i.principal_due for i in base.items[:3])
    entering = result.items[0].remaining_balance + result.items[0].principal_due
    assert entering == Decimal("120000") - Decimal("9000") - paid
    assert result.items[-1].remaining_balance == 0


def test_fully_settled_loan(make_terms, flat_rate):
    terms = make_terms(method=CalculationMethod.CLASSIC_DIFFERENTIATED, term_months=2)
    base = generate_schedule(terms, flat_rate)
    with pytest.raises(InvalidPrincipal):
        recalculate_schedule_from(terms, flat_rate, [], date(2024, 4, 1), _payments(base.items, 2))


@pytest.mark.parametrize(
    "method", [CalculationMethod.CLASSIC_ANNUITY, CalculationMethod.CLASSIC_DIFFERENTIATED]
)
def test_classic_keeps_disbursement_rate(make_terms, method):
    terms = make_terms(method=method)
    rates = [
        RatePoint(Decimal("10"), date(2024, 1, 10)),
        RatePoint(Decimal("20"), date(2024, 3, 1)),
    ]
    base = generate_schedule(terms, rates)
    from_date = base.items[2].due_date + timedelta(days=1)

    result = recalculate_schedule_from(terms, rates, [], from_date, _payments(base.items, 3))

    assert all(i.average_rate == Decimal("10") for i in result.items)
    assert result.items[-1].remaining_balance == 0


def test_floating_follows_later_rate(make_terms):
    terms = make_terms(method=CalculationMethod.FLOATING_DIFFERENTIATED)
    rates = [
        RatePoint(Decimal("10"), date(2024, 1, 10)),
        RatePoint(Decimal("20"), date(2024, 3, 1)),
    ]
    base = generate_schedule(terms, rates)
    from_date = base.items[2].due_date + timedelta(days=1)

    result = recalculate_schedule_from(terms, rates, [], from_date, _payments(base.items, 3))

    assert all(i.average_rate == Decimal("20") for i in result.items)
