from datetime import date
from decimal import Decimal

import pytest

from loan_schedule.data_models import CalculationMethod, CreditTerms, RatePoint


@pytest.fixture
def make_terms():
    def _make(
        principal="120000",
        term_months=12,
        start_date=date(2024, 1, 10),
        method=CalculationMethod.CLASSIC_ANNUITY,
        deferment_months=0,
        payment_day=10,
    ):
        return CreditTerms(
            principal=Decimal(principal),
            term_months=term_months,
            start_date=start_date,
            method=method,
            deferment_months=deferment_months,
            payment_day=payment_day,
        )

    return _make


@pytest.fixture
def flat_rate():
    return [RatePoint(annual_percent=Decimal("10"), effective_date=date(2024, 1, 10))]
