from datetime import date

import pytest

from loan_schedule.due_dates import due_date_for_period, due_dates, period_bounds
from loan_schedule.exceptions import InvalidTerm


def test_first_period_falls_in_the_following_month():
    assert due_dates(date(2023, 7, 14), 20, 3) == [
        date(2023, 8, 20),
        date(2023, 9, 20),
        date(2023, 10, 20),
    ]


def test_short_months_clamp_to_last_day():
    assert due_dates(date(2024, 1, 31), 31, 4) == [
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
    ]


def test_non_leap_february():
    assert due_date_for_period(date(2023, 1, 15), 30, 1) == date(2023, 2, 28)


def test_year_rollover():
    assert due_dates(date(2023, 11, 5), 5, 3) == [
        date(2023, 12, 5),
        date(2024, 1, 5),
        date(2024, 2, 5),
    ]


def test_dates_strictly_increase():
    dates = due_dates(date(2023, 1, 31), 31, 36)
    assert len(dates) == 36
    assert all(a < b for a, b in zip(dates, dates[1:]))


def test_sequence_is_restartable():
    assert due_dates(date(2024, 1, 10), 10, 6) == due_dates(date(2024, 1, 10), 10, 6)


@pytest.mark.parametrize("payment_day", [0, 32])
def test_invalid_payment_day(payment_day):
    with pytest.raises(InvalidTerm):
        due_dates(date(2024, 1, 10), payment_day, 12)


def test_invalid_term():
    with pytest.raises(InvalidTerm):
        due_dates(date(2024, 1, 10), 10, 0)


def test_period_bounds_start_at_start_date():
    dates = due_dates(date(2023, 7, 14), 20, 2)
    assert list(period_bounds(date(2023, 7, 14), dates)) == [
        (date(2023, 7, 14), date(2023, 8, 20)),
        (date(2023, 8, 20), date(2023, 9, 20)),
    ]
