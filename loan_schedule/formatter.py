"""Output helpers for the schedule engine.

This module renders schedules and totals in a tabular text format for the
command line and converts them into plain JSON-serialisable dictionaries.
We rely only on built-in printing and string formatting.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .data_models import CreditTerms, ScheduleItem, ScheduleResult, ScheduleTotals


def print_summary(terms: CreditTerms, totals: ScheduleTotals, periods: int) -> None:
    """Print the totals of a schedule in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Principal          : {terms.principal:.2f}")
    print(f"Method             : {terms.method.value}")
    print(f"Periods            : {periods}")
    if terms.deferment_months:
        print(f"Deferment          : {terms.deferment_months} months")
    print(f"Total payments     : {totals.total_payments:.2f}")
    print(f"Total interest     : {totals.total_interest:.2f}")
    print(f"Overpayment        : {totals.overpayment:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleItem]) -> None:
    """Print the payment schedule as a simple tab-separated table."""
    headers = [
        "Period",
        "Date",
        "Total",
        "Principal",
        "Interest",
        "Balance",
        "Rate",
    ]
    print("\t".join(headers))
    for item in schedule:
        row = [
            str(item.period_number),
            item.due_date.isoformat(),
            f"{item.total_due:.2f}",
            f"{item.principal_due:.2f}",
            f"{item.interest_due:.2f}",
            f"{item.remaining_balance:.2f}",
            f"{item.average_rate:.4f}%",
        ]
        print("\t".join(row))


def item_to_dict(item: ScheduleItem) -> Dict[str, Any]:
    return {
        "periodNumber": item.period_number,
        "dueDate": item.due_date.isoformat(),
        "principalDue": float(item.principal_due),
        "interestDue": float(item.interest_due),
        "totalDue": float(item.total_due),
        "remainingBalance": float(item.remaining_balance),
        "averageRate": float(item.average_rate),
    }


def totals_to_dict(totals: ScheduleTotals) -> Dict[str, float]:
    return {
        "totalPayments": float(totals.total_payments),
        "totalInterest": float(totals.total_interest),
        "overpayment": float(totals.overpayment),
    }


def result_to_dict(terms: CreditTerms, result: ScheduleResult) -> Dict[str, Any]:
    """Convert a schedule run into the ``{loan, schedule, totals}`` payload."""
    schedule: List[Dict[str, Any]] = [item_to_dict(item) for item in result.items]
    return {
        "loan": {
            "principal": float(terms.principal),
            "calculationMethod": terms.method.value,
            "termMonths": terms.term_months,
            "startDate": terms.start_date.isoformat(),
        },
        "schedule": schedule,
        "totals": totals_to_dict(result.totals),
    }
