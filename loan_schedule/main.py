"""Command-line interface for the schedule engine.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute a credit's full payment schedule or view only
its totals. Rates and principal adjustments are given as repeatable options.
Results can be printed to the terminal or exported to a JSON file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from .config import ScheduleSettings
from .data_models import CalculationMethod, CreditTerms, PrincipalAdjustment, RatePoint
from .daycount import available_day_counts
from .engine import generate_schedule
from .exceptions import ScheduleError
from .formatter import print_schedule, print_summary, result_to_dict, totals_to_dict
from .utils import parse_amount, parse_date, parse_percent


def parse_rate_strings(values: Tuple[str, ...], start_date) -> List[RatePoint]:
    """Parse ``YYYY-MM-DD:PERCENT`` entries; a bare percent is effective from ``start_date``."""
    points: List[RatePoint] = []
    for item in values:
        parts = item.split(":")
        if len(parts) == 1:
            effective, pct_str = start_date, parts[0]
        elif len(parts) == 2:
            try:
                effective = parse_date(parts[0])
            except ValueError as exc:
                raise click.BadParameter(str(exc))
            pct_str = parts[1]
        else:
            raise click.BadParameter(f"Rate must be in YYYY-MM-DD:PERCENT format; got {item}")
        try:
            pct = parse_percent(pct_str)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        points.append(RatePoint(annual_percent=pct, effective_date=effective))
    return points


def parse_adjustment_strings(values: Tuple[str, ...]) -> List[PrincipalAdjustment]:
    """Parse ``YYYY-MM-DD:AMOUNT[:NOTE]`` entries. Negative amounts repay principal."""
    adjustments: List[PrincipalAdjustment] = []
    for item in values:
        parts = item.split(":", 2)
        if len(parts) < 2:
            raise click.BadParameter(
                f"Adjustment must be in YYYY-MM-DD:AMOUNT[:NOTE] format; got {item}"
            )
        try:
            effective = parse_date(parts[0])
            amount = parse_amount(parts[1])
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        note = parts[2] if len(parts) == 3 else None
        adjustments.append(PrincipalAdjustment(amount=amount, effective_date=effective, note=note))
    return adjustments


def build_terms_from_options(
    principal: str,
    term: int,
    start_date: str,
    method: str,
    deferment: int,
    payment_day: Optional[int],
) -> CreditTerms:
    try:
        principal_value = parse_amount(principal)
        start_dt = parse_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return CreditTerms(
        principal=principal_value,
        term_months=term,
        start_date=start_dt,
        method=CalculationMethod(method),
        deferment_months=deferment,
        payment_day=payment_day if payment_day is not None else start_dt.day,
    )


def _credit_options(func: Callable) -> Callable:
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Credit principal (e.g. 10m, 250k)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Term in months"),
        click.option("--start-date", "-s", "start_date", required=True, help="Disbursement date (YYYY-MM-DD)"),
        click.option(
            "--method",
            "method",
            type=click.Choice([m.value for m in CalculationMethod]),
            default=CalculationMethod.CLASSIC_ANNUITY.value,
            help="Calculation method",
        ),
        click.option("--deferment", "deferment", type=int, default=0, help="Interest-only months"),
        click.option("--payment-day", "payment_day", type=int, help="Due day of month (defaults to the start day)"),
        click.option("--rate", "-r", "rate", multiple=True, required=True, help="Rate in YYYY-MM-DD:PERCENT format"),
        click.option("--adjustment", "adjustment", multiple=True, help="Adjustment in YYYY-MM-DD:AMOUNT[:NOTE] format"),
        click.option(
            "--day-count",
            "day_count",
            type=click.Choice(available_day_counts(), case_sensitive=False),
            help="Day count convention (defaults to LOAN_SCHEDULE_DAY_COUNT or ACT/365F)",
        ),
        click.option("--output", "output", type=str, help="Output file path (.json)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run(
    principal: str,
    term: int,
    start_date: str,
    method: str,
    deferment: int,
    payment_day: Optional[int],
    rate: Tuple[str, ...],
    adjustment: Tuple[str, ...],
    day_count: Optional[str],
):
    terms = build_terms_from_options(principal, term, start_date, method, deferment, payment_day)
    rates = parse_rate_strings(rate, terms.start_date)
    adjustments = parse_adjustment_strings(adjustment)
    try:
        settings = ScheduleSettings.from_env()
    except ValueError as exc:
        raise click.ClickException(f"Invalid LOAN_SCHEDULE_* setting: {exc}")
    if day_count:
        settings = replace(settings, day_count=day_count.upper())
    try:
        result = generate_schedule(terms, rates, adjustments, settings)
    except ScheduleError as exc:
        raise click.ClickException(str(exc))
    return terms, result


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    if path.suffix.lower() != ".json":
        raise click.BadParameter("Unsupported output format; use .json")
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    click.echo(f"Exported to {path}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Payment schedule calculator for credits with floating rates and adjustments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_credit_options
def schedule(output: Optional[str], **options: Any) -> None:
    """Compute and print the full payment schedule."""
    terms, result = _run(**options)
    if output:
        _write_json(Path(output), result_to_dict(terms, result))
        return
    print_summary(terms, result.totals, len(result.items))
    print_schedule(result.items)


@cli.command()
@_credit_options
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the schedule totals."""
    terms, result = _run(**options)
    if output:
        _write_json(Path(output), {"totals": totals_to_dict(result.totals)})
        return
    print_summary(terms, result.totals, len(result.items))


if __name__ == "__main__":
    cli()
