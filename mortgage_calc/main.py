"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command interface.
Users can print the results summary, view a snapshot of the repayment
schedule or compare two interest rates. Results can be printed to the
terminal or exported to JSON/CSV files.

Amounts accept thousands separators, so ``--price 250,000`` works.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import click

from .data_models import MortgageForm, MortgageResults, SchedulePeriod
from .engine import amortization_rows, compute_results
from .formatter import print_comparison, print_schedule_sample, print_summary
from .wizard import FIELD_ERRORS, STEP_ONE_HINT, STEP_TWO_HINT, can_go_to_step2, can_go_to_step3, field_validity

logger = logging.getLogger(__name__)

OPTION_NAMES = {
    "property_price": "--price",
    "deposit": "--deposit",
    "income": "--income",
    "term": "--term",
    "interest_rate": "--rate",
    "interest_rate_b": "--rate-b",
}


def build_form_from_options(
    price: str,
    deposit: Optional[str],
    income: str,
    term: str,
    rate: str,
    rate_b: Optional[str] = None,
    mortgage_type: str = "fixed",
    repayment_type: str = "repayment",
) -> MortgageForm:
    """Build a form snapshot from CLI options and check it like the wizard does.

    Raises
    ------
    click.BadParameter
        If a field holds a value the form would flag as invalid.
    click.UsageError
        If the details or the rate are incomplete.
    """
    form = MortgageForm(
        property_price=price.strip(),
        deposit=(deposit or "").strip(),
        income=income.strip(),
        term=term.strip(),
        interest_rate=rate.strip(),
        interest_rate_b=(rate_b or "").strip(),
        mortgage_type=mortgage_type,
        repayment_type=repayment_type,
    )
    logger.debug("Form from options: %s", form)
    for name in field_validity(form).invalid_fields():
        raise click.BadParameter(FIELD_ERRORS[name], param_hint=OPTION_NAMES[name])
    if not can_go_to_step2(form):
        raise click.UsageError(STEP_ONE_HINT)
    if not can_go_to_step3(form):
        raise click.UsageError(STEP_TWO_HINT)
    return form


def period_to_dict(period: SchedulePeriod) -> Dict[str, Any]:
    return {
        "month": period.month,
        "principal": period.principal,
        "interest": period.interest,
        "balance": period.balance,
    }


def results_to_dict(results: MortgageResults) -> Dict[str, Any]:
    """Convert results into JSON-serialisable dictionaries."""
    comparison = results.comparison

    def scenario(result) -> Dict[str, float]:
        return {
            "monthly_payment": result.monthly_payment,
            "total_payment": result.total_payment,
            "total_interest": result.total_interest,
        }

    return {
        "inputs": results.form.to_json_dict(),
        "loan_amount": results.metrics.loan_amount,
        "loan_to_value": results.metrics.loan_to_value,
        "has_result": results.has_result,
        "scenario_a": scenario(comparison.scenario_a),
        "scenario_b": scenario(comparison.scenario_b) if comparison.has_scenario_b else None,
        "has_scenario_b": comparison.has_scenario_b,
        "cost_breakdown": {
            "principal_pct": results.breakdown.principal_pct,
            "interest_pct": results.breakdown.interest_pct,
        },
        "schedule": {
            "first": [period_to_dict(p) for p in results.schedule.first],
            "last": [period_to_dict(p) for p in results.schedule.last],
        },
    }


def full_schedule(results: MortgageResults) -> Iterable[SchedulePeriod]:
    inputs = results.inputs
    return amortization_rows(
        results.metrics.loan_amount,
        inputs.rate_a,
        inputs.term_years,
        results.scenario_a.monthly_payment,
    )


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: Iterable[SchedulePeriod]) -> None:
    """Export the full schedule to a CSV file."""
    header = ["Month", "Principal", "Interest", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for p in schedule:
            writer.writerow([p.month, p.principal, p.interest, p.balance])


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line mortgage repayment calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--price", "-p", "price", required=True, help="Property price")
@click.option("--deposit", "-d", "deposit", help="Deposit paid upfront")
@click.option("--income", "-i", "income", required=True, help="Annual income before tax")
@click.option("--term", "-t", "term", required=True, help="Loan term in years")
@click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent), scenario A")
@click.option("--rate-b", "rate_b", help="Optional comparison rate (percent), scenario B")
@click.option("--type", "mortgage_type", type=click.Choice(["fixed", "variable"]), default="fixed", help="Mortgage type")
@click.option(
    "--repayment",
    "repayment_type",
    type=click.Choice(["repayment", "interest-only"]),
    default="repayment",
    help="Repayment type",
)
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    price: str,
    deposit: Optional[str],
    income: str,
    term: str,
    rate: str,
    rate_b: Optional[str],
    mortgage_type: str,
    repayment_type: str,
    output: Optional[str],
) -> None:
    """Print the estimated monthly payment and mortgage breakdown."""
    form = build_form_from_options(price, deposit, income, term, rate, rate_b, mortgage_type, repayment_type)
    results = compute_results(form)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        export_to_json(path, results_to_dict(results))
        click.echo(f"Summary exported to {path}")
        return
    print_summary(results)
    if results.comparison.has_scenario_b:
        print_comparison(results.comparison, form.interest_rate, form.interest_rate_b)


@cli.command()
@click.option("--price", "-p", "price", required=True, help="Property price")
@click.option("--deposit", "-d", "deposit", help="Deposit paid upfront")
@click.option("--income", "-i", "income", required=True, help="Annual income before tax")
@click.option("--term", "-t", "term", required=True, help="Loan term in years")
@click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)")
@click.option("--output", "output", type=str, help="Output file path for the full schedule (.json or .csv)")
def schedule(
    price: str,
    deposit: Optional[str],
    income: str,
    term: str,
    rate: str,
    output: Optional[str],
) -> None:
    """Print the first and final months of the repayment schedule."""
    form = build_form_from_options(price, deposit, income, term, rate)
    results = compute_results(form)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, {"schedule": [period_to_dict(p) for p in full_schedule(results)]})
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, full_schedule(results))
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return
    print_schedule_sample(results.schedule)


@cli.command()
@click.option("--price", "-p", "price", required=True, help="Property price")
@click.option("--deposit", "-d", "deposit", help="Deposit paid upfront")
@click.option("--income", "-i", "income", required=True, help="Annual income before tax")
@click.option("--term", "-t", "term", required=True, help="Loan term in years")
@click.option("--rate-a", "rate_a", required=True, help="Main interest rate (percent)")
@click.option("--rate-b", "rate_b", required=True, help="Comparison interest rate (percent)")
def compare(price: str, deposit: Optional[str], income: str, term: str, rate_a: str, rate_b: str) -> None:
    """Compare two interest rates over the same loan and term.

    Example:

        mortgage-calc compare -p 250,000 -d 30,000 -i 45,000 -t 25 --rate-a 4.5 --rate-b 5.2
    """
    form = build_form_from_options(price, deposit, income, term, rate_a, rate_b)
    results = compute_results(form)
    if not results.comparison.has_scenario_b:
        raise click.UsageError("Scenario B needs a loan amount above zero; check the price and deposit.")
    print_comparison(results.comparison, form.interest_rate, form.interest_rate_b)


if __name__ == "__main__":
    cli()
