"""Output helpers for the mortgage calculator.

The results screen uses different rounding for different figures: the
monthly payment keeps pence, totals are shown in whole pounds and the
loan-to-value ratio has one decimal. Each rule has its own function here and
they are deliberately not folded into one. The ``print_*`` functions render
results as plain text for the command line.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import MortgageResults, ScenarioComparison, SchedulePeriod, ScheduleSample
from .utils import format_grouped

CURRENCY = "£"
DASH = "–"


def format_monthly(value: float, has_result: bool = True) -> str:
    """Monthly payment with two decimals, ``£0.00`` when there is no result."""
    if not has_result or value <= 0:
        return f"{CURRENCY}0.00"
    return f"{CURRENCY}{value:.2f}"


def format_loan_amount(value: float) -> str:
    if not value:
        return f"{CURRENCY}0"
    return f"{CURRENCY}{format_grouped(value, 3)}"


def format_ltv(value: float) -> str:
    if not value:
        return DASH
    return f"{value:.1f}%"


def format_total(value: float, placeholder: str = f"{CURRENCY}0") -> str:
    """Whole-pound total with grouping, or ``placeholder`` if not positive."""
    if value <= 0:
        return placeholder
    return f"{CURRENCY}{format_grouped(value, 0)}"


def format_comparison_monthly(value: float) -> str:
    return f"{CURRENCY}{value:.2f}" if value > 0 else DASH


def format_schedule_amount(value: float) -> str:
    return f"{CURRENCY}{format_grouped(value, 0)}"


def format_rate(raw: str) -> str:
    return f"{raw}%"


def print_summary(results: MortgageResults) -> None:
    """Print the results step in a human-readable format."""
    scenario_a = results.scenario_a
    print("Summary")
    print("-" * 72)
    print(f"Monthly payment (A) : {format_monthly(scenario_a.monthly_payment, results.has_result)}")
    print(f"Loan amount         : {format_loan_amount(results.metrics.loan_amount)}")
    print(f"Loan-to-value       : {format_ltv(results.metrics.loan_to_value)}")
    print(f"Total interest (A)  : {format_total(scenario_a.total_interest)}")
    print(f"Total repaid (A)    : {format_total(scenario_a.total_payment)}")
    if results.breakdown.principal_pct:
        print(
            f"Cost breakdown      : {results.breakdown.principal_pct:.1f}% principal, "
            f"{results.breakdown.interest_pct:.1f}% interest"
        )
    print("-" * 72)


def print_periods(periods: Iterable[SchedulePeriod]) -> None:
    print("\t".join(["Month", "Principal", "Interest", "Balance"]))
    for period in periods:
        row = [
            str(period.month),
            format_schedule_amount(period.principal),
            format_schedule_amount(period.interest),
            format_schedule_amount(period.balance),
        ]
        print("\t".join(row))


def print_schedule_sample(sample: ScheduleSample) -> None:
    """Print the first and final months of the schedule as two small tables."""
    if sample.is_empty:
        print("No repayment schedule: enter a price, term and interest rate first.")
        return
    print("Repayment schedule snapshot (Scenario A)")
    print("First months")
    print_periods(sample.first)
    print("Final months")
    print_periods(sample.last)


def print_comparison(comparison: ScenarioComparison, rate_a: str, rate_b: str) -> None:
    """Print scenario A and B side by side with the difference (B - A)."""
    print("Scenario comparison")
    print("=" * 72)
    print(f"Comparing your main rate ({format_rate(rate_a)}) with your comparison rate ({format_rate(rate_b)}).")
    a, b = comparison.scenario_a, comparison.scenario_b
    print(f"{'Metric':20s} {'Scenario A':>15s} {'Scenario B':>15s} {'Difference':>15s}")
    for label, v1, v2 in (
        ("monthly_payment", a.monthly_payment, b.monthly_payment),
        ("total_interest", a.total_interest, b.total_interest),
        ("total_payment", a.total_payment, b.total_payment),
    ):
        print(f"{label:20s} {v1:15.2f} {v2:15.2f} {v2 - v1:15.2f}")
    print("=" * 72)
