"""Core calculation engine for the mortgage calculator.

This module implements the financial logic behind the results screen: the
loan amount and loan-to-value ratio, the level (annuity) monthly payment for
one or two interest rates, and a month-by-month amortization schedule from
which the first and last few periods are sampled.

Every function is total. Inputs outside the valid domain (a zero price, a
missing rate, a negative term) produce zero or empty results instead of
raising, so a partially filled form can be recomputed after each keystroke.
Calculations use plain floats; rounding happens only when results are
displayed.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from itertools import islice
from typing import Iterator

from .data_models import (
    CostBreakdown,
    LoanMetrics,
    MortgageForm,
    MortgageInputs,
    MortgageResults,
    ScenarioComparison,
    ScenarioResult,
    SchedulePeriod,
    ScheduleSample,
)
from .utils import parse_number

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 3

# Residual balance treated as fully repaid. Floating point error can leave
# a few millionths outstanding after the final payment.
BALANCE_EPSILON = 0.005

# Upper bound on simulated months (1,000 years). A payment that only covers
# the interest never reduces the balance, so the loop needs its own limit.
MAX_SCHEDULE_PERIODS = 12_000


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _calculate_annuity_payment(principal: float, rate_per_month: float, periods: float) -> float:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if rate_per_month == 0:
        return principal / periods
    factor = (1 + rate_per_month) ** periods
    return principal * (rate_per_month * factor) / (factor - 1)


def compute_amortization(principal: float, annual_rate_percent: float, term_years: float) -> ScenarioResult:
    """Compute the level monthly payment and totals for a repayment mortgage.

    Returns an all-zero :class:`ScenarioResult` when the principal, the rate or
    the term is not positive. A zero rate therefore means "no result" here;
    the interest-free branch of :func:`_calculate_annuity_payment` is only
    reachable by calling the helper directly.

    Inputs the float formula cannot represent (a term so long that
    ``(1 + r) ** n`` overflows, a rate so small that ``1 + r == 1``, totals
    beyond the float range) also give the zero result.
    """
    if not _all_finite(principal, annual_rate_percent, term_years):
        return ScenarioResult()
    if principal <= 0 or annual_rate_percent <= 0 or term_years <= 0:
        return ScenarioResult()

    rate_per_month = annual_rate_percent / 100 / 12
    periods = term_years * 12
    try:
        monthly_payment = _calculate_annuity_payment(principal, rate_per_month, periods)
    except (OverflowError, ZeroDivisionError):
        logger.debug("No annuity payment for %r at %r%% over %r years", principal, annual_rate_percent, term_years)
        return ScenarioResult()
    total_payment = monthly_payment * periods
    total_interest = total_payment - principal
    if not _all_finite(monthly_payment, total_payment, total_interest) or monthly_payment <= 0:
        return ScenarioResult()
    return ScenarioResult(
        monthly_payment=monthly_payment,
        total_payment=total_payment,
        total_interest=total_interest,
    )


def amortization_rows(
    loan_amount: float,
    annual_rate_percent: float,
    term_years: float,
    monthly_payment: float,
) -> Iterator[SchedulePeriod]:
    """Yield the amortization schedule one month at a time.

    Iteration stops once the balance is repaid or ``term_years * 12`` periods
    have been produced, whichever comes first, so the schedule may be shorter
    than the nominal term. It never runs past ``MAX_SCHEDULE_PERIODS``.
    Nothing is yielded when any input is not positive or not finite.

    The principal and interest reported for a period are clamped to zero; a
    payment smaller than the interest due shows as zero principal.
    """
    if not _all_finite(loan_amount, annual_rate_percent, term_years, monthly_payment):
        return
    if loan_amount <= 0 or annual_rate_percent <= 0 or term_years <= 0 or monthly_payment <= 0:
        return

    rate_per_month = annual_rate_percent / 100 / 12
    max_periods = min(term_years * 12, MAX_SCHEDULE_PERIODS)
    balance = loan_amount
    month = 1
    while month <= max_periods:
        interest = balance * rate_per_month
        principal = monthly_payment - interest
        balance = balance - principal
        if balance < BALANCE_EPSILON:
            balance = 0.0

        yield SchedulePeriod(
            month=month,
            principal=principal if principal > 0 else 0.0,
            interest=interest if interest > 0 else 0.0,
            balance=balance,
        )

        if balance <= 0:
            break
        month += 1


def sample_schedule(
    loan_amount: float,
    annual_rate_percent: float,
    term_years: float,
    monthly_payment: float,
) -> ScheduleSample:
    """Return the first and last three periods of the schedule.

    The two windows overlap when the schedule has fewer than six periods and
    both hold every period when it has three or fewer.
    """
    rows = amortization_rows(loan_amount, annual_rate_percent, term_years, monthly_payment)
    first = tuple(islice(rows, SAMPLE_SIZE))
    last = deque(first, maxlen=SAMPLE_SIZE)
    last.extend(rows)
    logger.debug(
        "Schedule for %r at %r%% has %d periods", loan_amount, annual_rate_percent, last[-1].month if last else 0
    )
    return ScheduleSample(first=first, last=tuple(last))


def compute_loan_metrics(property_price: float, deposit: float) -> LoanMetrics:
    """Return the amount borrowed and its loan-to-value ratio.

    The loan amount is the price less the deposit, never negative. It is zero
    while no price has been entered or when the deposit is negative.
    """
    if property_price and deposit >= 0:
        loan_amount = max(property_price - deposit, 0.0)
    else:
        loan_amount = 0.0
    return LoanMetrics(loan_amount=loan_amount, loan_to_value=compute_ltv(loan_amount, property_price))


def compute_ltv(loan_amount: float, property_price: float) -> float:
    """Loan amount as a percentage of the property price, or 0."""
    if loan_amount > 0 and property_price > 0:
        return loan_amount / property_price * 100
    return 0.0


def has_valid_rate(rate: float) -> bool:
    return 0 < rate < 100


def compare_scenarios(
    loan_amount: float,
    term_years: float,
    rate_a: float,
    rate_b: float,
) -> ScenarioComparison:
    """Evaluate two interest rates against the same principal and term.

    Scenario B is only computed when its rate lies strictly between 0 and 100
    and there is a loan and a term to apply it to; otherwise its result stays
    at zero and ``has_scenario_b`` is False.
    """
    scenario_a = compute_amortization(loan_amount, rate_a, term_years)
    has_scenario_b = loan_amount > 0 and has_valid_rate(rate_b) and term_years > 0
    scenario_b = compute_amortization(loan_amount, rate_b, term_years) if has_scenario_b else ScenarioResult()
    return ScenarioComparison(scenario_a=scenario_a, scenario_b=scenario_b, has_scenario_b=has_scenario_b)


def cost_breakdown(loan_amount: float, total_interest: float) -> CostBreakdown:
    """Split the total repaid into principal and interest percentages."""
    total = loan_amount + total_interest if loan_amount > 0 and total_interest > 0 else 0.0
    if total <= 0:
        return CostBreakdown()
    return CostBreakdown(
        principal_pct=loan_amount / total * 100,
        interest_pct=total_interest / total * 100,
    )


def parse_inputs(form: MortgageForm) -> MortgageInputs:
    return MortgageInputs(
        property_price=parse_number(form.property_price),
        deposit=parse_number(form.deposit),
        income=parse_number(form.income),
        term_years=parse_number(form.term),
        rate_a=parse_number(form.interest_rate),
        rate_b=parse_number(form.interest_rate_b),
    )


def compute_results(form: MortgageForm) -> MortgageResults:
    """Run the full calculation for a form snapshot.

    Parameters
    ----------
    form: MortgageForm
        The raw field values. Incomplete forms are fine; the parts that
        cannot be computed yet come back as zeros and an empty schedule.

    Returns
    -------
    MortgageResults
        Loan metrics, both scenarios, the scenario A schedule sample and the
        principal/interest split of scenario A.
    """
    inputs = parse_inputs(form)
    metrics = compute_loan_metrics(inputs.property_price, inputs.deposit)
    comparison = compare_scenarios(metrics.loan_amount, inputs.term_years, inputs.rate_a, inputs.rate_b)
    scenario_a = comparison.scenario_a
    schedule = sample_schedule(metrics.loan_amount, inputs.rate_a, inputs.term_years, scenario_a.monthly_payment)
    breakdown = cost_breakdown(metrics.loan_amount, scenario_a.total_interest)
    return MortgageResults(
        form=form,
        inputs=inputs,
        metrics=metrics,
        comparison=comparison,
        schedule=schedule,
        breakdown=breakdown,
    )
