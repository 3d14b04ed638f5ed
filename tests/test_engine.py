"""Tests for the calculation engine."""

from dataclasses import replace

import pytest

from mortgage_calc.data_models import MortgageForm, ScenarioResult
from mortgage_calc.engine import (
    MAX_SCHEDULE_PERIODS,
    _calculate_annuity_payment,
    amortization_rows,
    compare_scenarios,
    compute_amortization,
    compute_loan_metrics,
    compute_ltv,
    compute_results,
    cost_breakdown,
    sample_schedule,
)


class TestComputeAmortization:
    def test_reference_mortgage(self):
        result = compute_amortization(220000, 4.5, 25)

        assert result.monthly_payment == pytest.approx(1222.83, abs=0.01)
        assert result.total_payment == pytest.approx(result.monthly_payment * 300)
        assert result.total_payment == pytest.approx(366849, abs=2)
        assert result.total_interest == pytest.approx(146849, abs=2)

    @pytest.mark.parametrize("principal, rate, term", [(10_000, 1.0, 5), (500_000, 6.25, 30), (75_000, 99.0, 2)])
    def test_interest_is_total_less_principal(self, principal, rate, term):
        result = compute_amortization(principal, rate, term)

        assert result.monthly_payment > 0
        assert result.total_interest == pytest.approx(result.total_payment - principal)

    @pytest.mark.parametrize(
        "principal, rate, term",
        [(0, 4.5, 25), (-1000, 4.5, 25), (220000, 0, 25), (220000, -1, 25), (220000, 4.5, 0), (220000, 4.5, -5)],
    )
    def test_out_of_domain_gives_zero_result(self, principal, rate, term):
        assert compute_amortization(principal, rate, term) == ScenarioResult()

    @pytest.mark.parametrize(
        "principal, rate, term",
        [
            (220000, 4.5, 20000),
            (220000, 4.5, 1e300),
            (220000, 1e-20, 25),
            (1.7e308, 4.5, 25),
            (float("inf"), 4.5, 25),
            (220000, float("nan"), 25),
            (220000, 4.5, float("inf")),
        ],
    )
    def test_unrepresentable_inputs_give_zero_result(self, principal, rate, term):
        assert compute_amortization(principal, rate, term) == ScenarioResult()

    def test_interest_free_helper_divides_evenly(self):
        assert _calculate_annuity_payment(12000, 0, 12) == pytest.approx(1000)

    def test_payment_rises_with_rate(self):
        rates = [0.5, 1.0, 2.5, 4.5, 7.0, 12.0, 25.0]
        results = [compute_amortization(200000, rate, 25) for rate in rates]

        for lower, higher in zip(results, results[1:]):
            assert higher.monthly_payment > lower.monthly_payment
            assert higher.total_interest > lower.total_interest

    def test_repeat_calls_are_identical(self):
        assert compute_amortization(187500, 3.79, 30) == compute_amortization(187500, 3.79, 30)


class TestLoanMetrics:
    def test_no_deposit_borrows_full_price(self):
        metrics = compute_loan_metrics(200000, 0)

        assert metrics.loan_amount == 200000
        assert metrics.loan_to_value == pytest.approx(100.0)

    def test_deposit_reduces_loan(self):
        metrics = compute_loan_metrics(250000, 30000)

        assert metrics.loan_amount == 220000
        assert metrics.loan_to_value == pytest.approx(88.0)

    @pytest.mark.parametrize("price, deposit", [(200000, 200000), (200000, 250000), (0, 0), (0, 1000), (200000, -1)])
    def test_no_loan(self, price, deposit):
        metrics = compute_loan_metrics(price, deposit)

        assert metrics.loan_amount == 0
        assert metrics.loan_to_value == 0

    def test_ltv_is_not_clamped(self):
        assert compute_ltv(150, 100) == pytest.approx(150.0)
        assert compute_ltv(0, 100) == 0
        assert compute_ltv(100, 0) == 0


class TestScheduleSampler:
    def test_balance_falls_to_zero(self):
        payment = compute_amortization(220000, 4.5, 25).monthly_payment
        rows = list(amortization_rows(220000, 4.5, 25, payment))

        assert len(rows) == 300
        assert [r.month for r in rows] == list(range(1, 301))
        for earlier, later in zip(rows, rows[1:]):
            assert later.balance <= earlier.balance
        assert rows[-1].balance == 0.0

    def test_first_month_split(self):
        payment = compute_amortization(220000, 4.5, 25).monthly_payment
        first = sample_schedule(220000, 4.5, 25, payment).first[0]

        assert first.month == 1
        assert first.interest == pytest.approx(825.0)
        assert first.principal == pytest.approx(payment - 825.0)
        assert first.balance == pytest.approx(220000 - (payment - 825.0))

    def test_twelve_periods_give_disjoint_windows(self):
        payment = compute_amortization(10000, 12, 1).monthly_payment
        sample = sample_schedule(10000, 12, 1, payment)

        assert [p.month for p in sample.first] == [1, 2, 3]
        assert [p.month for p in sample.last] == [10, 11, 12]
        assert sample.last[-1].balance == 0.0

    def test_short_schedule_windows_overlap(self):
        payment = compute_amortization(3000, 12, 0.25).monthly_payment
        sample = sample_schedule(3000, 12, 0.25, payment)

        assert [p.month for p in sample.first] == [1, 2, 3]
        assert sample.first == sample.last

    def test_overpayment_ends_schedule_early(self):
        rows = list(amortization_rows(1000, 12, 1, 600))

        assert len(rows) == 2
        assert rows[-1].balance == 0.0

    def test_payment_below_interest_reports_zero_principal(self):
        rows = list(amortization_rows(1000, 12, 1, 5))

        assert len(rows) == 12
        assert all(r.principal == 0 for r in rows)
        assert all(r.interest > 0 for r in rows)

    @pytest.mark.parametrize(
        "loan, rate, term, payment", [(0, 4.5, 25, 100), (1000, 0, 25, 100), (1000, 4.5, 0, 100), (1000, 4.5, 25, 0)]
    )
    def test_out_of_domain_gives_empty_sample(self, loan, rate, term, payment):
        sample = sample_schedule(loan, rate, term, payment)

        assert sample.is_empty
        assert sample.first == () and sample.last == ()

    @pytest.mark.parametrize(
        "loan, rate, term, payment",
        [
            (float("inf"), 4.5, 25, 1000),
            (1000, float("nan"), 25, 100),
            (1000, 4.5, float("inf"), 100),
            (1000, 4.5, 25, float("inf")),
        ],
    )
    def test_non_finite_input_gives_empty_sample(self, loan, rate, term, payment):
        assert sample_schedule(loan, rate, term, payment).is_empty

    def test_interest_only_payment_stops_at_period_cap(self):
        # 1% a month on 1000 takes the whole payment, so the balance never moves
        rows = list(amortization_rows(1000, 12, 1e6, 10))

        assert len(rows) == MAX_SCHEDULE_PERIODS
        assert rows[-1].balance == pytest.approx(1000)

    def test_long_schedule_sample_keeps_last_periods(self):
        sample = sample_schedule(1000, 12, 1e6, 10)

        assert [p.month for p in sample.first] == [1, 2, 3]
        assert [p.month for p in sample.last] == [
            MAX_SCHEDULE_PERIODS - 2,
            MAX_SCHEDULE_PERIODS - 1,
            MAX_SCHEDULE_PERIODS,
        ]

    def test_overflowing_term_in_form_gives_no_result(self, complete_form):
        results = compute_results(replace(complete_form, term="20,000"))

        assert not results.has_result
        assert results.schedule.is_empty
        assert results.metrics.loan_amount == 220000


class TestCompareScenarios:
    def test_both_scenarios_share_principal_and_term(self):
        comparison = compare_scenarios(220000, 25, 4.5, 5.2)

        assert comparison.has_scenario_b
        assert comparison.scenario_a == compute_amortization(220000, 4.5, 25)
        assert comparison.scenario_b == compute_amortization(220000, 5.2, 25)
        assert comparison.scenario_b.monthly_payment > comparison.scenario_a.monthly_payment

    @pytest.mark.parametrize("rate_b", [0, -2, 100, 150])
    def test_invalid_rate_b_is_inactive(self, rate_b):
        comparison = compare_scenarios(220000, 25, 4.5, rate_b)

        assert not comparison.has_scenario_b
        assert comparison.scenario_b == ScenarioResult()

    def test_rate_b_without_loan_is_inactive(self):
        assert not compare_scenarios(0, 25, 4.5, 5.2).has_scenario_b
        assert not compare_scenarios(220000, 0, 4.5, 5.2).has_scenario_b

    def test_rate_b_does_not_depend_on_rate_a(self):
        comparison = compare_scenarios(220000, 25, 0, 5.2)

        assert comparison.has_scenario_b
        assert comparison.scenario_a == ScenarioResult()


def test_cost_breakdown():
    breakdown = cost_breakdown(75, 25)

    assert breakdown.principal_pct == pytest.approx(75.0)
    assert breakdown.interest_pct == pytest.approx(25.0)
    assert cost_breakdown(0, 25).principal_pct == 0
    assert cost_breakdown(75, 0).interest_pct == 0


class TestComputeResults:
    def test_complete_form(self, complete_form):
        results = compute_results(complete_form)

        assert results.has_result
        assert results.metrics.loan_amount == 220000
        assert results.metrics.loan_to_value == pytest.approx(88.0)
        assert results.scenario_a.monthly_payment == pytest.approx(1222.83, abs=0.01)
        assert results.comparison.has_scenario_b
        assert results.schedule.last[-1].balance == 0.0
        assert results.breakdown.principal_pct + results.breakdown.interest_pct == pytest.approx(100.0)

    def test_price_equal_to_deposit_gives_nothing(self):
        form = MortgageForm(property_price="200,000", deposit="200,000", income="50,000", term="25", interest_rate="4.5")
        results = compute_results(form)

        assert not results.has_result
        assert results.scenario_a == ScenarioResult()
        assert results.schedule.is_empty

    def test_blank_comparison_rate(self, complete_form):
        results = compute_results(replace(complete_form, interest_rate_b=""))

        assert not results.comparison.has_scenario_b
        assert results.comparison.scenario_b == ScenarioResult()

    def test_empty_form(self):
        results = compute_results(MortgageForm())

        assert not results.has_result
        assert results.metrics.loan_amount == 0
        assert results.schedule.is_empty
