"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities used by the
calculator: the raw form snapshot typed in by the user, the parsed numeric
inputs, the derived loan metrics, scenario results and schedule periods.
Snapshot types are frozen; a change of input produces a new object through
``dataclasses.replace`` and every derived value is recomputed from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Tuple


# JSON keys used when a form snapshot is persisted, keyed by attribute name.
FORM_JSON_KEYS: Dict[str, str] = {
    "property_price": "propertyPrice",
    "deposit": "deposit",
    "income": "income",
    "term": "term",
    "mortgage_type": "mortgageType",
    "interest_rate": "interestRate",
    "repayment_type": "repaymentType",
    "interest_rate_b": "interestRateB",
}

MORTGAGE_TYPES = ("fixed", "variable")
REPAYMENT_TYPES = ("repayment", "interest-only")


@dataclass(frozen=True)
class MortgageForm:
    """Raw text of every form field, exactly as the user typed it.

    This is the canonical source for both the numeric values used by the
    engine and the display strings shown in the inputs; neither is stored
    separately.
    """

    property_price: str = ""
    deposit: str = ""
    income: str = ""
    term: str = ""
    mortgage_type: str = "fixed"
    interest_rate: str = ""
    repayment_type: str = "repayment"
    interest_rate_b: str = ""  # optional comparison scenario

    def to_json_dict(self) -> Dict[str, str]:
        return {FORM_JSON_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Any]) -> "MortgageForm":
        """Build a form from a persisted mapping.

        Missing keys keep their defaults and unknown keys are ignored. Values
        that are not strings are converted with ``str`` so that numbers stored
        by other clients still round-trip.
        """
        values = {}
        for attr, key in FORM_JSON_KEYS.items():
            if key in data and data[key] is not None:
                values[attr] = str(data[key])
        return cls(**values)


@dataclass(frozen=True)
class MortgageInputs:
    """Numeric inputs parsed from a :class:`MortgageForm`.

    A value of ``0`` means the field is absent or could not be parsed.
    """

    property_price: float = 0.0
    deposit: float = 0.0
    income: float = 0.0
    term_years: float = 0.0
    rate_a: float = 0.0
    rate_b: float = 0.0


@dataclass(frozen=True)
class LoanMetrics:
    loan_amount: float = 0.0
    loan_to_value: float = 0.0  # percent


@dataclass(frozen=True)
class ScenarioResult:
    """Level-payment result for one rate assumption.

    All values are zero when the inputs are incomplete; zero is the
    "no result yet" sentinel rather than an error.
    """

    monthly_payment: float = 0.0
    total_payment: float = 0.0
    total_interest: float = 0.0


@dataclass(frozen=True)
class SchedulePeriod:
    """One month of the amortization schedule.

    ``principal`` and ``interest`` are the parts of the payment applied to
    each, and ``balance`` is what remains owed after the payment. All three
    are clamped to be non-negative.
    """

    month: int
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True)
class ScheduleSample:
    """First and last periods of a schedule (up to three each)."""

    first: Tuple[SchedulePeriod, ...] = ()
    last: Tuple[SchedulePeriod, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.first


@dataclass(frozen=True)
class ScenarioComparison:
    scenario_a: ScenarioResult = field(default_factory=ScenarioResult)
    scenario_b: ScenarioResult = field(default_factory=ScenarioResult)
    has_scenario_b: bool = False


@dataclass(frozen=True)
class CostBreakdown:
    """Share of principal and interest in the total repaid, in percent."""

    principal_pct: float = 0.0
    interest_pct: float = 0.0


@dataclass(frozen=True)
class MortgageResults:
    """Everything the results step displays, derived from one form snapshot."""

    form: MortgageForm
    inputs: MortgageInputs
    metrics: LoanMetrics
    comparison: ScenarioComparison
    schedule: ScheduleSample
    breakdown: CostBreakdown

    @property
    def scenario_a(self) -> ScenarioResult:
        return self.comparison.scenario_a

    @property
    def has_result(self) -> bool:
        return self.scenario_a.monthly_payment > 0 and self.metrics.loan_amount > 0


@dataclass(frozen=True)
class WizardState:
    """Session state of the three-step wizard.

    ``step`` is 1 (details), 2 (mortgage options) or 3 (results).
    """

    step: int = 1
    form: MortgageForm = field(default_factory=MortgageForm)
    dark_mode: bool = False
