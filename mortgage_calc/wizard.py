"""Three-step wizard around the calculation engine.

The wizard collects the property details (step 1), the mortgage options
(step 2) and shows the results (step 3). Its state is an immutable
:class:`WizardState`; every transition returns a new state. Moving forward is
gated on the inputs of the current step, moving back is always allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Mapping

from .data_models import FORM_JSON_KEYS, MortgageForm, WizardState
from .engine import has_valid_rate
from .utils import format_number_string, parse_number

FIRST_STEP = 1
LAST_STEP = 3

STEP_TITLES = {
    1: "Your Details",
    2: "Mortgage Options",
    3: "Results",
}

STEP_HELP = {
    1: "Tell us about the property and your basic details.",
    2: "Choose your mortgage options and interest rate.",
    3: "Review your estimated monthly payment and mortgage breakdown.",
}

# Fields formatted with thousands separators when the user leaves them.
STEP_ONE_FIELDS = ("property_price", "deposit", "income", "term")

FIELD_ERRORS = {
    "property_price": "Please enter a valid property price greater than 0.",
    "deposit": "Please enter a valid deposit (0 or more).",
    "income": "Please enter a valid income greater than 0.",
    "term": "Please enter a valid term in years (greater than 0).",
    "interest_rate": "Please enter a valid interest rate between 0 and 100.",
    "interest_rate_b": "Please enter a valid comparison rate between 0 and 100, or leave it blank.",
}

STEP_ONE_HINT = (
    "To continue, please make sure all values are valid numbers (no letters "
    "or symbols) and greater than zero."
)
STEP_TWO_HINT = "Please choose a valid interest rate to see your results."


@dataclass(frozen=True)
class FieldValidity:
    """Inline validity of each field. An empty field is always valid."""

    property_price: bool = True
    deposit: bool = True
    income: bool = True
    term: bool = True
    interest_rate: bool = True
    interest_rate_b: bool = True

    @property
    def step_one_valid(self) -> bool:
        return self.property_price and self.deposit and self.income and self.term

    def invalid_fields(self) -> List[str]:
        return [name for name in FIELD_ERRORS if not getattr(self, name)]


def field_validity(form: MortgageForm) -> FieldValidity:
    return FieldValidity(
        property_price=form.property_price == "" or parse_number(form.property_price) > 0,
        deposit=form.deposit == "" or parse_number(form.deposit) >= 0,
        income=form.income == "" or parse_number(form.income) > 0,
        term=form.term == "" or parse_number(form.term) > 0,
        interest_rate=form.interest_rate == "" or has_valid_rate(parse_number(form.interest_rate)),
        interest_rate_b=form.interest_rate_b == "" or has_valid_rate(parse_number(form.interest_rate_b)),
    )


def can_go_to_step2(form: MortgageForm) -> bool:
    """Step 1 is complete when price, income and term are positive and the deposit is not negative."""
    return (
        parse_number(form.property_price) > 0
        and parse_number(form.deposit) >= 0
        and parse_number(form.income) > 0
        and parse_number(form.term) > 0
        and field_validity(form).step_one_valid
    )


def can_go_to_step3(form: MortgageForm) -> bool:
    return has_valid_rate(parse_number(form.interest_rate))


def can_advance(state: WizardState) -> bool:
    if state.step == 1:
        return can_go_to_step2(state.form)
    if state.step == 2:
        return can_go_to_step3(state.form)
    return False


def show_errors(state: WizardState) -> bool:
    """Whether inline errors should be shown on the current step.

    Errors stay hidden until the user has typed something relevant to the
    step, so a fresh form is not covered in red.
    """
    form = state.form
    if state.step == 1:
        return any(getattr(form, name) for name in STEP_ONE_FIELDS)
    if state.step == 2:
        return form.interest_rate != ""
    return False


def normalize_step(step) -> int:
    """Clamp a stored or submitted step to the valid range, defaulting to 1."""
    try:
        value = int(step)
    except (TypeError, ValueError):
        return FIRST_STEP
    return value if FIRST_STEP <= value <= LAST_STEP else FIRST_STEP


def max_reachable_step(form: MortgageForm) -> int:
    """Furthest step the gates allow for ``form``."""
    if not can_go_to_step2(form):
        return FIRST_STEP
    if not can_go_to_step3(form):
        return 2
    return LAST_STEP


def clamp_step(state: WizardState) -> WizardState:
    """Pull a restored or submitted step back to one its form can reach."""
    allowed = max_reachable_step(state.form)
    if state.step <= allowed:
        return state
    return replace(state, step=allowed)


def next_step(state: WizardState) -> WizardState:
    if not can_advance(state):
        return state
    return replace(state, step=min(state.step + 1, LAST_STEP))


def prev_step(state: WizardState) -> WizardState:
    return replace(state, step=max(state.step - 1, FIRST_STEP))


def update_fields(state: WizardState, values: Mapping[str, str]) -> WizardState:
    """Return a state whose form takes the given raw values.

    ``values`` is keyed by attribute name (``property_price``) or by the
    persisted JSON name (``propertyPrice``); unknown keys are ignored.
    """
    json_to_attr = {key: attr for attr, key in FORM_JSON_KEYS.items()}
    changes = {}
    for key, value in values.items():
        attr = key if key in FORM_JSON_KEYS else json_to_attr.get(key)
        if attr is not None and value is not None:
            changes[attr] = str(value)
    if not changes:
        return state
    return replace(state, form=replace(state.form, **changes))


def format_field(state: WizardState, name: str) -> WizardState:
    """Replace a step-1 field by its display form (``250000`` -> ``250,000``)."""
    if name not in STEP_ONE_FIELDS:
        return state
    formatted = format_number_string(getattr(state.form, name))
    return replace(state, form=replace(state.form, **{name: formatted}))


def format_step_one(state: WizardState) -> WizardState:
    for name in STEP_ONE_FIELDS:
        state = format_field(state, name)
    return state


def clear_all(state: WizardState) -> WizardState:
    """Reset the form and go back to step 1. The theme is kept."""
    return WizardState(dark_mode=state.dark_mode)


def toggle_dark_mode(state: WizardState) -> WizardState:
    return replace(state, dark_mode=not state.dark_mode)
