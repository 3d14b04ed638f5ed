"""Flask web interface for the mortgage calculator.

The page walks the user through the three wizard steps. Every POST carries
the full form snapshot (fields of the other steps travel as hidden inputs)
plus the action the user chose, so each request is computed from scratch.
The resulting state is saved to the state store so that a later visit picks
up where the user left off.

Configuration comes from the environment:

``FLASK_SECRET_KEY``
    Session signing key.
``MORTGAGE_STATE_DATABASE_URL``
    SQLAlchemy URL of the state store (SQLite file by default).
``ASSET_VERSION``
    Cache-busting suffix for static assets.
"""

import logging
import os
from uuid import uuid4

from flask import Blueprint, Flask, current_app, jsonify, render_template, request, session

from mortgage_calc import formatter, wizard
from mortgage_calc.data_models import FORM_JSON_KEYS, MORTGAGE_TYPES, REPAYMENT_TYPES, MortgageForm, WizardState
from mortgage_calc.engine import compute_results
from mortgage_calc.main import results_to_dict
from mortgage_calc_web.state_store import clear_state, create_store_from_env, load_state, save_state

logger = logging.getLogger(__name__)

bp = Blueprint("wizard", __name__)

ACTIONS = ("update", "next", "back", "clear", "toggle_theme")


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _user_store():
    return current_app.extensions["state_store"].for_user(_ensure_user_token())


def _state_from_form(form) -> WizardState:
    """Rebuild the wizard state from a submitted form.

    The submitted step is only a hint: it is lowered to the furthest step the
    submitted fields pass the gates for.
    """
    values = {name: form[name] for name in FORM_JSON_KEYS if name in form}
    if values.get("mortgage_type") not in MORTGAGE_TYPES:
        values.pop("mortgage_type", None)
    if values.get("repayment_type") not in REPAYMENT_TYPES:
        values.pop("repayment_type", None)
    state = WizardState(
        step=wizard.normalize_step(form.get("step")),
        dark_mode=form.get("dark_mode") == "1",
    )
    return wizard.clamp_step(wizard.update_fields(state, values))


def apply_action(state: WizardState, action: str) -> WizardState:
    """Apply a wizard action to a freshly submitted state."""
    if action == "clear":
        return wizard.clear_all(state)
    if action == "toggle_theme":
        return wizard.toggle_dark_mode(state)
    if action == "back":
        return wizard.prev_step(state)
    if state.step == 1:
        state = wizard.format_step_one(state)
    if action == "next":
        return wizard.next_step(state)
    return state


def _render(state: WizardState):
    results = compute_results(state.form)
    return render_template(
        "index.html",
        state=state,
        form=state.form,
        results=results,
        validity=wizard.field_validity(state.form),
        show_errors=wizard.show_errors(state),
        can_advance=wizard.can_advance(state),
        step_titles=wizard.STEP_TITLES,
        step_help=wizard.STEP_HELP[state.step],
        field_errors=wizard.FIELD_ERRORS,
        step_one_hint=wizard.STEP_ONE_HINT,
        step_two_hint=wizard.STEP_TWO_HINT,
        asset_version=current_app.config["ASSET_VERSION"],
    )


@bp.get("/")
def index():
    state = load_state(_user_store())
    return _render(state)


@bp.post("/")
def submit():
    action = request.form.get("action", "update")
    if action not in ACTIONS:
        action = "update"
    state = apply_action(_state_from_form(request.form), action)
    store = _user_store()
    if action == "clear":
        clear_state(store)
    else:
        save_state(store, state)
    logger.debug("Action %s moved wizard to step %d", action, state.step)
    return _render(state)


@bp.post("/api/calculate")
def calculate():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    form = MortgageForm.from_json_dict(data)
    payload = results_to_dict(compute_results(form))
    payload["can_go_to_step2"] = wizard.can_go_to_step2(form)
    payload["can_go_to_step3"] = wizard.can_go_to_step3(form)
    payload["invalid_fields"] = wizard.field_validity(form).invalid_fields()
    return jsonify(payload)


def create_app(state_database_url: str | None = None) -> Flask:
    app = Flask(__name__)
    app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    url = state_database_url or os.environ.get("MORTGAGE_STATE_DATABASE_URL")
    app.extensions["state_store"] = create_store_from_env(url)
    app.jinja_env.globals["fmt"] = formatter
    app.register_blueprint(bp)
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting Mortgage Calculator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
