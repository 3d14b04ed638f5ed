"""Shared fixtures for the mortgage calculator tests."""

import pytest

from mortgage_calc.data_models import MortgageForm
from mortgage_calc_web.app import create_app
from mortgage_calc_web.state_store import StateStore


@pytest.fixture
def complete_form():
    """A form filled in through step 2, with a comparison rate."""
    return MortgageForm(
        property_price="250,000",
        deposit="30,000",
        income="45,000",
        term="25",
        interest_rate="4.5",
        interest_rate_b="5.2",
    )


@pytest.fixture
def state_db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'state.sqlite3'}"


@pytest.fixture
def state_store(state_db_url):
    return StateStore(state_db_url)


@pytest.fixture
def app(tmp_path):
    app = create_app(f"sqlite:///{tmp_path / 'web_state.sqlite3'}")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
