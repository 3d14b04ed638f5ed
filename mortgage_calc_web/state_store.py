"""Persistence layer for the wizard state.

The web app remembers each user's form, current step and theme between
visits. This module stores them as opaque strings in a key-value table keyed
by the user's session token. It defaults to SQLite for local development, but
accepts any SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).

The calculator never depends on the store: failed writes are logged and
dropped, and failed or malformed reads fall back to the defaults.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_calc.data_models import MortgageForm, WizardState
from mortgage_calc.wizard import clamp_step, normalize_step

logger = logging.getLogger(__name__)

Base = declarative_base()

FORM_KEY = "mortgageFormData"
STEP_KEY = "mortgageStep"
DARK_MODE_KEY = "mortgageDarkMode"


class StateEntryModel(Base):
    __tablename__ = "wizard_state"

    user_token = Column(String(64), primary_key=True)
    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class StateStore:
    """Database-backed key-value store, partitioned by user token."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def get(self, user_token: str, key: str) -> Optional[str]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(StateEntryModel, (user_token, key))
            return row.value if row else None

    def set(self, user_token: str, key: str, value: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            row = session.get(StateEntryModel, (user_token, key))
            if row is None:
                session.add(StateEntryModel(user_token=user_token, key=key, value=value))
            else:
                row.value = value
            session.commit()

    def remove(self, user_token: str, key: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(
                StateEntryModel.__table__.delete().where(
                    (StateEntryModel.user_token == user_token) & (StateEntryModel.key == key)
                )
            )
            session.commit()

    def for_user(self, user_token: str) -> "UserStateStore":
        return UserStateStore(self, user_token)


class UserStateStore:
    """The store seen by one user: ``get(key)``, ``set(key, value)``, ``remove(key)``."""

    def __init__(self, store: StateStore, user_token: str) -> None:
        self._store = store
        self._user_token = user_token

    def get(self, key: str) -> Optional[str]:
        return self._store.get(self._user_token, key)

    def set(self, key: str, value: str) -> None:
        self._store.set(self._user_token, key, value)

    def remove(self, key: str) -> None:
        self._store.remove(self._user_token, key)


def _read(store, key: str) -> Optional[str]:
    try:
        return store.get(key)
    except SQLAlchemyError:
        logger.warning("Failed to read %s from state store", key, exc_info=True)
        return None


def _write(store, key: str, value: str) -> None:
    try:
        store.set(key, value)
    except SQLAlchemyError:
        logger.warning("Failed to write %s to state store", key, exc_info=True)


def load_form(store) -> MortgageForm:
    raw = _read(store, FORM_KEY)
    if not raw:
        return MortgageForm()
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed form data in state store")
        return MortgageForm()
    if not isinstance(data, dict):
        return MortgageForm()
    return MortgageForm.from_json_dict(data)


def load_state(store) -> WizardState:
    """Restore the wizard state, falling back to defaults for anything missing.

    A stored step the stored form cannot reach is lowered to one it can.
    """
    raw_step = _read(store, STEP_KEY)
    state = WizardState(
        step=normalize_step(raw_step) if raw_step else 1,
        form=load_form(store),
        dark_mode=_read(store, DARK_MODE_KEY) == "true",
    )
    return clamp_step(state)


def save_state(store, state: WizardState) -> None:
    """Persist the wizard state. Never raises for storage errors."""
    _write(store, FORM_KEY, json.dumps(state.form.to_json_dict()))
    _write(store, STEP_KEY, str(state.step))
    _write(store, DARK_MODE_KEY, "true" if state.dark_mode else "false")


def clear_state(store) -> None:
    """Forget the form and step. The theme preference is kept."""
    for key in (FORM_KEY, STEP_KEY):
        try:
            store.remove(key)
        except SQLAlchemyError:
            logger.warning("Failed to remove %s from state store", key, exc_info=True)


def create_store_from_env(url: str | None) -> StateStore:
    return StateStore(url or "sqlite:///mortgage_state.sqlite3")
