import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import pytest
from fastapi.testclient import TestClient

from cashtracker.auth.passwords import hash_password
from cashtracker.auth.tokens import issue_session_token
from cashtracker.infra.store import MemoryStore
from cashtracker.models import ACCOUNTS, BUDGETS, EXPENSES
from cashtracker.notifications.mailer import Mailer


class RecordingMailer(Mailer):
    """Renders real messages but keeps them instead of talking to SMTP."""

    def __init__(self):
        super().__init__()
        self.events = []
        self.sent = []

    def deliver(self, event):
        self.events.append(event)
        return super().deliver(event)

    def send(self, msg):
        self.sent.append(msg)
        return True


@pytest.fixture(autouse=True)
def secret_env(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
    monkeypatch.delenv("CASHTRACKER_SECRET_KEY", raising=False)
    monkeypatch.delenv("CASHTRACKER_SMTP_HOST", raising=False)


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def client(store, mailer):
    import cashtracker.app as app_module

    app_module.app.state.store = store
    app_module.app.state.mailer = mailer
    return TestClient(app_module.app)


@pytest.fixture()
def make_account(store):
    """Insert an account directly, bypassing the registration flow."""

    def _make(email="owner@test.com", password="password", name="Owner", confirmed=True, token=None):
        return store.create(
            ACCOUNTS,
            {
                "name": name,
                "email": email,
                "password": hash_password(password),
                "confirmed": confirmed,
                "token": token,
            },
        )

    return _make


@pytest.fixture()
def make_budget(store):
    def _make(account_id, name="Groceries", amount=4000):
        return store.create(BUDGETS, {"name": name, "amount": amount, "account_id": account_id})

    return _make


@pytest.fixture()
def make_expense(store):
    def _make(budget_id, name="Milk", amount=3):
        return store.create(EXPENSES, {"name": name, "amount": amount, "budget_id": budget_id})

    return _make


@pytest.fixture()
def auth_header():
    def _header(account_id) -> dict:
        return {"Authorization": f"Bearer {issue_session_token(account_id)}"}

    return _header
