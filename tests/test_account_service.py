import threading

import pytest

from cashtracker.auth.passwords import verify_password
from cashtracker.auth.session import login
from cashtracker.auth.tokens import verify_session_token
from cashtracker.core.errors import Conflict, NotFound, Unauthorized
from cashtracker.models import ACCOUNTS
from cashtracker.notifications.mailer import CONFIRM_ACCOUNT, RESET_PASSWORD
from cashtracker.services import account_service


@pytest.fixture()
def events():
    return []


def _register(store, events, email="t@t.com"):
    return account_service.register(store, name="T", email=email, password="password", notify=events.append)


def test_register_stores_unconfirmed_account_and_notifies(store, events):
    account = _register(store, events)
    rec = store.get(ACCOUNTS, account.id)

    assert rec["confirmed"] is False
    assert rec["password"] != "password"
    assert verify_password("password", rec["password"])
    assert len(events) == 1
    assert events[0].kind == CONFIRM_ACCOUNT
    assert events[0].email == "t@t.com"
    assert events[0].token == rec["token"]


def test_register_duplicate_email_conflicts_without_side_effects(store, events):
    _register(store, events)
    with pytest.raises(Conflict) as exc:
        _register(store, events)
    assert exc.value.message == "duplicate email"
    assert len(store.find_all(ACCOUNTS)) == 1
    assert len(events) == 1


def test_confirm_transitions_and_clears_token(store, events):
    account = _register(store, events)
    confirmed = account_service.confirm(store, token=events[0].token)
    assert confirmed.id == account.id
    assert confirmed.confirmed is True
    assert confirmed.token is None


def test_confirm_consumed_token_always_fails(store, events):
    _register(store, events)
    token = events[0].token
    account_service.confirm(store, token=token)
    for _ in range(2):
        with pytest.raises(Unauthorized) as exc:
            account_service.confirm(store, token=token)
        assert exc.value.message == "InvalidToken"


def test_confirm_unknown_token(store):
    with pytest.raises(Unauthorized):
        account_service.confirm(store, token="123456")


def test_password_reset_flow(store, events):
    account = _register(store, events)
    account_service.confirm(store, token=events[0].token)

    account_service.forgot_password(store, email="t@t.com", notify=events.append)
    assert events[-1].kind == RESET_PASSWORD
    token = events[-1].token

    account_service.validate_token(store, token=token)
    account_service.reset_password(store, token=token, password="new-password")

    rec = store.get(ACCOUNTS, account.id)
    assert rec["token"] is None
    assert rec["confirmed"] is True
    assert verify_password("new-password", rec["password"])
    with pytest.raises(NotFound):
        account_service.validate_token(store, token=token)


def test_reset_password_confirms_unconfirmed_account(store, events):
    account = _register(store, events)
    account_service.forgot_password(store, email="t@t.com", notify=events.append)
    account_service.reset_password(store, token=events[-1].token, password="new-password")

    rec = store.get(ACCOUNTS, account.id)
    assert rec["confirmed"] is True
    assert rec["token"] is None
    token = login(store, email="t@t.com", password="new-password")
    assert verify_session_token(token) == account.id


def test_concurrent_registrations_create_one_account(store):
    barrier = threading.Barrier(2)
    outcomes = []

    def attempt():
        barrier.wait()
        try:
            account_service.register(store, name="T", email="race@t.com", password="password", notify=lambda e: None)
            outcomes.append("created")
        except Conflict as e:
            outcomes.append(e.message)

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["created", "duplicate email"]
    assert len(store.find_all(ACCOUNTS, email="race@t.com")) == 1


def test_register_maps_store_duplicate_to_conflict(store, events, monkeypatch):
    _register(store, events, email="first@t.com")
    # The pre-insert lookup misses, as when another request wins the race.
    monkeypatch.setattr(store, "find_one", lambda table, **criteria: None)
    with pytest.raises(Conflict) as exc:
        _register(store, events, email="first@t.com")
    assert exc.value.message == "duplicate email"
    assert len(store.find_all(ACCOUNTS)) == 1
    assert len(events) == 1


def test_forgot_password_unknown_email(store, events):
    with pytest.raises(NotFound):
        account_service.forgot_password(store, email="nobody@test.com", notify=events.append)
    assert events == []


def test_update_password_requires_current(store, make_account):
    rec = make_account()
    with pytest.raises(Unauthorized):
        account_service.update_password(store, account_id=rec["id"], current_password="wrong-one", password="new-password")
    account_service.update_password(store, account_id=rec["id"], current_password="password", password="new-password")
    assert verify_password("new-password", store.get(ACCOUNTS, rec["id"])["password"])


def test_check_password(store, make_account):
    rec = make_account()
    account_service.check_password(store, account_id=rec["id"], password="password")
    with pytest.raises(Unauthorized):
        account_service.check_password(store, account_id=rec["id"], password="nope")
