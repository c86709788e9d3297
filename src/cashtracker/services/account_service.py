# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account lifecycle: registration, confirmation and password recovery.

An account starts unconfirmed with a live confirmation code in ``token``.
Confirming sets ``confirmed`` and clears the code; once cleared, the same code
never matches again. Password recovery reuses the ``token`` field.
"""

from __future__ import annotations

import structlog

from cashtracker.auth.passwords import hash_password, verify_password
from cashtracker.auth.tokens import generate_confirmation_token
from cashtracker.core.errors import INVALID_TOKEN, Conflict, NotFound, Unauthorized
from cashtracker.infra.store import DuplicateError, RecordStore
from cashtracker.models import ACCOUNTS, Account
from cashtracker.notifications.mailer import CONFIRM_ACCOUNT, RESET_PASSWORD, EmailEvent, Notifier

logger = structlog.get_logger(__name__)


def get_account(store: RecordStore, account_id: int) -> Account | None:
    rec = store.get(ACCOUNTS, account_id)
    return Account.from_record(rec) if rec else None


def _by_token(store: RecordStore, token: str) -> Account | None:
    if not token:
        return None
    rec = store.find_one(ACCOUNTS, token=token)
    return Account.from_record(rec) if rec else None


def register(store: RecordStore, *, name: str, email: str, password: str, notify: Notifier) -> Account:
    if store.find_one(ACCOUNTS, email=email) is not None:
        raise Conflict("duplicate email")

    token = generate_confirmation_token()
    try:
        rec = store.create(
            ACCOUNTS,
            {
                "name": name,
                "email": email,
                "password": hash_password(password),
                "confirmed": False,
                "token": token,
            },
            unique=("email",),
        )
    except DuplicateError:
        raise Conflict("duplicate email") from None
    account = Account.from_record(rec)
    logger.info("account_registered", account_id=account.id)
    notify(EmailEvent(kind=CONFIRM_ACCOUNT, email=account.email, name=account.name, token=token))
    return account


def confirm(store: RecordStore, *, token: str) -> Account:
    account = _by_token(store, token)
    if account is None:
        raise Unauthorized(INVALID_TOKEN)
    rec = store.update(ACCOUNTS, account.id, {"confirmed": True, "token": None})
    logger.info("account_confirmed", account_id=account.id)
    return Account.from_record(rec)


def forgot_password(store: RecordStore, *, email: str, notify: Notifier) -> None:
    rec = store.find_one(ACCOUNTS, email=email)
    if rec is None:
        raise NotFound("account not found")
    account = Account.from_record(rec)
    token = generate_confirmation_token()
    store.update(ACCOUNTS, account.id, {"token": token})
    logger.info("password_reset_requested", account_id=account.id)
    notify(EmailEvent(kind=RESET_PASSWORD, email=account.email, name=account.name, token=token))


def validate_token(store: RecordStore, *, token: str) -> None:
    if _by_token(store, token) is None:
        raise NotFound(INVALID_TOKEN)


def reset_password(store: RecordStore, *, token: str, password: str) -> None:
    account = _by_token(store, token)
    if account is None:
        raise NotFound(INVALID_TOKEN)
    # Holding the code proves control of the email, so a reset also confirms.
    store.update(
        ACCOUNTS,
        account.id,
        {"password": hash_password(password), "token": None, "confirmed": True},
    )
    logger.info("password_reset", account_id=account.id)


def update_password(store: RecordStore, *, account_id: int, current_password: str, password: str) -> None:
    account = get_account(store, account_id)
    if account is None:
        raise NotFound("account not found")
    if not verify_password(current_password, account.password):
        raise Unauthorized("current password is incorrect")
    store.update(ACCOUNTS, account.id, {"password": hash_password(password)})
    logger.info("password_updated", account_id=account.id)


def check_password(store: RecordStore, *, account_id: int, password: str) -> None:
    account = get_account(store, account_id)
    if account is None:
        raise NotFound("account not found")
    if not verify_password(password, account.password):
        raise Unauthorized("incorrect password")
