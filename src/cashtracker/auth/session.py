# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

import structlog

from cashtracker.auth.passwords import verify_password
from cashtracker.auth.tokens import issue_session_token
from cashtracker.core.errors import Forbidden, NotFound, Unauthorized
from cashtracker.infra.store import RecordStore
from cashtracker.models import ACCOUNTS, Account

BEARER_PREFIX = "bearer "

logger = structlog.get_logger(__name__)


def login(store: RecordStore, *, email: str, password: str) -> str:
    """Verify credentials and return a session token.

    Confirmation is checked before the password: an unconfirmed account is
    refused even when the password is wrong.
    """
    rec = store.find_one(ACCOUNTS, email=email)
    if rec is None:
        raise NotFound("account not found")
    account = Account.from_record(rec)
    if not account.confirmed:
        logger.info("login_rejected", account_id=account.id, reason="not_confirmed")
        raise Forbidden("not confirmed")
    if not verify_password(password, account.password):
        logger.info("login_rejected", account_id=account.id, reason="incorrect_password")
        raise Unauthorized("incorrect password")
    logger.info("login_succeeded", account_id=account.id)
    return issue_session_token(account.id)


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the credential from an ``Authorization: Bearer`` header ('' if absent)."""
    raw = (authorization or "").strip()
    if not raw.lower().startswith(BEARER_PREFIX):
        return ""
    return raw[len(BEARER_PREFIX):].strip()
