# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Confirmation codes and session tokens.

The two kinds are not interchangeable: a confirmation code is a short secret
stored on the account until consumed, a session token is a stateless JWT.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt import InvalidTokenError

from cashtracker.core import config

CONFIRMATION_TOKEN_LENGTH = 6


def generate_confirmation_token() -> str:
    return str(100000 + secrets.randbelow(900000))


def is_confirmation_token(value: str) -> bool:
    v = str(value or "")
    return len(v) == CONFIRMATION_TOKEN_LENGTH and v.isascii() and v.isdigit()


def issue_session_token(account_id: int, *, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(account_id),
        "iat": now,
        "exp": now + (expires_in or timedelta(days=config.session_days())),
    }
    return jwt.encode(payload, config.secret_key(), algorithm=config.jwt_algorithm())


def verify_session_token(token: str) -> Optional[int]:
    """Return the account id asserted by ``token``, or None if it is not valid."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            config.secret_key(),
            algorithms=[config.jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except InvalidTokenError:
        return None
    sub = str(payload.get("sub") or "").strip()
    if not sub.isdigit():
        return None
    return int(sub)
