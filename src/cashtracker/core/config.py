# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment-driven settings.

Values that tests need to change (secret, session lifetime, SMTP) are read
lazily so that ``monkeypatch.setenv`` takes effect without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

TRUTHY = {"1", "true", "yes", "y"}

BASE_DIR = Path(__file__).resolve().parents[3]


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUTHY


def secret_key() -> str:
    secret = os.getenv("SECRET_KEY") or os.getenv("CASHTRACKER_SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing SECRET_KEY (or CASHTRACKER_SECRET_KEY) in environment")
    return secret


def jwt_algorithm() -> str:
    return os.getenv("CASHTRACKER_JWT_ALGORITHM", "HS256")


def session_days() -> int:
    return int(os.getenv("CASHTRACKER_SESSION_DAYS", "30"))


def store_backend() -> str:
    return os.getenv("CASHTRACKER_STORE", "memory").strip().lower()


def data_path() -> Path:
    return Path(
        os.getenv("CASHTRACKER_DATA_PATH", str(BASE_DIR / "data" / "cashtracker.yml"))
    ).resolve()


def smtp_settings() -> dict:
    return {
        "host": os.getenv("CASHTRACKER_SMTP_HOST", "").strip(),
        "port": int(os.getenv("CASHTRACKER_SMTP_PORT", "587")),
        "user": os.getenv("CASHTRACKER_SMTP_USER", ""),
        "password": os.getenv("CASHTRACKER_SMTP_PASSWORD", ""),
        "starttls": env_flag("CASHTRACKER_SMTP_STARTTLS", "true"),
    }


def mail_from() -> str:
    return os.getenv("CASHTRACKER_MAIL_FROM", "CashTracker <admin@cashtracker.com>")


def frontend_url() -> str:
    return os.getenv("CASHTRACKER_FRONTEND_URL", "http://localhost:3000").rstrip("/")


def log_level() -> str:
    return os.getenv("CASHTRACKER_LOG_LEVEL", "INFO").strip().upper()


def log_json() -> bool:
    return env_flag("CASHTRACKER_LOG_JSON", "true")
