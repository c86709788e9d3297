# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain error taxonomy.

Each error carries the HTTP status it maps to; the app turns them into
``{"error": message}`` bodies. Shape-level validation failures are not here:
they come from pydantic and are answered as ``{"errors": [...]}``.
"""

from __future__ import annotations


class CashTrackerError(Exception):
    status_code = 500
    default_message = "internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(CashTrackerError):
    status_code = 409
    default_message = "conflict"


class NotFound(CashTrackerError):
    status_code = 404
    default_message = "not found"


class Unauthorized(CashTrackerError):
    status_code = 401
    default_message = "unauthorized"


class Forbidden(CashTrackerError):
    status_code = 403
    default_message = "forbidden"


class Fault(CashTrackerError):
    """Unexpected store or internal failure. Message is always generic."""

    status_code = 500
    default_message = "internal error"


INVALID_TOKEN = "InvalidToken"
