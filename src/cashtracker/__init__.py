# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""CashTracker backend.

Personal budgets and expenses behind email-confirmed accounts and JWT sessions.
"""

__version__ = "0.1.0"
