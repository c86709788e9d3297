# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- Confirmation codes and signed session tokens (JWT)
- Login and bearer-token authentication against the record store
"""
