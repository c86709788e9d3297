# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed views over raw store records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

ACCOUNTS = "accounts"
BUDGETS = "budgets"
EXPENSES = "expenses"


@dataclass(frozen=True)
class Account:
    id: int
    name: str
    email: str
    password: str
    confirmed: bool
    token: Optional[str]
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Account":
        return cls(
            id=int(rec["id"]),
            name=str(rec.get("name") or ""),
            email=str(rec.get("email") or ""),
            password=str(rec.get("password") or ""),
            confirmed=bool(rec.get("confirmed", False)),
            token=rec.get("token") or None,
            created_at=str(rec.get("created_at") or ""),
            updated_at=str(rec.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class Budget:
    id: int
    name: str
    amount: float
    account_id: int
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Budget":
        return cls(
            id=int(rec["id"]),
            name=str(rec.get("name") or ""),
            amount=float(rec.get("amount") or 0),
            account_id=int(rec["account_id"]),
            created_at=str(rec.get("created_at") or ""),
            updated_at=str(rec.get("updated_at") or ""),
        )

    def public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "account_id": self.account_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Expense:
    id: int
    name: str
    amount: float
    budget_id: int
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Expense":
        return cls(
            id=int(rec["id"]),
            name=str(rec.get("name") or ""),
            amount=float(rec.get("amount") or 0),
            budget_id=int(rec["budget_id"]),
            created_at=str(rec.get("created_at") or ""),
            updated_at=str(rec.get("updated_at") or ""),
        )

    def public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "budget_id": self.budget_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
