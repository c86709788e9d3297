# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Guard chain for protected routes.

authentication -> budget existence -> ownership -> (expense existence -> expense
belongs to budget). Each stage returns the context the next one needs; a
failure raises and nothing after it runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from cashtracker.auth.session import bearer_token
from cashtracker.auth.tokens import verify_session_token
from cashtracker.core.errors import INVALID_TOKEN, Fault, Forbidden, NotFound, Unauthorized
from cashtracker.infra.store import RecordStore, StoreError
from cashtracker.models import ACCOUNTS, BUDGETS, EXPENSES, Account, Budget, Expense

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CurrentAccount:
    id: int
    name: str
    email: str


@dataclass(frozen=True)
class BudgetContext:
    account: CurrentAccount
    budget: Budget


@dataclass(frozen=True)
class ExpenseContext:
    account: CurrentAccount
    budget: Budget
    expense: Expense


def authenticate(store: RecordStore, authorization: Optional[str]) -> CurrentAccount:
    token = bearer_token(authorization)
    if not token:
        raise Unauthorized("unauthorized")
    account_id = verify_session_token(token)
    if account_id is None:
        raise Unauthorized(INVALID_TOKEN)
    rec = store.get(ACCOUNTS, account_id)
    if rec is None:
        raise Unauthorized(INVALID_TOKEN)
    a = Account.from_record(rec)
    return CurrentAccount(id=a.id, name=a.name, email=a.email)


def load_budget(store: RecordStore, budget_id: int) -> Budget:
    try:
        rec = store.get(BUDGETS, budget_id)
    except StoreError as e:
        logger.error("budget_load_failed", budget_id=budget_id, error=str(e))
        raise Fault() from e
    if rec is None:
        raise NotFound("budget not found")
    return Budget.from_record(rec)


def require_ownership(budget: Budget, account: CurrentAccount) -> BudgetContext:
    if budget.account_id != account.id:
        logger.warning("ownership_denied", budget_id=budget.id, account_id=account.id)
        raise Unauthorized("invalid action")
    return BudgetContext(account=account, budget=budget)


def budget_context(store: RecordStore, authorization: Optional[str], budget_id: int) -> BudgetContext:
    account = authenticate(store, authorization)
    budget = load_budget(store, budget_id)
    return require_ownership(budget, account)


def load_expense(store: RecordStore, ctx: BudgetContext, expense_id: int) -> ExpenseContext:
    try:
        rec = store.get(EXPENSES, expense_id)
    except StoreError as e:
        logger.error("expense_load_failed", expense_id=expense_id, error=str(e))
        raise Fault() from e
    if rec is None:
        raise NotFound("expense not found")
    expense = Expense.from_record(rec)
    if expense.budget_id != ctx.budget.id:
        raise Forbidden("invalid action")
    return ExpenseContext(account=ctx.account, budget=ctx.budget, expense=expense)
