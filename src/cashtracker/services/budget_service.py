# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Budget and expense CRUD.

Callers pass contexts produced by :mod:`cashtracker.permissions`, so every
function here already runs on behalf of the owner.
"""

from __future__ import annotations

from typing import Any, Dict, List

import structlog

from cashtracker.infra.store import RecordStore
from cashtracker.models import BUDGETS, EXPENSES, Budget, Expense
from cashtracker.permissions import BudgetContext, CurrentAccount, ExpenseContext

logger = structlog.get_logger(__name__)


def list_budgets(store: RecordStore, account: CurrentAccount) -> List[Dict[str, Any]]:
    """Budgets owned by ``account``, newest first."""
    rows = store.find_all(BUDGETS, account_id=account.id)
    return [Budget.from_record(r).public() for r in sorted(rows, key=lambda r: r["id"], reverse=True)]


def create_budget(store: RecordStore, account: CurrentAccount, *, name: str, amount: float) -> Budget:
    rec = store.create(BUDGETS, {"name": name, "amount": amount, "account_id": account.id})
    budget = Budget.from_record(rec)
    logger.info("budget_created", budget_id=budget.id, account_id=account.id)
    return budget


def budget_detail(store: RecordStore, ctx: BudgetContext) -> Dict[str, Any]:
    expenses = [Expense.from_record(r).public() for r in store.find_all(EXPENSES, budget_id=ctx.budget.id)]
    return {**ctx.budget.public(), "expenses": expenses}


def update_budget(store: RecordStore, ctx: BudgetContext, *, name: str, amount: float) -> Budget:
    # account_id is never part of the update: ownership is fixed at creation.
    rec = store.update(BUDGETS, ctx.budget.id, {"name": name, "amount": amount})
    logger.info("budget_updated", budget_id=ctx.budget.id)
    return Budget.from_record(rec)


def delete_budget(store: RecordStore, ctx: BudgetContext) -> None:
    for r in store.find_all(EXPENSES, budget_id=ctx.budget.id):
        store.delete(EXPENSES, r["id"])
    store.delete(BUDGETS, ctx.budget.id)
    logger.info("budget_deleted", budget_id=ctx.budget.id)


def create_expense(store: RecordStore, ctx: BudgetContext, *, name: str, amount: float) -> Expense:
    rec = store.create(EXPENSES, {"name": name, "amount": amount, "budget_id": ctx.budget.id})
    expense = Expense.from_record(rec)
    logger.info("expense_created", expense_id=expense.id, budget_id=ctx.budget.id)
    return expense


def update_expense(store: RecordStore, ctx: ExpenseContext, *, name: str, amount: float) -> Expense:
    rec = store.update(EXPENSES, ctx.expense.id, {"name": name, "amount": amount})
    logger.info("expense_updated", expense_id=ctx.expense.id)
    return Expense.from_record(rec)


def delete_expense(store: RecordStore, ctx: ExpenseContext) -> None:
    store.delete(EXPENSES, ctx.expense.id)
    logger.info("expense_deleted", expense_id=ctx.expense.id)
