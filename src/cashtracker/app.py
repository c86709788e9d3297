# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Annotated, Optional

import structlog
from fastapi import BackgroundTasks, FastAPI, Header, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cashtracker.auth.session import login as login_account
from cashtracker.core.errors import CashTrackerError, Fault
from cashtracker.core.logs import configure_logging
from cashtracker.infra.store import RecordStore, StoreError, open_store
from cashtracker.notifications.mailer import EmailEvent, Mailer, Notifier
from cashtracker.permissions import authenticate, budget_context, load_expense
from cashtracker.schemas import (
    BudgetRequest,
    CheckPasswordRequest,
    EmailRequest,
    ExpenseRequest,
    LoginRequest,
    NewPasswordRequest,
    RegisterRequest,
    TokenRequest,
    UpdatePasswordRequest,
)
from cashtracker.services import account_service, budget_service

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="CashTracker")
app.state.store = open_store()
app.state.mailer = Mailer()

BudgetId = Annotated[int, Path(ge=1, description="Budget id")]
ExpenseId = Annotated[int, Path(ge=1, description="Expense id")]
ResetToken = Annotated[str, Path(pattern=r"^\d{6}$", description="Reset code")]

PATH_MESSAGES = {"budget_id": "Invalid ID", "expense_id": "Invalid ID", "token": "Invalid token"}


def _store(request: Request) -> RecordStore:
    return request.app.state.store


def _notifier(request: Request, background_tasks: BackgroundTasks) -> Notifier:
    mailer = request.app.state.mailer

    def notify(event: EmailEvent) -> None:
        background_tasks.add_task(mailer.deliver, event)

    return notify


def validation_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into the public ``errors`` list."""
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        msg = err.get("msg", "")
        if loc and loc[0] == "path":
            msg = PATH_MESSAGES.get(loc[-1], msg)
        out.append({"msg": msg, "type": err.get("type", ""), "loc": loc, "field": loc[-1] if loc else ""})
    return out


@app.exception_handler(RequestValidationError)
async def _validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": validation_errors(exc)})


@app.exception_handler(CashTrackerError)
async def _domain_error_handler(request: Request, exc: CashTrackerError):
    if isinstance(exc, Fault):
        logger.error("request_fault", path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StoreError)
async def _store_error_handler(request: Request, exc: StoreError):
    logger.error("store_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": Fault.default_message})


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unexpected_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": Fault.default_message})


# ------------------ Auth ------------------


@app.post("/auth/create-account", status_code=201)
def create_account(payload: RegisterRequest, request: Request, background_tasks: BackgroundTasks):
    account_service.register(
        _store(request),
        name=payload.name,
        email=payload.email,
        password=payload.password,
        notify=_notifier(request, background_tasks),
    )
    return "Account created, check your email to confirm it"


@app.post("/auth/confirm-account")
def confirm_account(payload: TokenRequest, request: Request):
    account_service.confirm(_store(request), token=payload.token)
    return "Account confirmed successfully"


@app.post("/auth/login")
def login(payload: LoginRequest, request: Request):
    return login_account(_store(request), email=payload.email, password=payload.password)


@app.post("/auth/forgot-password")
def forgot_password(payload: EmailRequest, request: Request, background_tasks: BackgroundTasks):
    account_service.forgot_password(
        _store(request),
        email=payload.email,
        notify=_notifier(request, background_tasks),
    )
    return "Check your email for instructions"


@app.post("/auth/validate-token")
def validate_token(payload: TokenRequest, request: Request):
    account_service.validate_token(_store(request), token=payload.token)
    return "Valid token, set your new password"


@app.post("/auth/reset-password/{token}")
def reset_password(
    payload: NewPasswordRequest,
    request: Request,
    token: ResetToken,
):
    account_service.reset_password(_store(request), token=token, password=payload.password)
    return "Password changed successfully"


@app.get("/auth/user")
def current_account(request: Request, authorization: Optional[str] = Header(None)):
    account = authenticate(_store(request), authorization)
    return {"id": account.id, "name": account.name, "email": account.email}


@app.post("/auth/update-password")
def update_password(
    payload: UpdatePasswordRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    account = authenticate(store, authorization)
    account_service.update_password(
        store,
        account_id=account.id,
        current_password=payload.current_password,
        password=payload.password,
    )
    return "Password updated successfully"


@app.post("/auth/check-password")
def check_password(
    payload: CheckPasswordRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    account = authenticate(store, authorization)
    account_service.check_password(store, account_id=account.id, password=payload.password)
    return "Correct password"


# ------------------ Budgets ------------------


@app.get("/budgets")
def list_budgets(request: Request, authorization: Optional[str] = Header(None)):
    store = _store(request)
    account = authenticate(store, authorization)
    return budget_service.list_budgets(store, account)


@app.post("/budgets", status_code=201)
def create_budget(payload: BudgetRequest, request: Request, authorization: Optional[str] = Header(None)):
    store = _store(request)
    account = authenticate(store, authorization)
    budget_service.create_budget(store, account, name=payload.name, amount=payload.amount)
    return "Budget created successfully"


@app.get("/budgets/{budget_id}")
def get_budget(request: Request, budget_id: BudgetId, authorization: Optional[str] = Header(None)):
    store = _store(request)
    ctx = budget_context(store, authorization, budget_id)
    return budget_service.budget_detail(store, ctx)


@app.put("/budgets/{budget_id}")
def update_budget(
    payload: BudgetRequest,
    request: Request,
    budget_id: BudgetId,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    ctx = budget_context(store, authorization, budget_id)
    budget_service.update_budget(store, ctx, name=payload.name, amount=payload.amount)
    return "Budget updated successfully"


@app.delete("/budgets/{budget_id}")
def delete_budget(request: Request, budget_id: BudgetId, authorization: Optional[str] = Header(None)):
    store = _store(request)
    ctx = budget_context(store, authorization, budget_id)
    budget_service.delete_budget(store, ctx)
    return "Budget deleted"


# ------------------ Expenses ------------------


@app.post("/budgets/{budget_id}/expenses", status_code=201)
def create_expense(
    payload: ExpenseRequest,
    request: Request,
    budget_id: BudgetId,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    ctx = budget_context(store, authorization, budget_id)
    budget_service.create_expense(store, ctx, name=payload.name, amount=payload.amount)
    return "Expense created successfully"


@app.get("/budgets/{budget_id}/expenses/{expense_id}")
def get_expense(
    request: Request,
    budget_id: BudgetId,
    expense_id: ExpenseId,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    ctx = load_expense(store, budget_context(store, authorization, budget_id), expense_id)
    return ctx.expense.public()


@app.put("/budgets/{budget_id}/expenses/{expense_id}")
def update_expense(
    payload: ExpenseRequest,
    request: Request,
    budget_id: BudgetId,
    expense_id: ExpenseId,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    ctx = load_expense(store, budget_context(store, authorization, budget_id), expense_id)
    budget_service.update_expense(store, ctx, name=payload.name, amount=payload.amount)
    return "Expense updated successfully"


@app.delete("/budgets/{budget_id}/expenses/{expense_id}")
def delete_expense(
    request: Request,
    budget_id: BudgetId,
    expense_id: ExpenseId,
    authorization: Optional[str] = Header(None),
):
    store = _store(request)
    ctx = load_expense(store, budget_context(store, authorization, budget_id), expense_id)
    budget_service.delete_expense(store, ctx)
    return "Expense deleted"
