# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request bodies.

These models are the shape-validation gate: FastAPI rejects a request that
does not fit them before any route code runs, answering 400 with the list of
problems.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from cashtracker.auth.tokens import is_confirmation_token

MIN_PASSWORD_LENGTH = 8


def _not_blank(v: str, message: str) -> str:
    v = (v or "").strip()
    if not v:
        raise PydanticCustomError("blank", message)
    return v


def _email(v: str) -> str:
    try:
        validate_email(v, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "Invalid email") from None
    return v.strip().lower()


def _password(v: str) -> str:
    if len(v or "") < MIN_PASSWORD_LENGTH:
        raise PydanticCustomError(
            "password_too_short",
            "Password is too short, minimum {min_length} characters",
            {"min_length": MIN_PASSWORD_LENGTH},
        )
    return v


def _token(v: str) -> str:
    if not is_confirmation_token(v):
        raise PydanticCustomError("token", "Invalid token")
    return v


class RegisterRequest(BaseModel):
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address (unique)")
    password: str = Field(..., description="Plain password, hashed before storage")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Name can't be empty")

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _email(v)

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        return _password(v)


class TokenRequest(BaseModel):
    token: str = Field(..., description="6-digit confirmation or reset code")

    @field_validator("token")
    @classmethod
    def token_shape(cls, v: str) -> str:
        return _token(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _email(v)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("blank", "Password is required")
        return v


class EmailRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _email(v)


class NewPasswordRequest(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        return _password(v)


class UpdatePasswordRequest(BaseModel):
    current_password: str
    password: str

    @field_validator("current_password")
    @classmethod
    def current_not_blank(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("blank", "Current password can't be empty")
        return v

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        return _password(v)


class CheckPasswordRequest(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("blank", "Password can't be empty")
        return v


class BudgetRequest(BaseModel):
    name: str = Field(..., description="Budget name")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Budgeted amount")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Budget name can't be empty")


class ExpenseRequest(BaseModel):
    name: str = Field(..., description="Expense name")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount spent")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Expense name can't be empty")
