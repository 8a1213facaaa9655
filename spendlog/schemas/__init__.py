"""Pydantic request/response schemas."""

from spendlog.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserPublic,
    UserResponse,
    UsersListResponse,
)
from spendlog.schemas.expense import (
    CategoryTotal,
    CategoryTotalsResponse,
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseOut,
    ExpenseResponse,
    ExpenseUpdate,
)
from spendlog.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "CategoryTotal",
    "CategoryTotalsResponse",
    "ExpenseCreate",
    "ExpenseListResponse",
    "ExpenseOut",
    "ExpenseResponse",
    "ExpenseUpdate",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "ResetPasswordRequest",
    "SignupRequest",
    "UserPublic",
    "UserResponse",
    "UsersListResponse",
]
