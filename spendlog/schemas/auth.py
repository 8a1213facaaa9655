"""Request/response schemas for auth and user endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from spendlog.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    PASSWORD_TOO_LONG,
    password_too_long,
)


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class PasswordPair(BaseModel):
    """New password plus its confirmation; both must match."""

    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    confirm_password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        validation_alias=AliasChoices("confirm_password", "confirmPassword"),
        description="Must equal password",
    )

    @field_validator("password", "confirm_password")
    @classmethod
    def fits_bcrypt_input(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(PASSWORD_TOO_LONG)
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordPair":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SignupRequest(PasswordPair):
    """New account: e-mail plus password and confirmation."""

    email: EmailStr = Field(..., description="Account e-mail (stored lowercase)")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v) if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Credentials for login. Only presence is checked here so failures stay uniform."""

    email: str = Field(..., min_length=1, max_length=320, description="Account e-mail")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320, description="Account e-mail")


class ResetPasswordRequest(PasswordPair):
    """New password for the account that owns the reset token in the URL."""


class UserPublic(BaseModel):
    """User as returned to clients: no password or token hashes."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    is_email_verified: bool
    created_at: datetime
    password_changed_at: datetime | None = None


class UserData(BaseModel):
    user: UserPublic


class UsersData(BaseModel):
    users: list[UserPublic]


class AuthResponse(BaseModel):
    """Session token issued after signup, login or password reset."""

    status: Literal["success"] = "success"
    token: str = Field(..., description="JWT; send as Authorization: Bearer <token>")
    token_type: str = Field(default="bearer", description="Token type")
    data: UserData


class UserResponse(BaseModel):
    status: Literal["success"] = "success"
    data: UserData


class UsersListResponse(BaseModel):
    """Response for GET /user (admin only)."""

    status: Literal["success"] = "success"
    results: int
    data: UsersData


class MessageResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
