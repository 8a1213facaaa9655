"""Auth endpoints (signup, login, password reset, e-mail verification, logout) and auth dependencies."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from spendlog.core.config import Settings, get_settings
from spendlog.core.database import get_db
from spendlog.core.errors import InvalidTokenError
from spendlog.core.security import TokenClaims, TokenIssuer
from spendlog.models import User
from spendlog.models.base import utcnow
from spendlog.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserData,
    UserPublic,
    UserResponse,
)
from spendlog.services.auth import (
    AuthResult,
    AuthService,
    Clock,
    authenticate_token,
    require_role,
)
from spendlog.services.email import EmailSender
from spendlog.services.user_store import UserStore

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    """Dependency: source of 'now' for token issuance and expiry checks."""
    return utcnow


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_token_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> TokenIssuer:
    return TokenIssuer(settings)


def get_mailer(settings: Annotated[Settings, Depends(get_settings)]) -> EmailSender:
    return EmailSender(settings)


def get_auth_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    mailer: Annotated[EmailSender, Depends(get_mailer)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AuthService:
    return AuthService(store, issuer, mailer, settings, clock=clock)


def _authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    store: UserStore,
    issuer: TokenIssuer,
    clock: Clock,
) -> tuple[User, TokenClaims]:
    # HTTPBearer(auto_error=False) yields None for a missing header or a non-Bearer scheme.
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("You are not logged in! Please log in to get access.")
    user, claims = authenticate_token(credentials.credentials, store, issuer, clock())
    request.state.user = user
    request.state.token_claims = claims
    return user, claims


def get_current_claims(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[UserStore, Depends(get_user_store)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> TokenClaims:
    """Dependency: verified claims of the request's bearer token (runs the full user check)."""
    _, claims = _authenticate(request, credentials, store, issuer, clock)
    return claims


def get_current_user(
    request: Request,
    _claims: Annotated[TokenClaims, Depends(get_current_claims)],
) -> User:
    """Dependency: require a valid, unrevoked, non-stale Bearer JWT and return its user. 401 otherwise."""
    return request.state.user


def require_roles(*roles: str) -> Callable[..., User]:
    """Dependency factory: require an authenticated user whose role is in roles. 403 otherwise."""

    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        require_role(current_user, roles)
        return current_user

    return dependency


def _base_url(request: Request) -> str:
    return str(request.base_url)


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        data=UserData(user=UserPublic.model_validate(result.user)),
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Create an account and return a session token. Duplicate e-mail is a 409."""
    result = service.signup(body.email, body.password, body.confirm_password)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate with e-mail and password; returns a JWT session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    return _auth_response(service.login(body.email, body.password))


@router.post("/logout", response_model=MessageResponse)
def logout(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Revoke the presented token server-side. Clients should discard it as well."""
    service.logout(claims)
    return MessageResponse(message="Logged out successfully.")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """E-mail a single-use reset link valid for RESET_TOKEN_EXPIRE_MINUTES."""
    service.forgot_password(body.email, _base_url(request))
    return MessageResponse(message="Token sent to email!")


@router.post("/reset-password/{token}", response_model=AuthResponse)
def reset_password(
    token: str,
    body: ResetPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Set a new password using the e-mailed token; earlier session tokens stop working."""
    result = service.reset_password(token, body.password, body.confirm_password)
    return _auth_response(result)


@router.post("/email-token-send", response_model=MessageResponse)
def email_token_send(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """E-mail a verification link to the logged-in user's address."""
    service.send_email_verification(current_user, _base_url(request))
    return MessageResponse(message="Verification token sent to email!")


@router.post("/email-token-verify/{token}", response_model=UserResponse)
def email_token_verify(
    token: str,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserResponse:
    """Mark the e-mail as verified using the e-mailed token."""
    user = service.verify_email(token)
    return UserResponse(data=UserData(user=UserPublic.model_validate(user)))
