"""Credential lifecycle: signup, login, password reset, e-mail verification, logout.

Also holds the bearer-token check used by the request dependencies. Each
operation is a short request/response sequence over the user store; the only
state carried between requests is the hashed single-use token on the user row.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from spendlog.core.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    NotFoundError,
    StaleTokenError,
    ValidationError,
)
from spendlog.core.security import TokenClaims, TokenIssuer, burn_password_check
from spendlog.core.tokens import (
    EmailVerificationToken,
    PasswordResetToken,
    generate_token,
    hash_token,
)
from spendlog.models import User
from spendlog.models.base import utcnow
from spendlog.services.email import (
    EmailSender,
    build_reset_email,
    build_verification_email,
    redact_email,
)
from spendlog.services.user_store import UserStore

if TYPE_CHECKING:
    from spendlog.core.config import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

INVALID_CREDENTIALS = "Incorrect email or password."
INVALID_OR_EXPIRED_TOKEN = "Token is invalid or has expired."


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued session token and the user it belongs to."""

    token: str
    user: User


def authenticate_token(
    token: str,
    store: UserStore,
    issuer: TokenIssuer,
    now: datetime,
) -> tuple[User, TokenClaims]:
    """
    Resolve a bearer token to its user.

    Raises AuthenticationError subclasses for bad signature, expiry, revocation,
    unknown subject, or a password change after the token was issued.
    """
    claims = issuer.verify(token)
    if store.is_token_revoked(claims.token_id):
        raise InvalidTokenError("This session has been logged out. Please log in again.")
    user = store.find_by_id(claims.user_id)
    if user is None:
        raise AuthenticationError("The user belonging to this token no longer exists.")
    if user.changed_password_after(claims.issued_at) and claims.expires_at > now:
        raise StaleTokenError("Password changed after token issued! Please log in again.")
    return user, claims


def require_role(user: User, roles: tuple[str, ...]) -> None:
    """Raise AuthorizationError unless user.role is one of roles."""
    if user.role not in roles:
        raise AuthorizationError("You do not have permission to perform this action.")


class AuthService:
    """Composes the user store, token issuer and mailer into the authentication use cases."""

    def __init__(
        self,
        store: UserStore,
        issuer: TokenIssuer,
        mailer: EmailSender,
        settings: Settings,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.issuer = issuer
        self.mailer = mailer
        self.clock = clock
        self.api_prefix = settings.API_V1_PREFIX.rstrip("/")
        self.public_base_url = settings.PUBLIC_BASE_URL
        self.reset_lifetime = timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        self.verification_lifetime = timedelta(
            minutes=settings.EMAIL_VERIFICATION_EXPIRE_MINUTES
        )

    def _link(self, base_url: str, action: str, raw_token: str) -> str:
        base = (self.public_base_url or base_url).rstrip("/")
        return f"{base}{self.api_prefix}/auth/{action}/{raw_token}"

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(token=self.issuer.issue(user.id, now=self.clock()), user=user)

    def signup(self, email: str, password: str, confirm_password: str) -> AuthResult:
        if not email or not password or not confirm_password:
            raise ValidationError("Email, password and confirmPassword are required.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        user = self.store.create(email=email, password=password)
        return self._issue(user)

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Please provide email and password!")
        user = self.store.find_by_email(email)
        if user is None:
            burn_password_check(password)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.check_password(password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        return self._issue(user)

    def logout(self, claims: TokenClaims) -> None:
        """Deny further use of this session token until its own expiry."""
        self.store.revoke_token(claims.token_id, claims.user_id, claims.expires_at)
        logger.info("Session revoked for user id=%s", claims.user_id)

    def forgot_password(self, email: str, base_url: str) -> None:
        """
        Store a fresh reset token on the user and e-mail the raw value.
        On delivery failure the token is cleared again and DeliveryError propagates.
        """
        if not email:
            raise ValidationError("Email is required.")
        user = self.store.find_by_email(email)
        if user is None:
            raise NotFoundError("There is no user with that email address.")

        raw, token = generate_token(PasswordResetToken, self.clock(), self.reset_lifetime)
        user.password_reset = token
        self.store.save(user, skip_full_validation=True)

        subject, body = build_reset_email(
            self._link(base_url, "reset-password", raw),
            int(self.reset_lifetime.total_seconds() // 60),
        )
        try:
            self.mailer.send(to=user.email, subject=subject, body_text=body)
        except Exception:
            user.password_reset = None
            self.store.save(user, skip_full_validation=True)
            raise
        logger.info("Password reset token sent to %s", redact_email(user.email))

    def reset_password(
        self, raw_token: str, password: str, confirm_password: str
    ) -> AuthResult:
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        now = self.clock()
        user = self.store.find_by_reset_token(hash_token(raw_token), now)
        if user is None:
            raise ValidationError(INVALID_OR_EXPIRED_TOKEN)

        user.password = password
        user.password_reset = None
        user.password_changed_at = now
        self.store.save(user)
        logger.info("Password reset completed for user id=%s", user.id)
        return self._issue(user)

    def send_email_verification(self, user: User, base_url: str) -> None:
        """Same shape as forgot_password, for the already-authenticated user."""
        raw, token = generate_token(
            EmailVerificationToken, self.clock(), self.verification_lifetime
        )
        user.email_verification = token
        self.store.save(user, skip_full_validation=True)

        subject, body = build_verification_email(
            self._link(base_url, "email-token-verify", raw),
            int(self.verification_lifetime.total_seconds() // 60),
        )
        try:
            self.mailer.send(to=user.email, subject=subject, body_text=body)
        except Exception:
            user.email_verification = None
            self.store.save(user, skip_full_validation=True)
            raise
        logger.info("Verification token sent to %s", redact_email(user.email))

    def verify_email(self, raw_token: str) -> User:
        user = self.store.find_by_verification_token(hash_token(raw_token), self.clock())
        if user is None:
            raise ValidationError(INVALID_OR_EXPIRED_TOKEN)
        user.is_email_verified = True
        user.email_verification = None
        return self.store.save(user, skip_full_validation=True)
