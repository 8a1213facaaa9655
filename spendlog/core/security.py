"""Password hashing and JWT session token issuance/verification."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from spendlog.core.errors import InvalidTokenError, TokenExpiredError, ValidationError

if TYPE_CHECKING:
    from spendlog.core.config import Settings

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MICROSECOND = timedelta(microseconds=1)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 32
# bcrypt only reads the first 72 bytes of its input.
PASSWORD_MAX_BYTES = 72

PASSWORD_TOO_LONG = f"Password must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded."


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > PASSWORD_MAX_BYTES


def validate_password_length(plain_password: str) -> None:
    """Raise ValidationError unless the password is 8-32 characters and fits in 72 bytes."""
    if not (PASSWORD_MIN_LEN <= len(plain_password) <= PASSWORD_MAX_LEN):
        raise ValidationError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters long."
        )
    if password_too_long(plain_password):
        raise ValidationError(PASSWORD_TOO_LONG)


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if password_too_long(plain_password):
        raise ValidationError(PASSWORD_TOO_LONG)
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    # Such a password was never hashed, and bcrypt would compare only its prefix.
    if password_too_long(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Compared against when the login e-mail is unknown so both failure paths cost one bcrypt check.
_DUMMY_HASH = hash_password(secrets.token_hex(16))


def burn_password_check(plain_password: str) -> None:
    """Spend the same time as a real verification without a stored hash."""
    verify_password(plain_password, _DUMMY_HASH)


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a session token."""

    user_id: int
    issued_at: datetime
    expires_at: datetime
    token_id: str


class TokenIssuer:
    """Signs and verifies bearer session tokens with the configured secret and lifetime."""

    def __init__(self, settings: "Settings") -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self._lifetime = timedelta(days=settings.JWT_EXPIRE_DAYS)

    def issue(self, user_id: int, now: datetime | None = None) -> str:
        """
        Create a JWT with sub (user id), iat, exp and a random jti.

        iat only has whole seconds, so iat_us carries the exact issue instant
        (microseconds since the epoch) for the password-changed check.
        """
        issued = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": issued,
            "iat_us": (issued - _EPOCH) // _MICROSECOND,
            "exp": issued + self._lifetime,
            "jti": secrets.token_hex(16),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a JWT.
        Raises TokenExpiredError once exp has passed, InvalidTokenError for anything else wrong.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "iat_us", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Your token has expired. Please log in again.") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError("Invalid token. Please log in again.") from e
        try:
            user_id = int(payload["sub"])
            issued_at = _EPOCH + timedelta(microseconds=int(payload["iat_us"]))
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidTokenError("Invalid token payload.") from e
        return TokenClaims(
            user_id=user_id,
            issued_at=issued_at,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            token_id=str(payload["jti"]),
        )
