"""Single-use secrets for password reset and e-mail verification.

Only the SHA-256 digest of a token is ever persisted; the raw value goes out
once (in an e-mailed URL) and is recomputed into a digest when presented back.
"""

import hashlib
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar

# 32 random bytes -> 64 hex characters in the URL
TOKEN_BYTES = 32

_TOKEN_IN_LINK = re.compile(r"(/(?:reset-password|email-token-verify)/)[^/\s?#]+")


@dataclass(frozen=True)
class PasswordResetToken:
    """Outstanding password-reset request stored on a user."""

    token_hash: str
    expires_at: datetime


@dataclass(frozen=True)
class EmailVerificationToken:
    """Outstanding e-mail verification request stored on a user."""

    token_hash: str
    expires_at: datetime


SingleUseToken = TypeVar("SingleUseToken", PasswordResetToken, EmailVerificationToken)


def hash_token(raw_token: str) -> str:
    """Deterministic one-way digest of a raw token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_token(
    kind: type[SingleUseToken],
    now: datetime,
    lifetime: timedelta,
) -> tuple[str, SingleUseToken]:
    """Return (raw_token, stored_token). Hand the raw value to the user; persist only the other."""
    raw = secrets.token_hex(TOKEN_BYTES)
    return raw, kind(token_hash=hash_token(raw), expires_at=now + lifetime)


def redact_token_links(text: str) -> str:
    """Replace the raw token in reset/verification URLs or paths for logging."""
    return _TOKEN_IN_LINK.sub(r"\1<redacted>", text)
