"""Unit tests for password hashing, session token issuance and single-use token generation."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import jwt
from pydantic import SecretStr

from spendlog.core.errors import InvalidTokenError, TokenExpiredError, ValidationError
from spendlog.core.security import (
    TokenIssuer,
    hash_password,
    validate_password_length,
    verify_password,
)
from spendlog.core.tokens import (
    EmailVerificationToken,
    PasswordResetToken,
    generate_token,
    hash_token,
)


def _settings(secret: str = "unit-test-secret", days: int = 90) -> MagicMock:
    settings = MagicMock()
    settings.JWT_SECRET = SecretStr(secret)
    settings.JWT_ALGORITHM = "HS256"
    settings.JWT_EXPIRE_DAYS = days
    return settings


class TestPasswordHashing(unittest.TestCase):
    """hash_password is one-way and salted; verify_password accepts only the same password."""

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("password123")
        self.assertNotEqual(hashed, "password123")
        self.assertTrue(hashed.startswith("$2"))
        self.assertTrue(verify_password("password123", hashed))

    def test_other_strings_fail(self) -> None:
        hashed = hash_password("password123")
        for attempt in ("password124", "PASSWORD123", "", "password123 "):
            self.assertFalse(verify_password(attempt, hashed))

    def test_same_password_gets_different_salt(self) -> None:
        self.assertNotEqual(hash_password("password123"), hash_password("password123"))

    def test_garbage_hash_returns_false(self) -> None:
        self.assertFalse(verify_password("password123", "not-a-bcrypt-hash"))

    def test_cost_factor_is_twelve(self) -> None:
        self.assertEqual(hash_password("password123").split("$")[2], "12")

    def test_length_bounds(self) -> None:
        validate_password_length("a" * 8)
        validate_password_length("a" * 32)
        with self.assertRaises(ValidationError):
            validate_password_length("a" * 7)
        with self.assertRaises(ValidationError):
            validate_password_length("a" * 33)

    def test_multibyte_password_over_72_bytes_rejected(self) -> None:
        # 32 characters, 128 bytes
        with self.assertRaises(ValidationError):
            validate_password_length("\U0001f600" * 32)
        with self.assertRaises(ValidationError):
            hash_password("\U0001f600" * 32)
        validate_password_length("\U0001f600" * 18)

    def test_passwords_sharing_a_72_byte_prefix_do_not_match(self) -> None:
        stored = hash_password("\U0001f600" * 18)
        self.assertTrue(verify_password("\U0001f600" * 18, stored))
        self.assertFalse(verify_password("\U0001f600" * 18 + "a" * 14, stored))


class TestTokenIssuer(unittest.TestCase):
    """issue/verify round trip and failure modes."""

    def test_round_trip_recovers_user_id(self) -> None:
        issuer = TokenIssuer(_settings())
        before = datetime.now(UTC).replace(microsecond=0)
        claims = issuer.verify(issuer.issue(42))
        self.assertEqual(claims.user_id, 42)
        self.assertGreaterEqual(claims.issued_at, before)
        self.assertLessEqual(claims.issued_at, datetime.now(UTC))
        self.assertEqual(
            claims.expires_at - claims.issued_at.replace(microsecond=0), timedelta(days=90)
        )
        self.assertEqual(len(claims.token_id), 32)

    def test_issued_at_keeps_sub_second_precision(self) -> None:
        issuer = TokenIssuer(_settings())
        issued = datetime.now(UTC).replace(microsecond=654_321) - timedelta(minutes=1)
        claims = issuer.verify(issuer.issue(5, now=issued))
        self.assertEqual(claims.issued_at, issued)

    def test_missing_precise_issue_time_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "iat": now, "exp": now + timedelta(days=1), "jti": "x"},
            "unit-test-secret",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            TokenIssuer(_settings()).verify(token)

    def test_each_token_has_unique_id(self) -> None:
        issuer = TokenIssuer(_settings())
        a = issuer.verify(issuer.issue(1))
        b = issuer.verify(issuer.issue(1))
        self.assertNotEqual(a.token_id, b.token_id)

    def test_expired_token(self) -> None:
        issuer = TokenIssuer(_settings(days=1))
        token = issuer.issue(1, now=datetime.now(UTC) - timedelta(days=2))
        with self.assertRaises(TokenExpiredError):
            issuer.verify(token)

    def test_wrong_secret(self) -> None:
        token = TokenIssuer(_settings(secret="one")).issue(1)
        with self.assertRaises(InvalidTokenError):
            TokenIssuer(_settings(secret="two")).verify(token)

    def test_tampered_token(self) -> None:
        issuer = TokenIssuer(_settings())
        token = issuer.issue(1)
        header, payload, signature = token.split(".")
        with self.assertRaises(InvalidTokenError):
            issuer.verify(f"{header}.{payload}x.{signature}")

    def test_garbage(self) -> None:
        with self.assertRaises(InvalidTokenError):
            TokenIssuer(_settings()).verify("not-a-jwt")

    def test_missing_jti_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "iat": now, "exp": now + timedelta(days=1)},
            "unit-test-secret",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            TokenIssuer(_settings()).verify(token)

    def test_non_numeric_subject_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "abc",
                "iat": now,
                "iat_us": int(now.timestamp()) * 1_000_000,
                "exp": now + timedelta(days=1),
                "jti": "x",
            },
            "unit-test-secret",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            TokenIssuer(_settings()).verify(token)


class TestSingleUseTokens(unittest.TestCase):
    """generate_token returns a raw secret and a stored digest + expiry of the requested type."""

    def test_generate_reset_token(self) -> None:
        now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        raw, token = generate_token(PasswordResetToken, now, timedelta(minutes=10))
        self.assertIsInstance(token, PasswordResetToken)
        self.assertEqual(len(raw), 64)
        self.assertEqual(token.token_hash, hash_token(raw))
        self.assertNotEqual(token.token_hash, raw)
        self.assertEqual(token.expires_at, now + timedelta(minutes=10))

    def test_generate_verification_token_is_distinct_type(self) -> None:
        now = datetime(2025, 1, 1, tzinfo=UTC)
        _, token = generate_token(EmailVerificationToken, now, timedelta(minutes=10))
        self.assertIsInstance(token, EmailVerificationToken)
        self.assertNotIsInstance(token, PasswordResetToken)

    def test_hash_is_deterministic(self) -> None:
        self.assertEqual(hash_token("abc"), hash_token("abc"))
        self.assertEqual(len(hash_token("abc")), 64)

    def test_token_only_matches_its_own_hash(self) -> None:
        now = datetime.now(UTC)
        raw_a, token_a = generate_token(PasswordResetToken, now, timedelta(minutes=10))
        raw_b, token_b = generate_token(PasswordResetToken, now, timedelta(minutes=10))
        self.assertNotEqual(raw_a, raw_b)
        self.assertEqual(hash_token(raw_a), token_a.token_hash)
        self.assertNotEqual(hash_token(raw_a), token_b.token_hash)
        self.assertNotEqual(hash_token(raw_b), token_a.token_hash)


if __name__ == "__main__":
    unittest.main()
