"""Unit and integration tests for the retention job: expired revocations and stale single-use tokens."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from spendlog.core.tokens import EmailVerificationToken, PasswordResetToken
from spendlog.models import RevokedToken, User
from spendlog.services.retention import run_retention
from support import make_session_factory


class TestRetentionDisabled(unittest.TestCase):
    """When RETENTION_ENABLED is False, run_retention does nothing."""

    def test_returns_zero_and_does_not_query(self) -> None:
        settings = MagicMock()
        settings.RETENTION_ENABLED = False
        session = MagicMock()
        self.assertEqual(run_retention(session, settings), (0, 0))
        session.query.assert_not_called()
        session.commit.assert_not_called()


class TestRetentionNothingExpired(unittest.TestCase):
    def test_returns_zero_and_commits(self) -> None:
        settings = MagicMock()
        settings.RETENTION_ENABLED = True
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        session.query.return_value.filter.return_value.update.return_value = 0
        self.assertEqual(run_retention(session, settings), (0, 0))
        session.commit.assert_called_once()


class TestRetentionAgainstDatabase(unittest.TestCase):
    """Real SQLite session: only expired rows/pairs are touched."""

    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.settings = MagicMock()
        self.settings.RETENTION_ENABLED = True
        self.now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

    def tearDown(self) -> None:
        self.db.close()

    def _user(self, email: str) -> User:
        user = User(email=email, role="user", is_email_verified=False)
        user.password_hash = "x"
        self.db.add(user)
        return user

    def test_purges_only_expired(self) -> None:
        self.db.add(RevokedToken(jti="old", user_id=1, expires_at=self.now - timedelta(days=1)))
        self.db.add(RevokedToken(jti="live", user_id=1, expires_at=self.now + timedelta(days=1)))
        stale = self._user("stale@b.com")
        stale.password_reset = PasswordResetToken("h1", self.now - timedelta(minutes=1))
        stale.email_verification = EmailVerificationToken("h2", self.now - timedelta(minutes=1))
        fresh = self._user("fresh@b.com")
        fresh.password_reset = PasswordResetToken("h3", self.now + timedelta(minutes=5))
        self.db.commit()

        revocations, cleared = run_retention(self.db, self.settings, now=self.now)
        self.assertEqual(revocations, 1)
        self.assertEqual(cleared, 2)

        self.db.expire_all()
        self.assertEqual([r.jti for r in self.db.query(RevokedToken).all()], ["live"])
        stale = self.db.query(User).filter(User.email == "stale@b.com").one()
        self.assertIsNone(stale.password_reset)
        self.assertIsNone(stale.email_verification)
        fresh = self.db.query(User).filter(User.email == "fresh@b.com").one()
        self.assertEqual(fresh.password_reset.token_hash, "h3")

        self.assertEqual(run_retention(self.db, self.settings, now=self.now), (0, 0))


if __name__ == "__main__":
    unittest.main()
