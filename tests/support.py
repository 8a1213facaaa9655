"""Shared test doubles and an API test case backed by in-memory SQLite."""

import re
import unittest
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spendlog.api.v1.auth import get_clock, get_mailer
from spendlog.core.database import get_db
from spendlog.core.errors import DeliveryError
from spendlog.main import app
from spendlog.models import Base, User

TOKEN_IN_URL = re.compile(r"/(?:reset-password|email-token-verify)/([0-9a-f]{64})")


class FakeClock:
    """Controllable 'now'. Starts in the past so issued JWTs never have an iat in the future."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(UTC) - timedelta(hours=2)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeMailer:
    """Records sent messages instead of talking to SMTP; can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body_text: str) -> None:
        if self.fail:
            raise DeliveryError("There was an error sending the email. Try again later!")
        self.sent.append({"to": to, "subject": subject, "body": body_text})

    def last_token(self) -> str:
        match = TOKEN_IN_URL.search(self.sent[-1]["body"])
        if match is None:
            raise AssertionError("No token link in the last e-mail")
        return match.group(1)


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class ApiTestCase(unittest.TestCase):
    """Runs the FastAPI app against a fresh in-memory database per test."""

    prefix = "/api/v1"

    def setUp(self) -> None:
        self.SessionLocal = make_session_factory()
        self.clock = FakeClock()
        self.mailer = FakeMailer()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_mailer] = lambda: self.mailer
        app.dependency_overrides[get_clock] = lambda: self.clock
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def signup(self, email: str = "a@b.com", password: str = "password123") -> dict:
        resp = self.client.post(
            self.url("/auth/signup"),
            json={"email": email, "password": password, "confirmPassword": password},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def make_admin(self, email: str) -> None:
        db = self.SessionLocal()
        try:
            user = db.query(User).filter(User.email == email).one()
            user.role = "admin"
            db.commit()
        finally:
            db.close()
