"""ORM model for application users (credentials, roles and single-use token state)."""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from spendlog.core.errors import ValidationError
from spendlog.core.security import hash_password, validate_password_length, verify_password
from spendlog.core.tokens import EmailVerificationToken, PasswordResetToken
from spendlog.models.base import Base, UTCDateTime, as_utc, utcnow

ROLES = ("user", "admin")


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. The plaintext password is write-only: assigning
    ``user.password`` validates and hashes it; only ``password_hash`` is stored.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    is_email_verified = Column(Boolean, nullable=False, default=False)
    password_changed_at = Column(UTCDateTime(), nullable=True)
    password_reset_token_hash = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(UTCDateTime(), nullable=True)
    email_verification_token_hash = Column(String(64), nullable=True, index=True)
    email_verification_expires = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    expenses = relationship(
        "Expense",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def password(self) -> str:
        raise AttributeError("password is write-only; compare with check_password()")

    @password.setter
    def password(self, plain_password: str) -> None:
        validate_password_length(plain_password)
        self.password_hash = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        return verify_password(plain_password, self.password_hash)

    @property
    def password_reset(self) -> PasswordResetToken | None:
        if self.password_reset_token_hash is None or self.password_reset_expires is None:
            return None
        return PasswordResetToken(
            token_hash=self.password_reset_token_hash,
            expires_at=as_utc(self.password_reset_expires),
        )

    @password_reset.setter
    def password_reset(self, token: PasswordResetToken | None) -> None:
        self.password_reset_token_hash = token.token_hash if token else None
        self.password_reset_expires = token.expires_at if token else None

    @property
    def email_verification(self) -> EmailVerificationToken | None:
        if self.email_verification_token_hash is None or self.email_verification_expires is None:
            return None
        return EmailVerificationToken(
            token_hash=self.email_verification_token_hash,
            expires_at=as_utc(self.email_verification_expires),
        )

    @email_verification.setter
    def email_verification(self, token: EmailVerificationToken | None) -> None:
        self.email_verification_token_hash = token.token_hash if token else None
        self.email_verification_expires = token.expires_at if token else None

    def changed_password_after(self, issued_at: datetime) -> bool:
        """True if the password was replaced strictly after issued_at (microsecond precision)."""
        if self.password_changed_at is None:
            return False
        return as_utc(self.password_changed_at) > as_utc(issued_at)

    def validate(self) -> None:
        """Full-record validation run before a normal save."""
        if not self.email:
            raise ValidationError("Email is required.")
        try:
            validate_email(self.email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError("Please provide a valid email address.") from e
        if self.email != self.email.lower():
            raise ValidationError("Email must be stored in lowercase.")
        if not self.password_hash:
            raise ValidationError("Password is required.")
        if self.role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
