"""Credential store: user persistence on top of a SQLAlchemy session.

Every write commits on its own; there is no transaction spanning several calls.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spendlog.core.errors import ConflictError
from spendlog.models import RevokedToken, User

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_by_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """User whose outstanding reset token has this digest and has not expired."""
        return (
            self.session.query(User)
            .filter(
                User.password_reset_token_hash == token_hash,
                User.password_reset_expires > now,
            )
            .first()
        )

    def find_by_verification_token(self, token_hash: str, now: datetime) -> User | None:
        """User whose outstanding verification token has this digest and has not expired."""
        return (
            self.session.query(User)
            .filter(
                User.email_verification_token_hash == token_hash,
                User.email_verification_expires > now,
            )
            .first()
        )

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.id).all()

    def create(self, email: str, password: str, role: str = "user") -> User:
        """
        Insert a new user; the password is hashed on assignment.
        Raises ValidationError for bad fields, ConflictError if the e-mail is taken.
        """
        user = User(email=email.strip().lower(), role=role, is_email_verified=False)
        user.password = password
        user.validate()
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("An account with this email already exists.") from e
        self.session.refresh(user)
        logger.info("Created user id=%s role=%s", user.id, user.role)
        return user

    def save(self, user: User, skip_full_validation: bool = False) -> User:
        """Persist pending changes on user. Skip validation when only token fields changed."""
        if not skip_full_validation:
            user.validate()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self.session.commit()

    def revoke_token(self, token_id: str, user_id: int, expires_at: datetime) -> None:
        """Add a session token id to the denylist (idempotent)."""
        if self.session.get(RevokedToken, token_id) is not None:
            return
        self.session.add(RevokedToken(jti=token_id, user_id=user_id, expires_at=expires_at))
        try:
            self.session.commit()
        except IntegrityError:
            # Concurrent logout with the same token already inserted the row.
            self.session.rollback()

    def is_token_revoked(self, token_id: str) -> bool:
        return self.session.get(RevokedToken, token_id) is not None
