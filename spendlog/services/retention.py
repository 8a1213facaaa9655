"""Data retention: drop expired session revocations and expired single-use tokens."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from spendlog.models import RevokedToken, User
from spendlog.models.base import utcnow

if TYPE_CHECKING:
    from spendlog.core.config import Settings

logger = logging.getLogger(__name__)


def run_retention(
    session: Session, settings: "Settings", now: datetime | None = None
) -> tuple[int, int]:
    """
    Delete denylist rows whose token has expired anyway, and clear reset/verification
    token pairs that can no longer be used.

    Returns (revocations_deleted, users_cleared). Idempotent: safe to run repeatedly.
    """
    if not settings.RETENTION_ENABLED:
        logger.info("Retention is disabled (RETENTION_ENABLED=false); skipping.")
        return (0, 0)

    cutoff = now or utcnow()
    revocations_deleted = (
        session.query(RevokedToken)
        .filter(RevokedToken.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    reset_cleared = (
        session.query(User)
        .filter(User.password_reset_expires <= cutoff)
        .update(
            {User.password_reset_token_hash: None, User.password_reset_expires: None},
            synchronize_session=False,
        )
    )
    verification_cleared = (
        session.query(User)
        .filter(User.email_verification_expires <= cutoff)
        .update(
            {
                User.email_verification_token_hash: None,
                User.email_verification_expires: None,
            },
            synchronize_session=False,
        )
    )
    session.commit()

    users_cleared = reset_cleared + verification_cleared
    if revocations_deleted > 0 or users_cleared > 0:
        logger.info(
            "Retention run: cutoff=%s, revocations_deleted=%s, token_pairs_cleared=%s",
            cutoff.isoformat(),
            revocations_deleted,
            users_cleared,
        )
    return (revocations_deleted, users_cleared)
