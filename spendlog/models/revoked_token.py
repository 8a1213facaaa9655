"""ORM model for session tokens revoked before their own expiry (logout)."""

from sqlalchemy import Column, Integer, String

from spendlog.models.base import Base, UTCDateTime


class RevokedToken(Base):
    """
    Denylist entry keyed by the JWT id (jti).

    Rows are only useful until expires_at; the retention job deletes them afterwards.
    """

    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    expires_at = Column(UTCDateTime(), nullable=False, index=True)
