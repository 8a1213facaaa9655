"""ORM model for per-user expense records."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from spendlog.models.base import Base, UTCDateTime, utcnow

EXPENSE_CATEGORIES = (
    "Food",
    "Transport",
    "Entertainment",
    "Utilities",
    "HealthCare",
    "Others",
)


class Expense(Base):
    """One spending entry owned by a user."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category = Column(String(32), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=False, default="")
    date = Column(UTCDateTime(), nullable=False, default=utcnow)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    user = relationship("User", back_populates="expenses")
