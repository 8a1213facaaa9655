"""SQLAlchemy ORM models."""

from spendlog.models.base import Base
from spendlog.models.expense import EXPENSE_CATEGORIES, Expense
from spendlog.models.revoked_token import RevokedToken
from spendlog.models.user import ROLES, User

__all__ = ["Base", "EXPENSE_CATEGORIES", "Expense", "ROLES", "RevokedToken", "User"]
