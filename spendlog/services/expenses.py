"""Per-user expense records and category totals."""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from spendlog.core.errors import NotFoundError
from spendlog.models import Expense, User

logger = logging.getLogger(__name__)


def list_expenses(session: Session, user: User) -> list[Expense]:
    """All expenses owned by user, newest first."""
    return (
        session.query(Expense)
        .filter(Expense.user_id == user.id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


def get_expense(session: Session, user: User, expense_id: int) -> Expense:
    """Return the user's expense; other users' expenses are reported as missing."""
    expense = (
        session.query(Expense)
        .filter(Expense.id == expense_id, Expense.user_id == user.id)
        .first()
    )
    if expense is None:
        raise NotFoundError("Expense not found!")
    return expense


def create_expense(session: Session, user: User, fields: dict[str, Any]) -> Expense:
    expense = Expense(user_id=user.id, **{k: v for k, v in fields.items() if v is not None})
    session.add(expense)
    session.commit()
    session.refresh(expense)
    return expense


def update_expense(
    session: Session, user: User, expense_id: int, changes: dict[str, Any]
) -> Expense:
    """Apply only the provided fields; ownership never changes."""
    expense = get_expense(session, user, expense_id)
    for field, value in changes.items():
        setattr(expense, field, value)
    session.commit()
    session.refresh(expense)
    return expense


def delete_expense(session: Session, user: User, expense_id: int) -> None:
    """
    Owners delete their own expenses; admins may delete any expense.
    Anything else is a 404 so foreign expense ids are not disclosed.
    """
    query = session.query(Expense).filter(Expense.id == expense_id)
    if user.role != "admin":
        query = query.filter(Expense.user_id == user.id)
    expense = query.first()
    if expense is None:
        raise NotFoundError("Expense not found!")
    owner_id = expense.user_id
    session.delete(expense)
    session.commit()
    if owner_id != user.id:
        logger.info(
            "Admin id=%s deleted expense id=%s of user id=%s", user.id, expense_id, owner_id
        )


def category_totals(session: Session, user: User) -> list[tuple[str, Decimal, int]]:
    """(category, total amount, count) for the user's expenses, largest total first."""
    total = func.sum(Expense.amount).label("total")
    rows = (
        session.query(Expense.category, total, func.count(Expense.id))
        .filter(Expense.user_id == user.id)
        .group_by(Expense.category)
        .order_by(total.desc(), Expense.category)
        .all()
    )
    return [(category, Decimal(str(amount or 0)), count) for category, amount, count in rows]
