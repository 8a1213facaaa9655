"""Expense endpoints: CRUD on the caller's own expenses and per-category totals."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from spendlog.api.v1.auth import get_current_user
from spendlog.core.database import get_db
from spendlog.models import User
from spendlog.schemas.expense import (
    CategoryTotal,
    CategoryTotalsResponse,
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseOut,
    ExpenseResponse,
    ExpenseUpdate,
)
from spendlog.services import expenses as expense_service

router = APIRouter()


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ExpenseListResponse:
    """All of the caller's expenses, newest first."""
    expenses = expense_service.list_expenses(db, current_user)
    items = [ExpenseOut.model_validate(e) for e in expenses]
    return ExpenseListResponse(results=len(items), data=items)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    body: ExpenseCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ExpenseResponse:
    expense = expense_service.create_expense(db, current_user, body.model_dump())
    return ExpenseResponse(data=ExpenseOut.model_validate(expense))


@router.get("/categories", response_model=CategoryTotalsResponse)
def get_category_totals(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CategoryTotalsResponse:
    """Spending per category for the caller, highest total first."""
    totals = [
        CategoryTotal(category=category, total=total, count=count)
        for category, total, count in expense_service.category_totals(db, current_user)
    ]
    return CategoryTotalsResponse(results=len(totals), data=totals)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ExpenseResponse:
    expense = expense_service.get_expense(db, current_user, expense_id)
    return ExpenseResponse(data=ExpenseOut.model_validate(expense))


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    body: ExpenseUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ExpenseResponse:
    """Change only the fields present in the body."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    expense = expense_service.update_expense(db, current_user, expense_id, changes)
    return ExpenseResponse(data=ExpenseOut.model_validate(expense))


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """Delete one of the caller's expenses; admins may delete any expense."""
    expense_service.delete_expense(db, current_user, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
