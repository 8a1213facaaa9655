"""Request/response schemas for expense endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ExpenseCategory = Literal["Food", "Transport", "Entertainment", "Utilities", "HealthCare", "Others"]


class ExpenseCreate(BaseModel):
    """New expense. Date defaults to now when omitted."""

    category: ExpenseCategory = Field(..., description="Expense type")
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Amount spent")
    description: str = Field(default="", max_length=1000)
    date: datetime | None = None


class ExpenseUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    category: ExpenseCategory | None = None
    amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    description: str | None = Field(default=None, max_length=1000)
    date: datetime | None = None


class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category: str
    amount: Decimal
    description: str
    date: datetime
    created_at: datetime


class ExpenseResponse(BaseModel):
    status: Literal["success"] = "success"
    data: ExpenseOut


class ExpenseListResponse(BaseModel):
    status: Literal["success"] = "success"
    results: int
    data: list[ExpenseOut]


class CategoryTotal(BaseModel):
    """Aggregated spending for one category."""

    category: str
    total: Decimal
    count: int


class CategoryTotalsResponse(BaseModel):
    status: Literal["success"] = "success"
    results: int
    data: list[CategoryTotal]
