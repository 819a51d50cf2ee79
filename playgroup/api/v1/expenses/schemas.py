import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from playgroup.core.schemas import CamelModel


class ExpenseCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    date: datetime.date
    notes: Optional[str] = None


class ExpenseUpdate(CamelModel):
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[datetime.date] = None
    notes: Optional[str] = None


class ExpenseResponse(CamelModel):
    id: int
    description: str
    amount: Decimal
    category: str
    date: datetime.date
    notes: Optional[str] = None
    created_at: datetime.datetime


class ExpenseCategoryTotal(CamelModel):
    category: str
    amount: Decimal


class ExpenseReport(CamelModel):
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    categories: List[ExpenseCategoryTotal]
    total: Decimal
