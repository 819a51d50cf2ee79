from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from playgroup.core.enums import PaymentMethod
from playgroup.core.schemas import CamelModel


class FeePaymentCreate(CamelModel):
    student_id: int
    fee_structure_id: int
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_date: Optional[date] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = None
    # Generated from the receipt sequence when omitted
    receipt_number: Optional[str] = Field(None, max_length=50)
    discount_applied: bool = False


class FeePaymentUpdate(CamelModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    discount_applied: Optional[bool] = None


class FeePaymentResponse(CamelModel):
    id: int
    student_id: int
    fee_structure_id: int
    amount: Decimal
    payment_date: date
    payment_method: str
    notes: Optional[str] = None
    receipt_number: Optional[str] = None
    discount_applied: bool
    created_at: datetime
