import datetime
from decimal import Decimal
from typing import List, Optional

from playgroup.core.schemas import CamelModel, LinkOutcome


class DailyPaymentDetail(CamelModel):
    payment_id: int
    receipt_number: Optional[str] = None
    student_id: int
    student_name: Optional[str] = None
    fee_structure_id: int
    fee_structure_name: Optional[str] = None
    amount: Decimal
    payment_method: str


class DailyCollectionReport(CamelModel):
    date: datetime.date
    payment_details: List[DailyPaymentDetail]
    total_collected: Decimal


class DailyCollection(CamelModel):
    date: datetime.date
    amount: Decimal


class MonthlyCollectionReport(CamelModel):
    year: int
    month: int
    daily_collection: List[DailyCollection]
    total_collected: Decimal


class ReconcileResponse(CamelModel):
    linked: int
    failed: int
    results: List[LinkOutcome]
