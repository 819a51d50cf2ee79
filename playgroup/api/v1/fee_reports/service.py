"""Collection reports. The pending-fee report and reconciliation live in playgroup.core.pending_fees."""

import calendar
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.exceptions import ServiceError
from playgroup.core.models import FeePayment, FeeStructure, Student
from playgroup.core.pending_fees import to_money

from .schemas import DailyCollection, DailyCollectionReport, DailyPaymentDetail, MonthlyCollectionReport

MIN_REPORT_YEAR = 2000
MAX_REPORT_YEAR = 9999


async def get_daily_collection(db: AsyncSession, day: date) -> DailyCollectionReport:
    result = await db.execute(
        select(FeePayment, Student.full_name, FeeStructure.name)
        .outerjoin(Student, Student.id == FeePayment.student_id)
        .outerjoin(FeeStructure, FeeStructure.id == FeePayment.fee_structure_id)
        .where(FeePayment.payment_date == day)
        .order_by(FeePayment.id)
    )
    details = []
    total = Decimal("0.00")
    for payment, student_name, fee_structure_name in result.all():
        amount = to_money(payment.amount)
        total += amount
        details.append(
            DailyPaymentDetail(
                payment_id=payment.id,
                receipt_number=payment.receipt_number,
                student_id=payment.student_id,
                student_name=student_name,
                fee_structure_id=payment.fee_structure_id,
                fee_structure_name=fee_structure_name,
                amount=amount,
                payment_method=payment.payment_method,
            )
        )
    return DailyCollectionReport(date=day, payment_details=details, total_collected=total)


async def get_monthly_collection(db: AsyncSession, year: int, month: int) -> MonthlyCollectionReport:
    """Per-day totals for one calendar month; days without payments are left out."""
    if not 1 <= month <= 12:
        raise ServiceError("month must be between 1 and 12", status.HTTP_400_BAD_REQUEST)
    if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
        raise ServiceError(
            f"year must be between {MIN_REPORT_YEAR} and {MAX_REPORT_YEAR}", status.HTTP_400_BAD_REQUEST
        )
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    result = await db.execute(
        select(FeePayment.payment_date, FeePayment.amount).where(
            FeePayment.payment_date >= first,
            FeePayment.payment_date <= last,
        )
    )
    per_day: Dict[date, Decimal] = defaultdict(lambda: Decimal("0.00"))
    for payment_date, amount in result.all():
        per_day[payment_date] += to_money(amount)
    daily = [DailyCollection(date=d, amount=per_day[d]) for d in sorted(per_day)]
    total = sum((d.amount for d in daily), Decimal("0.00"))
    return MonthlyCollectionReport(year=year, month=month, daily_collection=daily, total_collected=total)
