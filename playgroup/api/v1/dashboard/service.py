import calendar
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.enums import StudentStatus
from playgroup.core.models import Expense, FeePayment, InventoryItem, Student
from playgroup.core.pending_fees import get_pending_fees, to_money
from playgroup.storage.base import Storage

from .schemas import DashboardStats


async def _count(db: AsyncSession, stmt) -> int:
    return (await db.execute(stmt)).scalar() or 0


async def _sum(db: AsyncSession, column, *conditions) -> Decimal:
    value = (await db.execute(select(func.coalesce(func.sum(column), 0)).where(*conditions))).scalar()
    return to_money(value)


async def get_dashboard_stats(db: AsyncSession, storage: Storage, today: Optional[date] = None) -> DashboardStats:
    """Headline counters for the current calendar month."""
    today = today or date.today()
    month_start = today.replace(day=1)
    month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])

    pending = await get_pending_fees(storage, today=today)
    return DashboardStats(
        total_students=await _count(db, select(func.count(Student.id))),
        active_students=await _count(
            db, select(func.count(Student.id)).where(Student.status == StudentStatus.ACTIVE.value)
        ),
        monthly_expenses=await _sum(db, Expense.amount, Expense.date >= month_start, Expense.date <= month_end),
        monthly_fee_collection=await _sum(
            db,
            FeePayment.amount,
            FeePayment.payment_date >= month_start,
            FeePayment.payment_date <= month_end,
        ),
        total_inventory_items=await _count(db, select(func.count(InventoryItem.id))),
        low_stock_items=await _count(
            db,
            select(func.count(InventoryItem.id)).where(InventoryItem.quantity < InventoryItem.min_quantity),
        ),
        pending_fee_total=sum(
            (row.due_amount for row in pending if row.student_id is not None), Decimal("0.00")
        ),
    )
