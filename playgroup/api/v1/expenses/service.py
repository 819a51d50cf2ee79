from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.activity import log_activity
from playgroup.core.models import Expense
from playgroup.core.pending_fees import to_money

from .schemas import ExpenseCategoryTotal, ExpenseCreate, ExpenseReport, ExpenseResponse, ExpenseUpdate


async def list_expenses(
    db: AsyncSession,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[ExpenseResponse]:
    stmt = select(Expense)
    if category:
        stmt = stmt.where(Expense.category == category)
    if start_date is not None:
        stmt = stmt.where(Expense.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Expense.date <= end_date)
    result = await db.execute(stmt.order_by(Expense.date.desc(), Expense.id.desc()))
    return [ExpenseResponse.model_validate(e) for e in result.scalars().all()]


async def get_expense(db: AsyncSession, expense_id: int) -> Optional[ExpenseResponse]:
    expense = await db.get(Expense, expense_id)
    return ExpenseResponse.model_validate(expense) if expense else None


async def create_expense(db: AsyncSession, payload: ExpenseCreate) -> ExpenseResponse:
    expense = Expense(
        description=payload.description.strip(),
        amount=payload.amount,
        category=payload.category.strip(),
        date=payload.date,
        notes=payload.notes,
    )
    db.add(expense)
    await db.flush()
    log_activity(
        db,
        "expense",
        "create",
        {"expenseId": expense.id, "description": expense.description, "amount": str(payload.amount)},
    )
    await db.commit()
    await db.refresh(expense)
    return ExpenseResponse.model_validate(expense)


async def update_expense(db: AsyncSession, expense_id: int, payload: ExpenseUpdate) -> Optional[ExpenseResponse]:
    expense = await db.get(Expense, expense_id)
    if not expense:
        return None
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None or key == "notes":
            setattr(expense, key, value)
    log_activity(db, "expense", "update", {"expenseId": expense_id, "description": expense.description})
    await db.commit()
    await db.refresh(expense)
    return ExpenseResponse.model_validate(expense)


async def delete_expense(db: AsyncSession, expense_id: int) -> bool:
    expense = await db.get(Expense, expense_id)
    if not expense:
        return False
    await db.delete(expense)
    log_activity(db, "expense", "delete", {"expenseId": expense_id, "description": expense.description})
    await db.commit()
    return True


async def get_expense_report(
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ExpenseReport:
    """Totals by category, largest first."""
    by_category: Dict[str, Decimal] = defaultdict(lambda: Decimal("0.00"))
    for expense in await list_expenses(db, start_date=start_date, end_date=end_date):
        by_category[expense.category] += to_money(expense.amount)
    categories = [
        ExpenseCategoryTotal(category=name, amount=amount)
        for name, amount in sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
    ]
    return ExpenseReport(
        start_date=start_date,
        end_date=end_date,
        categories=categories,
        total=sum((c.amount for c in categories), Decimal("0.00")),
    )
