from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.db.session import get_db

from .schemas import ExpenseCreate, ExpenseReport, ExpenseResponse, ExpenseUpdate
from . import service

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])


@router.get(
    "",
    response_model=List[ExpenseResponse],
    dependencies=[Depends(check_permission("expenses", "read"))],
)
async def list_expenses(
    category: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
) -> List[ExpenseResponse]:
    return await service.list_expenses(db, category=category, start_date=start_date, end_date=end_date)


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("expenses", "create"))],
)
async def create_expense(payload: ExpenseCreate, db: AsyncSession = Depends(get_db)) -> ExpenseResponse:
    return await service.create_expense(db, payload)


@router.get(
    "/report",
    response_model=ExpenseReport,
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def get_expense_report(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
) -> ExpenseReport:
    return await service.get_expense_report(db, start_date=start_date, end_date=end_date)


@router.get(
    "/{expense_id}",
    response_model=ExpenseResponse,
    dependencies=[Depends(check_permission("expenses", "read"))],
)
async def get_expense(expense_id: int, db: AsyncSession = Depends(get_db)) -> ExpenseResponse:
    expense = await service.get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


@router.patch(
    "/{expense_id}",
    response_model=ExpenseResponse,
    dependencies=[Depends(check_permission("expenses", "update"))],
)
async def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
) -> ExpenseResponse:
    expense = await service.update_expense(db, expense_id, payload)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("expenses", "delete"))],
)
async def delete_expense(expense_id: int, db: AsyncSession = Depends(get_db)) -> None:
    deleted = await service.delete_expense(db, expense_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
