from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.core import pending_fees
from playgroup.core.enums import LinkOutcomeStatus
from playgroup.core.exceptions import ServiceError
from playgroup.core.schemas import PendingFeeRow
from playgroup.db.session import get_db
from playgroup.storage import Storage, get_storage

from .schemas import DailyCollectionReport, MonthlyCollectionReport, ReconcileResponse
from . import service

router = APIRouter(prefix="/api/v1/fee-reports", tags=["fee-reports"])


@router.get(
    "/pending",
    response_model=List[PendingFeeRow],
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def get_pending_fees(
    class_id: Optional[int] = Query(None, alias="classId"),
    storage: Storage = Depends(get_storage),
) -> List[PendingFeeRow]:
    return await pending_fees.get_pending_fees(storage, class_id=class_id)


@router.post(
    "/reconcile",
    response_model=ReconcileResponse,
    dependencies=[Depends(check_permission("fee_management", "update"))],
)
async def reconcile_fee_assignments(
    class_id: Optional[int] = Query(None, alias="classId"),
    storage: Storage = Depends(get_storage),
) -> ReconcileResponse:
    results = await pending_fees.reconcile_fee_assignments(storage, class_id=class_id)
    linked = sum(1 for r in results if r.outcome == LinkOutcomeStatus.SUCCESS)
    return ReconcileResponse(linked=linked, failed=len(results) - linked, results=results)


@router.get(
    "/daily",
    response_model=DailyCollectionReport,
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def get_daily_collection(
    day: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
) -> DailyCollectionReport:
    return await service.get_daily_collection(db, day or date.today())


@router.get(
    "/monthly",
    response_model=MonthlyCollectionReport,
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def get_monthly_collection(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> MonthlyCollectionReport:
    today = date.today()
    try:
        return await service.get_monthly_collection(db, year or today.year, month or today.month)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
