from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.db.session import get_db
from playgroup.storage import Storage, get_storage

from .schemas import DashboardStats
from . import service

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> DashboardStats:
    return await service.get_dashboard_stats(db, storage)
