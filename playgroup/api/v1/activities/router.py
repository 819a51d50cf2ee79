from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.db.session import get_db

from .schemas import ActivityResponse
from . import service

router = APIRouter(prefix="/api/v1/activities", tags=["activities"])


@router.get(
    "",
    response_model=List[ActivityResponse],
    dependencies=[Depends(check_permission("reports", "read"))],
)
async def list_activities(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    type_filter: Optional[str] = Query(None, alias="type"),
    db: AsyncSession = Depends(get_db),
) -> List[ActivityResponse]:
    return await service.list_activities(db, limit=limit, type_filter=type_filter)
