from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db

from .schemas import ReminderCreate, ReminderResponse, ReminderUpdate
from . import service

router = APIRouter(prefix="/api/v1/reminders", tags=["reminders"])


@router.get(
    "",
    response_model=List[ReminderResponse],
    dependencies=[Depends(check_permission("fee_management", "read"))],
)
async def list_reminders(
    student_id: Optional[int] = Query(None, alias="studentId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> List[ReminderResponse]:
    return await service.list_reminders(db, student_id=student_id, status_filter=status_filter)


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fee_management", "create"))],
)
async def create_reminder(payload: ReminderCreate, db: AsyncSession = Depends(get_db)) -> ReminderResponse:
    try:
        return await service.create_reminder(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{reminder_id}",
    response_model=ReminderResponse,
    dependencies=[Depends(check_permission("fee_management", "update"))],
)
async def update_reminder(
    reminder_id: int,
    payload: ReminderUpdate,
    db: AsyncSession = Depends(get_db),
) -> ReminderResponse:
    reminder = await service.update_reminder(db, reminder_id, payload)
    if not reminder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return reminder


@router.post(
    "/{reminder_id}/mark-sent",
    response_model=ReminderResponse,
    dependencies=[Depends(check_permission("fee_management", "update"))],
)
async def mark_reminder_sent(reminder_id: int, db: AsyncSession = Depends(get_db)) -> ReminderResponse:
    reminder = await service.mark_reminder_sent(db, reminder_id)
    if not reminder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return reminder


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("fee_management", "delete"))],
)
async def delete_reminder(reminder_id: int, db: AsyncSession = Depends(get_db)) -> None:
    deleted = await service.delete_reminder(db, reminder_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
