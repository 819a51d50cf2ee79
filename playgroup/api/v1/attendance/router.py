from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.dependencies import get_current_user
from playgroup.auth.rbac import check_permission
from playgroup.auth.schemas import CurrentUser
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db

from .schemas import AttendanceCreate, AttendanceResponse, AttendanceUpdate, StudentAttendanceSummary
from . import service

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.get(
    "",
    response_model=List[AttendanceResponse],
    dependencies=[Depends(check_permission("attendance", "read"))],
)
async def list_attendance(
    class_id: Optional[int] = Query(None, alias="classId"),
    on_date: Optional[date] = Query(None, alias="date"),
    student_id: Optional[int] = Query(None, alias="studentId"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[AttendanceResponse]:
    return await service.list_attendance(
        db, current_user, class_id=class_id, on_date=on_date, student_id=student_id
    )


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("attendance", "create"))],
)
async def mark_attendance(payload: AttendanceCreate, db: AsyncSession = Depends(get_db)) -> AttendanceResponse:
    try:
        return await service.mark_attendance(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/report",
    response_model=List[StudentAttendanceSummary],
    dependencies=[Depends(check_permission("attendance", "read"))],
)
async def get_attendance_report(
    class_id: Optional[int] = Query(None, alias="classId"),
    student_id: Optional[int] = Query(None, alias="studentId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[StudentAttendanceSummary]:
    try:
        return await service.get_attendance_report(
            db,
            current_user,
            class_id=class_id,
            student_id=student_id,
            start_date=start_date,
            end_date=end_date,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{attendance_id}",
    response_model=AttendanceResponse,
    dependencies=[Depends(check_permission("attendance", "update"))],
)
async def update_attendance(
    attendance_id: int,
    payload: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    record = await service.update_attendance(db, attendance_id, payload)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return record
