from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.api.v1.users import service as users_service
from playgroup.api.v1.users.schemas import ParentAccountCreate, UserResponse
from playgroup.auth.dependencies import get_current_user
from playgroup.auth.rbac import check_permission
from playgroup.auth.schemas import CurrentUser
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db
from playgroup.storage import Storage, get_storage

from .schemas import StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get(
    "",
    response_model=List[StudentResponse],
    dependencies=[Depends(check_permission("students", "read"))],
)
async def list_students(
    class_id: Optional[int] = Query(None, alias="classId"),
    batch_id: Optional[int] = Query(None, alias="batchId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[StudentResponse]:
    return await service.list_students(
        db,
        current_user,
        class_id=class_id,
        batch_id=batch_id,
        status_filter=status_filter,
    )


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("students", "create"))],
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> StudentResponse:
    try:
        return await service.create_student(db, storage, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(check_permission("students", "read"))],
)
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentResponse:
    try:
        return await service.get_student(db, current_user, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(check_permission("students", "update"))],
)
async def update_student(
    student_id: int,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> StudentResponse:
    try:
        return await service.update_student(db, storage, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("students", "delete"))],
)
async def delete_student(student_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        deleted = await service.delete_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")


@router.post(
    "/{student_id}/parent-account",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("user_management", "create"))],
)
async def create_parent_account(
    student_id: int,
    payload: ParentAccountCreate,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    try:
        return await users_service.create_parent_account(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
