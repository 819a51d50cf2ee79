from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.api.v1.students.schemas import StudentResponse
from playgroup.auth.rbac import check_permission
from playgroup.core import fee_linking
from playgroup.core.exceptions import ServiceError
from playgroup.core.schemas import BatchAssignmentResult
from playgroup.db.session import get_db
from playgroup.storage import Storage, get_storage

from .schemas import BatchCreate, BatchResponse, BatchStudentsRequest, BatchUpdate
from . import service

router = APIRouter(prefix="/api/v1/batches", tags=["batches"])


@router.post(
    "",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("classes", "create"))],
)
async def create_batch(payload: BatchCreate, db: AsyncSession = Depends(get_db)) -> BatchResponse:
    try:
        return await service.create_batch(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[BatchResponse],
    dependencies=[Depends(check_permission("classes", "read"))],
)
async def list_batches(
    class_id: Optional[int] = Query(None, alias="classId"),
    academic_year_id: Optional[int] = Query(None, alias="academicYearId"),
    db: AsyncSession = Depends(get_db),
) -> List[BatchResponse]:
    return await service.list_batches(db, class_id=class_id, academic_year_id=academic_year_id)


@router.get(
    "/{batch_id}",
    response_model=BatchResponse,
    dependencies=[Depends(check_permission("classes", "read"))],
)
async def get_batch(batch_id: int, db: AsyncSession = Depends(get_db)) -> BatchResponse:
    batch = await service.get_batch(db, batch_id)
    if not batch:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")
    return batch


@router.patch(
    "/{batch_id}",
    response_model=BatchResponse,
    dependencies=[Depends(check_permission("classes", "update"))],
)
async def update_batch(
    batch_id: int,
    payload: BatchUpdate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> BatchResponse:
    try:
        batch = await service.update_batch(db, storage, batch_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not batch:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")
    return batch


@router.delete(
    "/{batch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("classes", "delete"))],
)
async def delete_batch(batch_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        deleted = await service.delete_batch(db, batch_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")


# ----- Batch membership -----
@router.get(
    "/{batch_id}/students",
    response_model=List[StudentResponse],
    dependencies=[Depends(check_permission("students", "read"))],
)
async def list_batch_students(
    batch_id: int,
    storage: Storage = Depends(get_storage),
) -> List[StudentResponse]:
    if await storage.get_batch(batch_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")
    return [StudentResponse.model_validate(s) for s in await storage.get_students_by_batch(batch_id)]


@router.post(
    "/{batch_id}/students",
    response_model=BatchAssignmentResult,
    dependencies=[Depends(check_permission("students", "update"))],
)
async def assign_students(
    batch_id: int,
    payload: BatchStudentsRequest,
    storage: Storage = Depends(get_storage),
) -> BatchAssignmentResult:
    try:
        return await fee_linking.assign_students_to_batch(storage, batch_id, payload.student_ids)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{batch_id}/students/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(check_permission("students", "update"))],
)
async def remove_student(
    batch_id: int,
    student_id: int,
    storage: Storage = Depends(get_storage),
) -> StudentResponse:
    try:
        student = await fee_linking.remove_student_from_batch(storage, batch_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return StudentResponse.model_validate(student)
