from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.dependencies import get_current_user
from playgroup.auth.rbac import check_permission
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db

from .schemas import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate
from . import service

router = APIRouter(prefix="/api/v1/academic-years", tags=["academic-years"])


@router.get(
    "",
    response_model=List[AcademicYearResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_academic_years(db: AsyncSession = Depends(get_db)) -> List[AcademicYearResponse]:
    return await service.list_academic_years(db)


@router.get(
    "/current",
    response_model=AcademicYearResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_current_academic_year(db: AsyncSession = Depends(get_db)) -> AcademicYearResponse:
    """The year marked is_current; default for batches and fee structures."""
    ay = await service.get_current_academic_year(db)
    if not ay:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No current academic year")
    return ay


@router.post(
    "",
    response_model=AcademicYearResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("settings", "create"))],
)
async def create_academic_year(
    payload: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    try:
        return await service.create_academic_year(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{academic_year_id}",
    response_model=AcademicYearResponse,
    dependencies=[Depends(get_current_user)],
)
async def get_academic_year(academic_year_id: int, db: AsyncSession = Depends(get_db)) -> AcademicYearResponse:
    ay = await service.get_academic_year(db, academic_year_id)
    if not ay:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academic year not found")
    return ay


@router.patch(
    "/{academic_year_id}",
    response_model=AcademicYearResponse,
    dependencies=[Depends(check_permission("settings", "update"))],
)
async def update_academic_year(
    academic_year_id: int,
    payload: AcademicYearUpdate,
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    try:
        ay = await service.update_academic_year(db, academic_year_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not ay:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academic year not found")
    return ay


@router.delete(
    "/{academic_year_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("settings", "delete"))],
)
async def delete_academic_year(academic_year_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        deleted = await service.delete_academic_year(db, academic_year_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academic year not found")
