from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db
from playgroup.storage import Storage, get_storage

from .schemas import (
    FeeStructureCloneRequest,
    FeeStructureCloneResponse,
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
    FeeStructureWithLinks,
)
from . import service

router = APIRouter(prefix="/api/v1/fee-structures", tags=["fee-structures"])


@router.get(
    "",
    response_model=List[FeeStructureResponse],
    dependencies=[Depends(check_permission("fee_management", "read"))],
)
async def list_fee_structures(
    class_id: Optional[int] = Query(None, alias="classId"),
    academic_year_id: Optional[int] = Query(None, alias="academicYearId"),
    db: AsyncSession = Depends(get_db),
) -> List[FeeStructureResponse]:
    return await service.list_fee_structures(db, class_id=class_id, academic_year_id=academic_year_id)


@router.post(
    "",
    response_model=FeeStructureWithLinks,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fee_management", "create"))],
)
async def create_fee_structure(
    payload: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> FeeStructureWithLinks:
    try:
        return await service.create_fee_structure(db, storage, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/clone",
    response_model=FeeStructureCloneResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fee_management", "create"))],
)
async def clone_fee_structures(
    payload: FeeStructureCloneRequest,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> FeeStructureCloneResponse:
    try:
        return await service.clone_fee_structures(db, storage, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{fee_structure_id}",
    response_model=FeeStructureResponse,
    dependencies=[Depends(check_permission("fee_management", "read"))],
)
async def get_fee_structure(fee_structure_id: int, db: AsyncSession = Depends(get_db)) -> FeeStructureResponse:
    fs = await service.get_fee_structure(db, fee_structure_id)
    if not fs:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee structure not found")
    return fs


@router.patch(
    "/{fee_structure_id}",
    response_model=FeeStructureWithLinks,
    dependencies=[Depends(check_permission("fee_management", "update"))],
)
async def update_fee_structure(
    fee_structure_id: int,
    payload: FeeStructureUpdate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
) -> FeeStructureWithLinks:
    try:
        return await service.update_fee_structure(db, storage, fee_structure_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{fee_structure_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("fee_management", "delete"))],
)
async def delete_fee_structure(fee_structure_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        deleted = await service.delete_fee_structure(db, fee_structure_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee structure not found")
