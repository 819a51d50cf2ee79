import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core import fee_linking
from playgroup.core.activity import log_activity
from playgroup.core.exceptions import IntegrityConflictError, ServiceError
from playgroup.core.models import AcademicYear, FeePayment, FeeStructure, SchoolClass, Student
from playgroup.storage.base import Storage

from .schemas import (
    FeeStructureCloneRequest,
    FeeStructureCloneResponse,
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
    FeeStructureWithLinks,
)

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS = ("due_date", "description")


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _fs_to_response(fs: FeeStructure) -> FeeStructureResponse:
    return FeeStructureResponse(
        id=fs.id,
        name=fs.name,
        class_id=fs.class_id,
        academic_year_id=fs.academic_year_id,
        total_amount=_to_decimal(fs.total_amount).quantize(Decimal("0.01")),
        due_date=fs.due_date,
        description=fs.description,
        created_at=fs.created_at,
    )


async def _validate_pair(db: AsyncSession, class_id: Optional[int], academic_year_id: Optional[int]) -> None:
    if class_id is not None and not await db.get(SchoolClass, class_id):
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    if academic_year_id is not None and not await db.get(AcademicYear, academic_year_id):
        raise ServiceError("Invalid academic year", status.HTTP_400_BAD_REQUEST)


async def list_fee_structures(
    db: AsyncSession,
    class_id: Optional[int] = None,
    academic_year_id: Optional[int] = None,
) -> List[FeeStructureResponse]:
    stmt = select(FeeStructure)
    if class_id is not None:
        stmt = stmt.where(FeeStructure.class_id == class_id)
    if academic_year_id is not None:
        stmt = stmt.where(FeeStructure.academic_year_id == academic_year_id)
    stmt = stmt.order_by(FeeStructure.due_date.is_(None), FeeStructure.due_date, FeeStructure.id)
    result = await db.execute(stmt)
    return [_fs_to_response(fs) for fs in result.scalars().all()]


async def get_fee_structure(db: AsyncSession, fee_structure_id: int) -> Optional[FeeStructureResponse]:
    fs = await db.get(FeeStructure, fee_structure_id)
    return _fs_to_response(fs) if fs else None


async def create_fee_structure(
    db: AsyncSession,
    storage: Storage,
    payload: FeeStructureCreate,
) -> FeeStructureWithLinks:
    """Create a structure; students of batches in the same class and year are linked to it."""
    await _validate_pair(db, payload.class_id, payload.academic_year_id)
    data = payload.model_dump()
    data["name"] = payload.name.strip()
    fs, links = await fee_linking.create_fee_structure(storage, data)
    return FeeStructureWithLinks(fee_structure=_fs_to_response(fs), linked_students=links)


async def update_fee_structure(
    db: AsyncSession,
    storage: Storage,
    fee_structure_id: int,
    payload: FeeStructureUpdate,
    today: Optional[date] = None,
) -> FeeStructureWithLinks:
    data = payload.model_dump(exclude_unset=True)
    # due_date and description may be cleared; the other columns are NOT NULL
    data = {k: v for k, v in data.items() if v is not None or k in _NULLABLE_FIELDS}
    await _validate_pair(db, data.get("class_id"), data.get("academic_year_id"))
    fs, links = await fee_linking.update_fee_structure(storage, fee_structure_id, data, today=today)
    return FeeStructureWithLinks(fee_structure=_fs_to_response(fs), linked_students=links)


async def clone_fee_structures(
    db: AsyncSession,
    storage: Storage,
    payload: FeeStructureCloneRequest,
) -> FeeStructureCloneResponse:
    await _validate_pair(db, payload.target_class_id, payload.target_academic_year_id)
    created, links = await fee_linking.clone_fee_structures(
        storage,
        payload.source_academic_year_id,
        payload.source_class_id,
        payload.target_academic_year_id,
        payload.target_class_id,
    )
    logger.info(
        "Cloned %d fee structures from class %s/year %s to class %s/year %s",
        len(created),
        payload.source_class_id,
        payload.source_academic_year_id,
        payload.target_class_id,
        payload.target_academic_year_id,
    )
    return FeeStructureCloneResponse(
        created=[_fs_to_response(fs) for fs in created],
        linked_students=links,
    )


async def delete_fee_structure(db: AsyncSession, fee_structure_id: int) -> bool:
    """Blocked while payments reference the structure. Linked students are unlinked."""
    fs = await db.get(FeeStructure, fee_structure_id)
    if not fs:
        return False
    paid = await db.execute(
        select(FeePayment.id).where(FeePayment.fee_structure_id == fee_structure_id).limit(1)
    )
    if paid.scalar_one_or_none() is not None:
        raise IntegrityConflictError("Cannot delete fee structure: payments have been recorded against it")
    await db.execute(
        update(Student)
        .where(Student.fee_structure_id == fee_structure_id)
        .values(fee_structure_id=None)
    )
    await db.delete(fs)
    log_activity(db, "fee_structure", "delete", {"feeStructureId": fee_structure_id, "name": fs.name})
    await db.commit()
    return True
