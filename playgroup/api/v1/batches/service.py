from typing import Dict, List, Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core import fee_linking
from playgroup.core.activity import log_activity
from playgroup.core.exceptions import IntegrityConflictError, ServiceError
from playgroup.core.models import AcademicYear, Batch, SchoolClass, Student
from playgroup.storage.base import Storage

from .schemas import BatchCreate, BatchResponse, BatchUpdate


async def _student_counts(db: AsyncSession, batch_ids: List[int]) -> Dict[int, int]:
    if not batch_ids:
        return {}
    result = await db.execute(
        select(Student.batch_id, func.count(Student.id))
        .where(Student.batch_id.in_(batch_ids))
        .group_by(Student.batch_id)
    )
    return {batch_id: count for batch_id, count in result.all()}


def _to_response(batch: Batch, student_count: int = 0) -> BatchResponse:
    response = BatchResponse.model_validate(batch)
    response.student_count = student_count
    return response


async def _resolve_academic_year(db: AsyncSession, school_class: SchoolClass, academic_year_id: Optional[int]) -> int:
    if academic_year_id is not None:
        if not await db.get(AcademicYear, academic_year_id):
            raise ServiceError("Invalid academic year", status.HTTP_400_BAD_REQUEST)
        return academic_year_id
    if school_class.academic_year_id is not None:
        return school_class.academic_year_id
    current = (
        await db.execute(select(AcademicYear.id).where(AcademicYear.is_current.is_(True)))
    ).scalar_one_or_none()
    if current is None:
        raise ServiceError(
            "academicYearId is required when no academic year is current",
            status.HTTP_400_BAD_REQUEST,
        )
    return current


async def create_batch(db: AsyncSession, payload: BatchCreate) -> BatchResponse:
    school_class = await db.get(SchoolClass, payload.class_id)
    if not school_class:
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    academic_year_id = await _resolve_academic_year(db, school_class, payload.academic_year_id)
    batch = Batch(
        name=payload.name.strip(),
        class_id=payload.class_id,
        academic_year_id=academic_year_id,
        capacity=payload.capacity,
    )
    db.add(batch)
    await db.flush()
    log_activity(db, "batch", "create", {"batchId": batch.id, "name": batch.name})
    await db.commit()
    await db.refresh(batch)
    return _to_response(batch)


async def list_batches(
    db: AsyncSession,
    class_id: Optional[int] = None,
    academic_year_id: Optional[int] = None,
) -> List[BatchResponse]:
    stmt = select(Batch)
    if class_id is not None:
        stmt = stmt.where(Batch.class_id == class_id)
    if academic_year_id is not None:
        stmt = stmt.where(Batch.academic_year_id == academic_year_id)
    batches = list((await db.execute(stmt.order_by(Batch.name))).scalars().all())
    counts = await _student_counts(db, [b.id for b in batches])
    return [_to_response(b, counts.get(b.id, 0)) for b in batches]


async def get_batch(db: AsyncSession, batch_id: int) -> Optional[BatchResponse]:
    batch = await db.get(Batch, batch_id)
    if not batch:
        return None
    counts = await _student_counts(db, [batch.id])
    return _to_response(batch, counts.get(batch.id, 0))


async def update_batch(
    db: AsyncSession,
    storage: Storage,
    batch_id: int,
    payload: BatchUpdate,
) -> Optional[BatchResponse]:
    """Update a batch. Moving it to another class or year re-runs assignment for its students."""
    batch = await db.get(Batch, batch_id)
    if not batch:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("class_id") is not None and not await db.get(SchoolClass, data["class_id"]):
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    if data.get("academic_year_id") is not None and not await db.get(AcademicYear, data["academic_year_id"]):
        raise ServiceError("Invalid academic year", status.HTTP_400_BAD_REQUEST)

    old_pair = (batch.class_id, batch.academic_year_id)
    for key, value in data.items():
        if value is not None:
            setattr(batch, key, value)
    new_pair = (batch.class_id, batch.academic_year_id)
    log_activity(db, "batch", "update", {"batchId": batch_id, "name": batch.name})
    await db.commit()

    if new_pair != old_pair:
        members = await storage.get_students_by_batch(batch_id)
        member_ids = [s.id for s in members]
        if member_ids:
            await fee_linking.assign_students_to_batch(storage, batch_id, member_ids)
    return await get_batch(db, batch_id)


async def delete_batch(db: AsyncSession, batch_id: int) -> bool:
    batch = await db.get(Batch, batch_id)
    if not batch:
        return False
    assigned = await db.execute(select(Student.id).where(Student.batch_id == batch_id).limit(1))
    if assigned.scalar_one_or_none() is not None:
        raise IntegrityConflictError("Cannot delete batch: students are assigned to it")
    await db.delete(batch)
    log_activity(db, "batch", "delete", {"batchId": batch_id, "name": batch.name})
    await db.commit()
    return True
