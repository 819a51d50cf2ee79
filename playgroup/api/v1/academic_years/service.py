from datetime import date
from typing import List, Optional

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.activity import log_activity
from playgroup.core.exceptions import IntegrityConflictError, ServiceError
from playgroup.core.models import AcademicYear, Batch, FeeStructure, SchoolClass

from .schemas import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate


def _validate_dates(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise ServiceError("endDate must be after startDate", status.HTTP_400_BAD_REQUEST)


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(AcademicYear.id).where(AcademicYear.name == name)
    if exclude_id is not None:
        stmt = stmt.where(AcademicYear.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ServiceError(f"Academic year '{name}' already exists", status.HTTP_409_CONFLICT)


async def _unset_current(db: AsyncSession) -> None:
    await db.execute(update(AcademicYear).values(is_current=False))


async def create_academic_year(db: AsyncSession, payload: AcademicYearCreate) -> AcademicYearResponse:
    """Create academic year. If is_current=true, unset current on all other years."""
    _validate_dates(payload.start_date, payload.end_date)
    name = payload.name.strip()
    await _ensure_unique_name(db, name)
    if payload.is_current:
        await _unset_current(db)
    ay = AcademicYear(
        name=name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_current=payload.is_current,
    )
    db.add(ay)
    await db.flush()
    log_activity(db, "academic_year", "create", {"academicYearId": ay.id, "name": ay.name})
    await db.commit()
    await db.refresh(ay)
    return AcademicYearResponse.model_validate(ay)


async def list_academic_years(db: AsyncSession) -> List[AcademicYearResponse]:
    result = await db.execute(select(AcademicYear).order_by(AcademicYear.start_date.desc()))
    return [AcademicYearResponse.model_validate(ay) for ay in result.scalars().all()]


async def get_academic_year(db: AsyncSession, academic_year_id: int) -> Optional[AcademicYearResponse]:
    ay = await db.get(AcademicYear, academic_year_id)
    return AcademicYearResponse.model_validate(ay) if ay else None


async def get_current_academic_year(db: AsyncSession) -> Optional[AcademicYearResponse]:
    result = await db.execute(select(AcademicYear).where(AcademicYear.is_current.is_(True)))
    ay = result.scalars().first()
    return AcademicYearResponse.model_validate(ay) if ay else None


async def update_academic_year(
    db: AsyncSession,
    academic_year_id: int,
    payload: AcademicYearUpdate,
) -> Optional[AcademicYearResponse]:
    ay = await db.get(AcademicYear, academic_year_id)
    if not ay:
        return None
    start_date = payload.start_date or ay.start_date
    end_date = payload.end_date or ay.end_date
    _validate_dates(start_date, end_date)
    if payload.name is not None:
        name = payload.name.strip()
        await _ensure_unique_name(db, name, exclude_id=ay.id)
        ay.name = name
    ay.start_date = start_date
    ay.end_date = end_date
    if payload.is_current is not None:
        if payload.is_current:
            await _unset_current(db)
        ay.is_current = payload.is_current
    log_activity(db, "academic_year", "update", {"academicYearId": ay.id, "name": ay.name})
    await db.commit()
    await db.refresh(ay)
    return AcademicYearResponse.model_validate(ay)


async def delete_academic_year(db: AsyncSession, academic_year_id: int) -> bool:
    """Delete blocked while any class, fee structure or batch references the year."""
    ay = await db.get(AcademicYear, academic_year_id)
    if not ay:
        return False
    for model, label in ((SchoolClass, "classes"), (FeeStructure, "fee structures"), (Batch, "batches")):
        used = await db.execute(select(model.id).where(model.academic_year_id == academic_year_id).limit(1))
        if used.scalar_one_or_none() is not None:
            raise IntegrityConflictError(f"Cannot delete academic year: it is used by {label}")
    await db.delete(ay)
    log_activity(db, "academic_year", "delete", {"academicYearId": academic_year_id, "name": ay.name})
    await db.commit()
    return True
