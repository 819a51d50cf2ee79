from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.activity import log_activity
from playgroup.core.exceptions import IntegrityConflictError, ServiceError
from playgroup.core.models import AcademicYear, FeeStructure, SchoolClass, Student

from .schemas import ClassCreate, ClassResponse, ClassUpdate


async def _validate_academic_year(db: AsyncSession, academic_year_id: Optional[int]) -> None:
    if academic_year_id is not None and not await db.get(AcademicYear, academic_year_id):
        raise ServiceError("Invalid academic year", status.HTTP_400_BAD_REQUEST)


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    await _validate_academic_year(db, payload.academic_year_id)
    obj = SchoolClass(
        name=payload.name.strip(),
        academic_year_id=payload.academic_year_id,
        capacity=payload.capacity,
        description=payload.description,
    )
    db.add(obj)
    await db.flush()
    log_activity(db, "class", "create", {"classId": obj.id, "name": obj.name})
    await db.commit()
    await db.refresh(obj)
    return ClassResponse.model_validate(obj)


async def list_classes(db: AsyncSession, academic_year_id: Optional[int] = None) -> List[ClassResponse]:
    stmt = select(SchoolClass)
    if academic_year_id is not None:
        stmt = stmt.where(SchoolClass.academic_year_id == academic_year_id)
    result = await db.execute(stmt.order_by(SchoolClass.name))
    return [ClassResponse.model_validate(c) for c in result.scalars().all()]


async def get_class(db: AsyncSession, class_id: int) -> Optional[ClassResponse]:
    obj = await db.get(SchoolClass, class_id)
    return ClassResponse.model_validate(obj) if obj else None


async def update_class(db: AsyncSession, class_id: int, payload: ClassUpdate) -> Optional[ClassResponse]:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    if "academic_year_id" in data:
        await _validate_academic_year(db, data["academic_year_id"])
    if data.get("name") is not None:
        data["name"] = data["name"].strip()
    for key, value in data.items():
        setattr(obj, key, value)
    log_activity(db, "class", "update", {"classId": obj.id, "name": obj.name})
    await db.commit()
    await db.refresh(obj)
    return ClassResponse.model_validate(obj)


async def delete_class(db: AsyncSession, class_id: int) -> bool:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        return False
    used = await db.execute(select(Student.id).where(Student.class_id == class_id).limit(1))
    if used.scalar_one_or_none() is not None:
        raise IntegrityConflictError("Cannot delete class: it is used by students")
    used = await db.execute(select(FeeStructure.id).where(FeeStructure.class_id == class_id).limit(1))
    if used.scalar_one_or_none() is not None:
        raise IntegrityConflictError("Cannot delete class: it is used by fee structures")
    await db.delete(obj)
    log_activity(db, "class", "delete", {"classId": class_id, "name": obj.name})
    await db.commit()
    return True
