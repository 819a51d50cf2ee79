"""Students service: CRUD with parent scoping; batch changes go through fee linking."""

from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import parent_can_access_student
from playgroup.auth.schemas import CurrentUser
from playgroup.core import fee_linking
from playgroup.core.activity import log_activity
from playgroup.core.exceptions import IntegrityConflictError, NotFoundError, ServiceError
from playgroup.core.models import Batch, FeePayment, FeeStructure, SchoolClass, Student
from playgroup.storage.base import Storage

from .schemas import StudentCreate, StudentResponse, StudentUpdate


async def _validate_refs(
    db: AsyncSession,
    class_id: Optional[int],
    batch_id: Optional[int],
    fee_structure_id: Optional[int],
) -> None:
    if class_id is not None and not await db.get(SchoolClass, class_id):
        raise ServiceError("Invalid class", status.HTTP_400_BAD_REQUEST)
    if batch_id is not None and not await db.get(Batch, batch_id):
        raise ServiceError("Invalid batch", status.HTTP_400_BAD_REQUEST)
    if fee_structure_id is not None and not await db.get(FeeStructure, fee_structure_id):
        raise ServiceError("Invalid fee structure", status.HTTP_400_BAD_REQUEST)


async def list_students(
    db: AsyncSession,
    current_user: CurrentUser,
    class_id: Optional[int] = None,
    batch_id: Optional[int] = None,
    status_filter: Optional[str] = None,
) -> List[StudentResponse]:
    stmt = select(Student)
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    if batch_id is not None:
        stmt = stmt.where(Student.batch_id == batch_id)
    if status_filter:
        stmt = stmt.where(Student.status == status_filter)
    result = await db.execute(stmt.order_by(Student.id.desc()))
    return [
        StudentResponse.model_validate(s)
        for s in result.scalars().all()
        if parent_can_access_student(current_user, s)
    ]


async def get_student(db: AsyncSession, current_user: CurrentUser, student_id: int) -> StudentResponse:
    student = await db.get(Student, student_id)
    # Parents get 404 rather than 403 so ids of other children are not disclosed
    if not student or not parent_can_access_student(current_user, student):
        raise NotFoundError("Student not found")
    return StudentResponse.model_validate(student)


async def create_student(db: AsyncSession, storage: Storage, payload: StudentCreate) -> StudentResponse:
    await _validate_refs(db, payload.class_id, payload.batch_id, payload.fee_structure_id)
    data = payload.model_dump(exclude={"batch_id"})
    data["status"] = payload.status.value
    data["email"] = str(payload.email) if payload.email else None
    student = Student(**data)
    db.add(student)
    await db.flush()
    student_id = student.id
    log_activity(db, "student", "create", {"studentId": student_id, "name": student.full_name})
    await db.commit()

    if payload.batch_id is not None:
        await fee_linking.assign_students_to_batch(storage, payload.batch_id, [student_id])
    student = await db.get(Student, student_id)
    await db.refresh(student)
    return StudentResponse.model_validate(student)


async def update_student(
    db: AsyncSession,
    storage: Storage,
    student_id: int,
    payload: StudentUpdate,
) -> StudentResponse:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    data = payload.model_dump(exclude_unset=True)
    await _validate_refs(db, data.get("class_id"), data.get("batch_id"), data.get("fee_structure_id"))

    old_batch_id = student.batch_id
    new_batch_id = data.pop("batch_id", old_batch_id)
    if "status" in data and data["status"] is not None:
        data["status"] = data["status"].value
    if "email" in data and data["email"] is not None:
        data["email"] = str(data["email"])
    for key, value in data.items():
        setattr(student, key, value)
    log_activity(db, "student", "update", {"studentId": student_id, "name": student.full_name})
    await db.commit()

    if new_batch_id != old_batch_id:
        if old_batch_id is not None:
            await fee_linking.remove_student_from_batch(storage, old_batch_id, student_id)
        if new_batch_id is not None:
            await fee_linking.assign_students_to_batch(storage, new_batch_id, [student_id])

    student = await db.get(Student, student_id)
    await db.refresh(student)
    return StudentResponse.model_validate(student)


async def delete_student(db: AsyncSession, student_id: int) -> bool:
    """Students with recorded payments are kept; set them inactive instead."""
    student = await db.get(Student, student_id)
    if not student:
        return False
    paid = await db.execute(select(FeePayment.id).where(FeePayment.student_id == student_id).limit(1))
    if paid.scalar_one_or_none() is not None:
        raise IntegrityConflictError(
            "Cannot delete student: fee payments are recorded. Mark the student inactive instead"
        )
    await db.delete(student)
    log_activity(db, "student", "delete", {"studentId": student_id, "name": student.full_name})
    await db.commit()
    return True
