from collections import Counter, defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import parent_can_access_student
from playgroup.auth.schemas import CurrentUser
from playgroup.core.activity import log_activity
from playgroup.core.enums import AttendanceStatus
from playgroup.core.exceptions import NotFoundError, ServiceError
from playgroup.core.models import Attendance, Student

from .schemas import AttendanceCreate, AttendanceResponse, AttendanceUpdate, StudentAttendanceSummary


def attendance_percentage(present: int, late: int, total: int) -> Decimal:
    """Late counts as attended. 0 when there are no records."""
    if total == 0:
        return Decimal("0.00")
    pct = Decimal(present + late) * 100 / Decimal(total)
    return pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


async def list_attendance(
    db: AsyncSession,
    current_user: CurrentUser,
    class_id: Optional[int] = None,
    on_date: Optional[date] = None,
    student_id: Optional[int] = None,
) -> List[AttendanceResponse]:
    stmt = select(Attendance, Student).join(Student, Student.id == Attendance.student_id)
    if class_id is not None:
        stmt = stmt.where(Attendance.class_id == class_id)
    if on_date is not None:
        stmt = stmt.where(Attendance.date == on_date)
    if student_id is not None:
        stmt = stmt.where(Attendance.student_id == student_id)
    result = await db.execute(stmt.order_by(Attendance.date.desc(), Attendance.id))
    return [
        AttendanceResponse.model_validate(record)
        for record, student in result.all()
        if parent_can_access_student(current_user, student)
    ]


async def mark_attendance(db: AsyncSession, payload: AttendanceCreate) -> AttendanceResponse:
    if payload.date > date.today():
        raise ServiceError("Cannot mark attendance for future dates", status.HTTP_400_BAD_REQUEST)
    student = await db.get(Student, payload.student_id)
    if not student:
        raise NotFoundError("Student not found")
    existing = await db.execute(
        select(Attendance.id).where(
            Attendance.student_id == payload.student_id,
            Attendance.date == payload.date,
        )
    )
    if existing.first() is not None:
        raise ServiceError(
            f"Attendance already marked for student {payload.student_id} on {payload.date}",
            status.HTTP_409_CONFLICT,
        )
    record = Attendance(
        student_id=payload.student_id,
        class_id=payload.class_id if payload.class_id is not None else student.class_id,
        date=payload.date,
        status=payload.status.value,
        notes=payload.notes,
    )
    db.add(record)
    try:
        await db.flush()
        log_activity(
            db,
            "attendance",
            "create",
            {"attendanceId": record.id, "studentId": record.student_id, "status": record.status},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Duplicate attendance or invalid student", status.HTTP_409_CONFLICT)
    await db.refresh(record)
    return AttendanceResponse.model_validate(record)


async def update_attendance(
    db: AsyncSession,
    attendance_id: int,
    payload: AttendanceUpdate,
) -> Optional[AttendanceResponse]:
    record = await db.get(Attendance, attendance_id)
    if not record:
        return None
    if payload.status is not None:
        record.status = payload.status.value
    if "notes" in payload.model_fields_set:
        record.notes = payload.notes
    log_activity(db, "attendance", "update", {"attendanceId": attendance_id, "status": record.status})
    await db.commit()
    await db.refresh(record)
    return AttendanceResponse.model_validate(record)


async def get_attendance_report(
    db: AsyncSession,
    current_user: CurrentUser,
    class_id: Optional[int] = None,
    student_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[StudentAttendanceSummary]:
    """Per-student totals over the date range. Students without records report 0%."""
    if start_date and end_date and end_date < start_date:
        raise ServiceError("endDate must not be before startDate", status.HTTP_400_BAD_REQUEST)

    student_stmt = select(Student)
    if class_id is not None:
        student_stmt = student_stmt.where(Student.class_id == class_id)
    if student_id is not None:
        student_stmt = student_stmt.where(Student.id == student_id)
    students = [
        s
        for s in (await db.execute(student_stmt.order_by(Student.full_name))).scalars().all()
        if parent_can_access_student(current_user, s)
    ]
    if not students:
        return []

    stmt = select(Attendance.student_id, Attendance.status).where(
        Attendance.student_id.in_([s.id for s in students])
    )
    if start_date is not None:
        stmt = stmt.where(Attendance.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Attendance.date <= end_date)
    counts: Dict[int, Counter] = defaultdict(Counter)
    for sid, status_val in (await db.execute(stmt)).all():
        counts[sid][status_val] += 1

    report = []
    for student in students:
        c = counts.get(student.id, Counter())
        total = sum(c.values())
        present = c[AttendanceStatus.PRESENT.value]
        late = c[AttendanceStatus.LATE.value]
        report.append(
            StudentAttendanceSummary(
                student_id=student.id,
                student_name=student.full_name,
                total_days=total,
                present_days=present,
                absent_days=c[AttendanceStatus.ABSENT.value],
                late_days=late,
                excused_days=c[AttendanceStatus.EXCUSED.value],
                attendance_percentage=attendance_percentage(present, late, total),
            )
        )
    return report
