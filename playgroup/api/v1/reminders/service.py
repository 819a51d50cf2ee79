from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.activity import log_activity
from playgroup.core.enums import ReminderStatus
from playgroup.core.exceptions import NotFoundError
from playgroup.core.models import FeeStructure, Reminder, Student

from .schemas import ReminderCreate, ReminderResponse, ReminderUpdate


async def list_reminders(
    db: AsyncSession,
    student_id: Optional[int] = None,
    status_filter: Optional[str] = None,
) -> List[ReminderResponse]:
    stmt = select(Reminder)
    if student_id is not None:
        stmt = stmt.where(Reminder.student_id == student_id)
    if status_filter:
        stmt = stmt.where(Reminder.status == status_filter)
    result = await db.execute(stmt.order_by(Reminder.created_at.desc(), Reminder.id.desc()))
    return [ReminderResponse.model_validate(r) for r in result.scalars().all()]


async def create_reminder(db: AsyncSession, payload: ReminderCreate) -> ReminderResponse:
    if not await db.get(Student, payload.student_id):
        raise NotFoundError("Student not found")
    if not await db.get(FeeStructure, payload.fee_structure_id):
        raise NotFoundError("Fee structure not found")
    reminder = Reminder(
        student_id=payload.student_id,
        fee_structure_id=payload.fee_structure_id,
        message=payload.message.strip(),
        status=ReminderStatus.PENDING.value,
    )
    db.add(reminder)
    await db.flush()
    log_activity(
        db,
        "reminder",
        "create",
        {"reminderId": reminder.id, "studentId": reminder.student_id, "feeStructureId": reminder.fee_structure_id},
    )
    await db.commit()
    await db.refresh(reminder)
    return ReminderResponse.model_validate(reminder)


async def update_reminder(db: AsyncSession, reminder_id: int, payload: ReminderUpdate) -> Optional[ReminderResponse]:
    reminder = await db.get(Reminder, reminder_id)
    if not reminder:
        return None
    if payload.message is not None:
        reminder.message = payload.message.strip()
    if payload.status is not None:
        reminder.status = payload.status.value
        if payload.status == ReminderStatus.SENT and reminder.sent_date is None:
            reminder.sent_date = datetime.now(timezone.utc)
    log_activity(db, "reminder", "update", {"reminderId": reminder_id})
    await db.commit()
    await db.refresh(reminder)
    return ReminderResponse.model_validate(reminder)


async def mark_reminder_sent(db: AsyncSession, reminder_id: int) -> Optional[ReminderResponse]:
    """Record that the reminder went out. Delivery itself happens elsewhere."""
    return await update_reminder(db, reminder_id, ReminderUpdate(status=ReminderStatus.SENT))


async def delete_reminder(db: AsyncSession, reminder_id: int) -> bool:
    reminder = await db.get(Reminder, reminder_id)
    if not reminder:
        return False
    await db.delete(reminder)
    log_activity(db, "reminder", "delete", {"reminderId": reminder_id})
    await db.commit()
    return True
