from datetime import datetime
from typing import Optional

from pydantic import Field

from playgroup.core.enums import ReminderStatus
from playgroup.core.schemas import CamelModel


class ReminderCreate(CamelModel):
    student_id: int
    fee_structure_id: int
    message: str = Field(..., min_length=1)


class ReminderUpdate(CamelModel):
    message: Optional[str] = Field(None, min_length=1)
    status: Optional[ReminderStatus] = None


class ReminderResponse(CamelModel):
    id: int
    student_id: int
    fee_structure_id: int
    message: str
    status: str
    sent_date: Optional[datetime] = None
    created_at: datetime
