import datetime
from decimal import Decimal
from typing import Optional

from playgroup.core.enums import AttendanceStatus
from playgroup.core.schemas import CamelModel


class AttendanceCreate(CamelModel):
    student_id: int
    # Defaults to the student's class
    class_id: Optional[int] = None
    date: datetime.date
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceUpdate(CamelModel):
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceResponse(CamelModel):
    id: int
    student_id: int
    class_id: Optional[int] = None
    date: datetime.date
    status: str
    notes: Optional[str] = None


class StudentAttendanceSummary(CamelModel):
    student_id: int
    student_name: str
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: Decimal
