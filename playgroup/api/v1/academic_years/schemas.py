from datetime import date, datetime
from typing import Optional

from pydantic import Field

from playgroup.core.schemas import CamelModel


class AcademicYearCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50, description="e.g. 2024-2025")
    start_date: date
    end_date: date
    is_current: bool = False


class AcademicYearUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None


class AcademicYearResponse(CamelModel):
    id: int
    name: str
    start_date: date
    end_date: date
    is_current: bool
    created_at: datetime
