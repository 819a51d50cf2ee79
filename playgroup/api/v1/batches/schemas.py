from datetime import datetime
from typing import List, Optional

from pydantic import Field

from playgroup.core.models.batch import DEFAULT_BATCH_CAPACITY
from playgroup.core.schemas import CamelModel


class BatchCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    class_id: int
    # Falls back to the class's academic year, then the current one
    academic_year_id: Optional[int] = None
    capacity: int = Field(DEFAULT_BATCH_CAPACITY, ge=1)


class BatchUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    class_id: Optional[int] = None
    academic_year_id: Optional[int] = None
    capacity: Optional[int] = Field(None, ge=1)


class BatchResponse(CamelModel):
    id: int
    name: str
    class_id: int
    academic_year_id: int
    capacity: int
    created_at: datetime
    student_count: int = 0


class BatchStudentsRequest(CamelModel):
    student_ids: List[int] = Field(..., min_length=1)
