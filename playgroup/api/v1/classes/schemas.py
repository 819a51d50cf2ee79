from datetime import datetime
from typing import Optional

from pydantic import Field

from playgroup.core.schemas import CamelModel


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    academic_year_id: Optional[int] = None
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


class ClassUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    academic_year_id: Optional[int] = None
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


class ClassResponse(CamelModel):
    id: int
    name: str
    academic_year_id: Optional[int] = None
    capacity: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime
