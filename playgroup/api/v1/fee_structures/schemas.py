"""Fee structure schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from playgroup.core.schemas import CamelModel, LinkOutcome


class FeeStructureCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    class_id: int
    academic_year_id: int
    total_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[date] = None
    description: Optional[str] = None


class FeeStructureUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    class_id: Optional[int] = None
    academic_year_id: Optional[int] = None
    total_amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[date] = None
    description: Optional[str] = None


class FeeStructureResponse(CamelModel):
    id: int
    name: str
    class_id: int
    academic_year_id: int
    total_amount: Decimal
    due_date: Optional[date] = None
    description: Optional[str] = None
    created_at: datetime


class FeeStructureWithLinks(CamelModel):
    """A created or updated structure plus the students it was linked to."""

    fee_structure: FeeStructureResponse
    linked_students: List[LinkOutcome]


# --- Clone ---
class FeeStructureCloneRequest(CamelModel):
    source_academic_year_id: int
    source_class_id: int
    target_academic_year_id: int
    target_class_id: int


class FeeStructureCloneResponse(CamelModel):
    created: List[FeeStructureResponse]
    linked_students: List[LinkOutcome]
