from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from playgroup.core.enums import LinkOutcomeStatus, PendingFeeStatus


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


# --- Fee linking ---
class LinkOutcome(CamelModel):
    """Result of linking (or failing to link) one student."""

    student_id: int
    outcome: LinkOutcomeStatus
    fee_structure_id: Optional[int] = None
    error: Optional[str] = None


class BatchAssignmentResult(CamelModel):
    batch_id: int
    class_id: int
    academic_year_id: int
    fee_structure_id: Optional[int] = None
    results: List[LinkOutcome]


# --- Pending fee report ---
class PendingFeeRow(CamelModel):
    """One unpaid balance for a student + fee structure, or an unassigned placeholder."""

    student_id: Optional[int] = None
    student_name: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    fee_structure_id: int
    fee_structure_name: str
    academic_year_id: int
    total_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    due_date: Optional[date] = None
    status: PendingFeeStatus
