"""
Fee structure auto-linking.

Keeps each student's fee_structure_id consistent with their batch's class and
academic year. Triggered by batch assignment and by fee structure
create/update/clone. Linking loops are best effort: a failure on one student is
logged and reported in the outcome list, never raised to the caller.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastapi import status

from playgroup.core.enums import LinkOutcomeStatus
from playgroup.core.exceptions import NotFoundError, ServiceError
from playgroup.core.models import Batch, FeeStructure
from playgroup.core.schemas import BatchAssignmentResult, LinkOutcome
from playgroup.storage.base import Storage

logger = logging.getLogger(__name__)

OP_BATCH_ASSIGNMENT = "batch-assignment"
OP_CREATE = "auto-link-on-creation"
OP_UPDATE = "auto-link-on-update"
OP_CLONE = "auto-link-on-clone"
OP_RECONCILE = "reconcile"


def _newest_first(fs: FeeStructure):
    return (fs.created_at or datetime.min, fs.id or 0)


def select_fee_structure(candidates: Iterable[FeeStructure]) -> Optional[FeeStructure]:
    """
    Pick the structure to link when several target the same class and year:
    furthest-future due date first, null due dates last, ties by newest created_at.
    """
    candidates = list(candidates)
    dated = [fs for fs in candidates if fs.due_date is not None]
    if dated:
        return max(dated, key=lambda fs: (fs.due_date, *_newest_first(fs)))
    if candidates:
        return max(candidates, key=_newest_first)
    return None


def matches_pair(obj, class_id: Optional[int], academic_year_id: Optional[int]) -> bool:
    return obj.class_id == class_id and obj.academic_year_id == academic_year_id


async def resolve_fee_structure_for_batch(storage: Storage, batch: Batch) -> Optional[FeeStructure]:
    structures = await storage.get_fee_structures()
    return select_fee_structure(
        fs for fs in structures if matches_pair(fs, batch.class_id, batch.academic_year_id)
    )


async def record_activity(storage: Storage, type: str, action: str, details: Dict[str, Any]) -> None:
    """Write to the audit sink. Failures are logged and never reach the caller."""
    try:
        await storage.create_activity(type, action, details)
    except Exception:
        logger.exception("Failed to record %s/%s activity: %s", type, action, details)


async def _record_link(storage: Storage, student_id: int, fee_structure_id: int, operation: str) -> None:
    await record_activity(
        storage,
        "fee",
        "assign",
        {
            "studentId": student_id,
            "feeStructureId": fee_structure_id,
            "operation": operation,
        },
    )


# --- Batch assignment ---
async def assign_students_to_batch(
    storage: Storage,
    batch_id: int,
    student_ids: Sequence[int],
) -> BatchAssignmentResult:
    """
    Put students into a batch, inherit the batch's class, and link the batch's fee structure.

    Each student is processed independently; there is no rollback when one fails.
    """
    batch = await storage.get_batch(batch_id)
    if batch is None:
        raise NotFoundError("Batch not found")

    class_id, academic_year_id = batch.class_id, batch.academic_year_id
    target = await resolve_fee_structure_for_batch(storage, batch)
    target_id = target.id if target is not None else None

    results: List[LinkOutcome] = []
    # dict.fromkeys drops repeated ids while keeping order
    for student_id in dict.fromkeys(student_ids):
        try:
            student = await storage.get_student(student_id)
            if student is None:
                results.append(
                    LinkOutcome(student_id=student_id, outcome=LinkOutcomeStatus.ERROR, error="Student not found")
                )
                continue

            changed_link = target_id is not None and student.fee_structure_id != target_id
            linked_id = target_id if target_id is not None else student.fee_structure_id
            updates: Dict[str, Any] = {"batch_id": batch_id, "class_id": class_id}
            if target_id is not None:
                updates["fee_structure_id"] = target_id
            student = await storage.update_student(student_id, updates)
            if student is None:
                raise ServiceError("Student disappeared during update", status.HTTP_404_NOT_FOUND)

            if changed_link:
                await _record_link(storage, student_id, target_id, OP_BATCH_ASSIGNMENT)
            results.append(
                LinkOutcome(
                    student_id=student_id,
                    outcome=LinkOutcomeStatus.SUCCESS,
                    fee_structure_id=linked_id,
                )
            )
        except Exception as exc:
            logger.exception("Failed to assign student %s to batch %s", student_id, batch_id)
            results.append(
                LinkOutcome(student_id=student_id, outcome=LinkOutcomeStatus.ERROR, error=str(exc))
            )

    logger.info(
        "Assigned %d/%d students to batch %s (fee structure %s)",
        sum(1 for r in results if r.outcome == LinkOutcomeStatus.SUCCESS),
        len(results),
        batch_id,
        target_id,
    )
    return BatchAssignmentResult(
        batch_id=batch_id,
        class_id=class_id,
        academic_year_id=academic_year_id,
        fee_structure_id=target_id,
        results=results,
    )


async def remove_student_from_batch(storage: Storage, batch_id: int, student_id: int):
    """
    Take a student out of a batch. The fee link is cleared only when it belongs to
    the batch's class and academic year; an unrelated fee assignment is kept.
    """
    batch = await storage.get_batch(batch_id)
    if batch is None:
        raise NotFoundError("Batch not found")
    student = await storage.get_student(student_id)
    if student is None:
        raise NotFoundError("Student not found")
    if student.batch_id != batch.id:
        raise ServiceError("Student is not assigned to this batch", status.HTTP_400_BAD_REQUEST)

    updates: Dict[str, Any] = {"batch_id": None}
    cleared_fee_structure_id = None
    if student.fee_structure_id is not None:
        current = await storage.get_fee_structure(student.fee_structure_id)
        if current is not None and matches_pair(current, batch.class_id, batch.academic_year_id):
            updates["fee_structure_id"] = None
            cleared_fee_structure_id = current.id

    await storage.update_student(student_id, updates)
    await record_activity(
        storage,
        "student",
        "update",
        {
            "studentId": student_id,
            "batchId": batch_id,
            "operation": "batch-removal",
            "clearedFeeStructureId": cleared_fee_structure_id,
        },
    )
    return await storage.get_student(student_id)


# --- Fee structure lifecycle ---
async def link_students_to_fee_structure(
    storage: Storage,
    fee_structure_id: int,
    class_id: int,
    academic_year_id: int,
    operation: str,
) -> List[LinkOutcome]:
    """Point every student in a batch matching the structure's class/year at it."""
    results: List[LinkOutcome] = []
    try:
        batches = [b for b in await storage.get_all_batches() if matches_pair(b, class_id, academic_year_id)]
        student_ids: List[int] = []
        for batch in batches:
            student_ids.extend(s.id for s in await storage.get_students_by_batch(batch.id))
    except Exception:
        logger.exception("Could not resolve students for fee structure %s", fee_structure_id)
        return results

    for student_id in dict.fromkeys(student_ids):
        try:
            updated = await storage.update_student(student_id, {"fee_structure_id": fee_structure_id})
            if updated is None:
                raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
            await _record_link(storage, student_id, fee_structure_id, operation)
            results.append(
                LinkOutcome(
                    student_id=student_id,
                    outcome=LinkOutcomeStatus.SUCCESS,
                    fee_structure_id=fee_structure_id,
                )
            )
        except Exception as exc:
            logger.exception("Failed to link student %s to fee structure %s", student_id, fee_structure_id)
            results.append(
                LinkOutcome(student_id=student_id, outcome=LinkOutcomeStatus.ERROR, error=str(exc))
            )

    if results:
        logger.info(
            "%s: linked %d students to fee structure %s",
            operation,
            sum(1 for r in results if r.outcome == LinkOutcomeStatus.SUCCESS),
            fee_structure_id,
        )
    return results


async def create_fee_structure(storage: Storage, data: Dict[str, Any]):
    """Create a structure and link the students of its matching batches. Returns (structure, outcomes)."""
    fs = await storage.create_fee_structure(data)
    fs_id, class_id, academic_year_id = fs.id, fs.class_id, fs.academic_year_id
    await record_activity(
        storage, "fee_structure", "create", {"feeStructureId": fs_id, "name": fs.name}
    )
    links = await link_students_to_fee_structure(storage, fs_id, class_id, academic_year_id, OP_CREATE)
    return await storage.get_fee_structure(fs_id), links


async def update_fee_structure(
    storage: Storage,
    fee_structure_id: int,
    data: Dict[str, Any],
    today: Optional[date] = None,
):
    """
    Update a structure. Past-due structures with recorded payments are frozen.
    A class or academic year change relinks students of the new target batches.
    """
    today = today or date.today()
    fs = await storage.get_fee_structure(fee_structure_id)
    if fs is None:
        raise NotFoundError("Fee structure not found")

    if fs.due_date is not None and fs.due_date < today:
        payments = await storage.get_fee_payments(fee_structure_id=fee_structure_id)
        if payments:
            raise ServiceError(
                "Cannot modify a fee structure whose due date has passed and that already has payments",
                status.HTTP_400_BAD_REQUEST,
            )

    old_pair = (fs.class_id, fs.academic_year_id)
    fs = await storage.update_fee_structure(fee_structure_id, data)
    new_pair = (fs.class_id, fs.academic_year_id)
    await record_activity(
        storage, "fee_structure", "update", {"feeStructureId": fee_structure_id, "name": fs.name}
    )

    links: List[LinkOutcome] = []
    if new_pair != old_pair:
        links = await link_students_to_fee_structure(storage, fee_structure_id, *new_pair, OP_UPDATE)
    return await storage.get_fee_structure(fee_structure_id), links


async def clone_fee_structures(
    storage: Storage,
    source_academic_year_id: int,
    source_class_id: int,
    target_academic_year_id: int,
    target_class_id: int,
):
    """Duplicate every structure of a class/year into another class/year, linking each copy."""
    if (source_academic_year_id, source_class_id) == (target_academic_year_id, target_class_id):
        raise ServiceError(
            "Source and target class/academic year must differ",
            status.HTTP_400_BAD_REQUEST,
        )
    sources = [
        fs
        for fs in await storage.get_fee_structures()
        if matches_pair(fs, source_class_id, source_academic_year_id)
    ]
    if not sources:
        raise NotFoundError("No fee structures found for the source class and academic year")

    # Copy plain values up front; later commits may expire the source rows
    templates = [
        (
            source.id,
            {
                "name": source.name,
                "class_id": target_class_id,
                "academic_year_id": target_academic_year_id,
                "total_amount": source.total_amount,
                "due_date": source.due_date,
                "description": source.description,
            },
        )
        for source in sources
    ]

    created_ids: List[int] = []
    links: List[LinkOutcome] = []
    for source_id, data in templates:
        clone = await storage.create_fee_structure(data)
        clone_id = clone.id
        await record_activity(
            storage,
            "fee_structure",
            "clone",
            {"feeStructureId": clone_id, "sourceFeeStructureId": source_id},
        )
        created_ids.append(clone_id)
        links.extend(
            await link_students_to_fee_structure(
                storage, clone_id, target_class_id, target_academic_year_id, OP_CLONE
            )
        )
    created = [await storage.get_fee_structure(fs_id) for fs_id in created_ids]
    return created, links
