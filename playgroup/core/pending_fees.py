"""
Pending-fee report and fee assignment reconciliation.

get_pending_fees is a read-only query. Students that qualify for a fee
structure but have none linked are only assigned one by the explicit
reconcile_fee_assignments command.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Set, Tuple

from playgroup.core.enums import LinkOutcomeStatus, PendingFeeStatus, StudentStatus
from playgroup.core.fee_linking import OP_RECONCILE, matches_pair, record_activity, select_fee_structure
from playgroup.core.models import Batch, FeePayment, FeeStructure, Student
from playgroup.core.schemas import LinkOutcome, PendingFeeRow
from playgroup.storage.base import Storage

logger = logging.getLogger(__name__)

UNASSIGNED_STUDENT_NAME = "Unassigned"
TWO_PLACES = Decimal("0.01")


def to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return amount.quantize(TWO_PLACES)


def derive_status(due_date: Optional[date], has_payments: bool, today: date) -> PendingFeeStatus:
    passed = due_date is not None and due_date < today
    if passed:
        return PendingFeeStatus.PARTIAL_OVERDUE if has_payments else PendingFeeStatus.OVERDUE
    return PendingFeeStatus.PARTIAL_PAID if has_payments else PendingFeeStatus.UPCOMING


def is_candidate(student: Student, fs: FeeStructure, batches: Dict[int, Batch]) -> bool:
    """
    A student qualifies for a structure by direct reference, through their batch's
    class and academic year, or, without a batch, through their class alone.
    """
    if student.fee_structure_id == fs.id:
        return True
    if student.batch_id is not None:
        batch = batches.get(student.batch_id)
        return batch is not None and matches_pair(batch, fs.class_id, fs.academic_year_id)
    return student.class_id is not None and student.class_id == fs.class_id


@dataclass
class _Snapshot:
    students: List[Student]
    structures: List[FeeStructure]
    batches: Dict[int, Batch]
    class_names: Dict[int, str]
    payments: Dict[Tuple[int, int], List[FeePayment]]

    @property
    def structures_by_id(self) -> Dict[int, FeeStructure]:
        return {fs.id: fs for fs in self.structures}


async def _load(storage: Storage) -> _Snapshot:
    payments: Dict[Tuple[int, int], List[FeePayment]] = defaultdict(list)
    for payment in await storage.get_fee_payments():
        payments[(payment.student_id, payment.fee_structure_id)].append(payment)
    return _Snapshot(
        students=[s for s in await storage.get_students() if s.status == StudentStatus.ACTIVE.value],
        structures=await storage.get_fee_structures(),
        batches={b.id: b for b in await storage.get_all_batches()},
        class_names={c.id: c.name for c in await storage.get_classes()},
        payments=payments,
    )


def _evaluate(
    snapshot: _Snapshot,
    student: Optional[Student],
    fs: FeeStructure,
    today: date,
) -> Optional[PendingFeeRow]:
    """Build the pending row for one student + structure, or None when nothing is owed."""
    payments: Sequence[FeePayment] = (
        snapshot.payments.get((student.id, fs.id), []) if student is not None else []
    )
    total = to_money(fs.total_amount)
    paid = sum((to_money(p.amount) for p in payments), Decimal("0.00"))
    due = total - paid
    if due <= 0 or any(p.discount_applied for p in payments):
        return None

    class_id = fs.class_id if student is None else (student.class_id or fs.class_id)
    return PendingFeeRow(
        student_id=student.id if student is not None else None,
        student_name=student.full_name if student is not None else UNASSIGNED_STUDENT_NAME,
        class_id=class_id,
        class_name=snapshot.class_names.get(class_id),
        fee_structure_id=fs.id,
        fee_structure_name=fs.name,
        academic_year_id=fs.academic_year_id,
        total_amount=total,
        paid_amount=paid,
        due_amount=due,
        due_date=fs.due_date,
        status=derive_status(fs.due_date, bool(payments), today),
    )


def _sort_key(row: PendingFeeRow):
    return (
        row.status != PendingFeeStatus.OVERDUE,
        row.due_date is None,
        row.due_date or date.max,
    )


async def get_pending_fees(
    storage: Storage,
    class_id: Optional[int] = None,
    today: Optional[date] = None,
) -> List[PendingFeeRow]:
    """
    Outstanding balances per student and fee structure.

    Pass 1 covers students with a linked structure. Pass 2 covers every structure
    pass 1 did not report: its candidate students are evaluated the same way, and
    a structure with no candidates at all yields one "Unassigned" placeholder row.
    Overdue rows come first, then ascending due date.
    """
    today = today or date.today()
    snapshot = await _load(storage)
    structures_by_id = snapshot.structures_by_id
    rows: List[PendingFeeRow] = []

    # Pass 1: linked students
    for student in snapshot.students:
        if student.fee_structure_id is None:
            continue
        if class_id is not None and student.class_id != class_id:
            continue
        fs = structures_by_id.get(student.fee_structure_id)
        if fs is None:
            continue
        row = _evaluate(snapshot, student, fs, today)
        if row is not None:
            rows.append(row)

    represented: Set[int] = {row.fee_structure_id for row in rows}

    # Pass 2: structures without a reported row
    for fs in snapshot.structures:
        if fs.id in represented:
            continue
        if class_id is not None and fs.class_id != class_id:
            continue
        candidates = [s for s in snapshot.students if is_candidate(s, fs, snapshot.batches)]
        if not candidates:
            placeholder = _evaluate(snapshot, None, fs, today)
            if placeholder is not None:
                rows.append(placeholder)
            continue
        for student in candidates:
            row = _evaluate(snapshot, student, fs, today)
            if row is not None:
                rows.append(row)

    rows.sort(key=_sort_key)
    return rows


async def reconcile_fee_assignments(
    storage: Storage,
    class_id: Optional[int] = None,
) -> List[LinkOutcome]:
    """Link every active student with no fee structure to the best structure they qualify for."""
    snapshot = await _load(storage)
    plan: List[Tuple[int, int]] = []
    for student in snapshot.students:
        if student.fee_structure_id is not None:
            continue
        if class_id is not None and student.class_id != class_id:
            continue
        chosen = select_fee_structure(
            fs for fs in snapshot.structures if is_candidate(student, fs, snapshot.batches)
        )
        if chosen is not None:
            plan.append((student.id, chosen.id))

    results: List[LinkOutcome] = []
    for student_id, fee_structure_id in plan:
        try:
            updated = await storage.update_student(student_id, {"fee_structure_id": fee_structure_id})
            if updated is None:
                raise LookupError("Student not found")
            await record_activity(
                storage,
                "fee",
                "assign",
                {"studentId": student_id, "feeStructureId": fee_structure_id, "operation": OP_RECONCILE},
            )
            results.append(
                LinkOutcome(
                    student_id=student_id,
                    outcome=LinkOutcomeStatus.SUCCESS,
                    fee_structure_id=fee_structure_id,
                )
            )
        except Exception as exc:
            logger.exception("Failed to reconcile fee structure for student %s", student_id)
            results.append(
                LinkOutcome(student_id=student_id, outcome=LinkOutcomeStatus.ERROR, error=str(exc))
            )

    logger.info("Reconciled fee structures for %d students", len(results))
    return results
