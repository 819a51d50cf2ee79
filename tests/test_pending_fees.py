from datetime import date
from decimal import Decimal

from playgroup.core import fee_linking
from playgroup.core.enums import LinkOutcomeStatus, PendingFeeStatus
from playgroup.core.pending_fees import (
    UNASSIGNED_STUDENT_NAME,
    derive_status,
    get_pending_fees,
    reconcile_fee_assignments,
)
from playgroup.storage import MemStorage

AY = 1
TODAY = date(2024, 7, 1)
PAST = date(2024, 6, 1)
FUTURE = date(2024, 9, 1)


async def _class_with_batch(storage: MemStorage, name: str = "Nursery"):
    school_class = await storage.create_class({"name": name, "academic_year_id": AY})
    batch = await storage.create_batch({"name": f"{name} A", "class_id": school_class.id, "academic_year_id": AY})
    return school_class, batch


async def _fee(storage: MemStorage, school_class, amount, due_date=None, name="Annual"):
    return await storage.create_fee_structure(
        {
            "name": name,
            "class_id": school_class.id,
            "academic_year_id": AY,
            "total_amount": amount,
            "due_date": due_date,
        }
    )


async def _linked_student(storage: MemStorage, school_class, batch, fs, name="Asha", **extra):
    return await storage.create_student(
        {
            "full_name": name,
            "class_id": school_class.id,
            "batch_id": batch.id,
            "fee_structure_id": fs.id,
            **extra,
        }
    )


async def _pay(storage: MemStorage, student, fs, amount, **extra):
    return await storage.create_fee_payment(
        {
            "student_id": student.id,
            "fee_structure_id": fs.id,
            "amount": amount,
            "payment_date": date(2024, 5, 1),
            **extra,
        }
    )


def test_derive_status() -> None:
    assert derive_status(PAST, False, TODAY) == PendingFeeStatus.OVERDUE
    assert derive_status(PAST, True, TODAY) == PendingFeeStatus.PARTIAL_OVERDUE
    assert derive_status(FUTURE, False, TODAY) == PendingFeeStatus.UPCOMING
    assert derive_status(FUTURE, True, TODAY) == PendingFeeStatus.PARTIAL_PAID
    assert derive_status(None, False, TODAY) == PendingFeeStatus.UPCOMING
    # Due today has not passed yet
    assert derive_status(TODAY, False, TODAY) == PendingFeeStatus.UPCOMING


async def test_unpaid_past_due_fee_is_overdue(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await _linked_student(storage, school_class, batch, fs)

    rows = await get_pending_fees(storage, today=TODAY)

    assert len(rows) == 1
    row = rows[0]
    assert row.student_id == student.id
    assert row.student_name == "Asha"
    assert row.class_name == "Nursery"
    assert row.total_amount == Decimal("500.00")
    assert row.paid_amount == Decimal("0.00")
    assert row.due_amount == Decimal("500.00")
    assert row.status == PendingFeeStatus.OVERDUE


async def test_fully_paid_fee_is_omitted(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await _linked_student(storage, school_class, batch, fs)
    await _pay(storage, student, fs, 200)
    await _pay(storage, student, fs, 300)

    assert await get_pending_fees(storage, today=TODAY) == []


async def test_partial_payment_before_due_date(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, FUTURE)
    student = await _linked_student(storage, school_class, batch, fs)
    await _pay(storage, student, fs, 200)

    rows = await get_pending_fees(storage, today=TODAY)

    assert len(rows) == 1
    assert rows[0].paid_amount == Decimal("200.00")
    assert rows[0].due_amount == Decimal("300.00")
    assert rows[0].status == PendingFeeStatus.PARTIAL_PAID


async def test_partial_payment_after_due_date(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await _linked_student(storage, school_class, batch, fs)
    await _pay(storage, student, fs, 100)

    rows = await get_pending_fees(storage, today=TODAY)

    assert rows[0].status == PendingFeeStatus.PARTIAL_OVERDUE
    assert rows[0].due_amount == Decimal("400.00")


async def test_discounted_payment_hides_balance(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await _linked_student(storage, school_class, batch, fs)
    await _pay(storage, student, fs, 450, discount_applied=True)

    assert await get_pending_fees(storage, today=TODAY) == []


async def test_structure_without_students_yields_one_placeholder(storage: MemStorage) -> None:
    school_class = await storage.create_class({"name": "Toddlers"})
    fs = await _fee(storage, school_class, 750, FUTURE)

    rows = await get_pending_fees(storage, today=TODAY)

    assert len(rows) == 1
    assert rows[0].student_id is None
    assert rows[0].student_name == UNASSIGNED_STUDENT_NAME
    assert rows[0].fee_structure_id == fs.id
    assert rows[0].due_amount == Decimal("750.00")
    assert rows[0].status == PendingFeeStatus.UPCOMING


async def test_unlinked_batch_student_reported_without_mutation(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await storage.create_student(
        {"full_name": "Ben", "class_id": school_class.id, "batch_id": batch.id}
    )
    activity_count = len(storage.activities)

    rows = await get_pending_fees(storage, today=TODAY)

    assert [(r.student_id, r.fee_structure_id) for r in rows] == [(student.id, fs.id)]
    assert student.fee_structure_id is None
    assert len(storage.activities) == activity_count


async def test_student_without_batch_matches_by_class(storage: MemStorage) -> None:
    school_class = await storage.create_class({"name": "Nursery"})
    fs = await _fee(storage, school_class, 500, FUTURE)
    student = await storage.create_student({"full_name": "Cleo", "class_id": school_class.id})

    rows = await get_pending_fees(storage, today=TODAY)

    assert [(r.student_id, r.fee_structure_id) for r in rows] == [(student.id, fs.id)]


async def test_settled_candidates_produce_no_placeholder(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    student = await storage.create_student(
        {"full_name": "Dara", "class_id": school_class.id, "batch_id": batch.id}
    )
    await _pay(storage, student, fs, 500)

    assert await get_pending_fees(storage, today=TODAY) == []


async def test_inactive_students_are_excluded(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    fs = await _fee(storage, school_class, 500, PAST)
    await _linked_student(storage, school_class, batch, fs, status="inactive")

    rows = await get_pending_fees(storage, today=TODAY)

    assert len(rows) == 1
    assert rows[0].student_id is None


async def test_overdue_rows_sort_first(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    upcoming = await _fee(storage, school_class, 300, date(2024, 7, 15), name="Upcoming")
    overdue = await _fee(storage, school_class, 500, date(2024, 6, 15), name="Overdue")
    undated = await _fee(storage, school_class, 100, None, name="Undated")
    early_overdue = await _fee(storage, school_class, 200, date(2024, 3, 1), name="Early")
    for i, fs in enumerate((upcoming, overdue, undated, early_overdue)):
        await _linked_student(storage, school_class, batch, fs, name=f"Student {i}")

    rows = await get_pending_fees(storage, today=TODAY)

    assert [r.fee_structure_name for r in rows] == ["Early", "Overdue", "Upcoming", "Undated"]


async def test_class_filter(storage: MemStorage) -> None:
    nursery, nursery_batch = await _class_with_batch(storage)
    kg, kg_batch = await _class_with_batch(storage, "Kindergarten")
    nursery_fee = await _fee(storage, nursery, 500, PAST)
    kg_fee = await _fee(storage, kg, 600, PAST)
    await _linked_student(storage, nursery, nursery_batch, nursery_fee, name="Eli")
    await _linked_student(storage, kg, kg_batch, kg_fee, name="Fin")

    rows = await get_pending_fees(storage, class_id=kg.id, today=TODAY)

    assert [r.student_name for r in rows] == ["Fin"]


async def test_reconcile_links_candidates(storage: MemStorage) -> None:
    school_class, batch = await _class_with_batch(storage)
    await _fee(storage, school_class, 500, PAST, name="Term 1")
    term2 = await _fee(storage, school_class, 500, FUTURE, name="Term 2")
    student = await storage.create_student(
        {"full_name": "Gia", "class_id": school_class.id, "batch_id": batch.id}
    )
    outsider = await storage.create_student({"full_name": "Hugo"})

    results = await reconcile_fee_assignments(storage)

    assert [(r.student_id, r.outcome, r.fee_structure_id) for r in results] == [
        (student.id, LinkOutcomeStatus.SUCCESS, term2.id)
    ]
    assert student.fee_structure_id == term2.id
    assert outsider.fee_structure_id is None
    reconciled = [a for a in storage.activities.values() if a.details.get("operation") == fee_linking.OP_RECONCILE]
    assert len(reconciled) == 1

    # Nothing left to reconcile
    assert await reconcile_fee_assignments(storage) == []
