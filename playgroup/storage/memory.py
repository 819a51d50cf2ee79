"""Dictionary-backed Storage. Records are model instances that never touch a session."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from playgroup.core.models import Activity, Batch, FeePayment, FeeStructure, SchoolClass, Student
from playgroup.core.models.batch import DEFAULT_BATCH_CAPACITY
from playgroup.db.session import utcnow

from .base import Storage


def _apply(obj, data: Dict[str, Any]) -> None:
    for key, value in data.items():
        setattr(obj, key, value)


class MemStorage(Storage):
    def __init__(self) -> None:
        self.classes: Dict[int, SchoolClass] = {}
        self.batches: Dict[int, Batch] = {}
        self.students: Dict[int, Student] = {}
        self.fee_structures: Dict[int, FeeStructure] = {}
        self.fee_payments: Dict[int, FeePayment] = {}
        self.activities: Dict[int, Activity] = {}
        self._next_ids: Dict[str, int] = {}

    def _next_id(self, kind: str) -> int:
        value = self._next_ids.get(kind, 1)
        self._next_ids[kind] = value + 1
        return value

    # --- Classes ---
    async def get_classes(self) -> List[SchoolClass]:
        return list(self.classes.values())

    async def create_class(self, data: Dict[str, Any]) -> SchoolClass:
        obj = SchoolClass(id=self._next_id("class"), created_at=utcnow())
        _apply(obj, data)
        self.classes[obj.id] = obj
        return obj

    # --- Batches ---
    async def get_all_batches(self) -> List[Batch]:
        return list(self.batches.values())

    async def get_batch(self, batch_id: int) -> Optional[Batch]:
        return self.batches.get(batch_id)

    async def create_batch(self, data: Dict[str, Any]) -> Batch:
        obj = Batch(id=self._next_id("batch"), capacity=DEFAULT_BATCH_CAPACITY, created_at=utcnow())
        _apply(obj, data)
        self.batches[obj.id] = obj
        return obj

    async def get_students_by_batch(self, batch_id: int) -> List[Student]:
        return [s for s in self.students.values() if s.batch_id == batch_id]

    # --- Students ---
    async def get_students(self) -> List[Student]:
        return list(self.students.values())

    async def get_student(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    async def create_student(self, data: Dict[str, Any]) -> Student:
        obj = Student(
            id=self._next_id("student"),
            status="active",
            class_id=None,
            batch_id=None,
            fee_structure_id=None,
            email=None,
            created_at=utcnow(),
        )
        _apply(obj, data)
        self.students[obj.id] = obj
        return obj

    async def update_student(self, student_id: int, data: Dict[str, Any]) -> Optional[Student]:
        obj = self.students.get(student_id)
        if obj is None:
            return None
        _apply(obj, data)
        return obj

    # --- Fee structures ---
    async def get_fee_structures(self) -> List[FeeStructure]:
        return list(self.fee_structures.values())

    async def get_fee_structure(self, fee_structure_id: int) -> Optional[FeeStructure]:
        return self.fee_structures.get(fee_structure_id)

    async def create_fee_structure(self, data: Dict[str, Any]) -> FeeStructure:
        obj = FeeStructure(
            id=self._next_id("fee_structure"),
            due_date=None,
            description=None,
            created_at=utcnow(),
        )
        _apply(obj, data)
        obj.total_amount = Decimal(str(obj.total_amount))
        self.fee_structures[obj.id] = obj
        return obj

    async def update_fee_structure(self, fee_structure_id: int, data: Dict[str, Any]) -> Optional[FeeStructure]:
        obj = self.fee_structures.get(fee_structure_id)
        if obj is None:
            return None
        _apply(obj, data)
        return obj

    # --- Fee payments ---
    async def get_fee_payments(
        self,
        student_id: Optional[int] = None,
        fee_structure_id: Optional[int] = None,
    ) -> List[FeePayment]:
        return [
            p
            for p in self.fee_payments.values()
            if (student_id is None or p.student_id == student_id)
            and (fee_structure_id is None or p.fee_structure_id == fee_structure_id)
        ]

    async def create_fee_payment(self, data: Dict[str, Any]) -> FeePayment:
        obj = FeePayment(
            id=self._next_id("fee_payment"),
            notes=None,
            discount_applied=False,
            payment_method="cash",
            created_at=utcnow(),
        )
        _apply(obj, data)
        obj.amount = Decimal(str(obj.amount))
        self.fee_payments[obj.id] = obj
        return obj

    # --- Activity ---
    async def create_activity(self, type: str, action: str, details: Dict[str, Any]) -> Activity:
        obj = Activity(
            id=self._next_id("activity"),
            type=type,
            action=action,
            details=details,
            timestamp=utcnow(),
        )
        self.activities[obj.id] = obj
        return obj
