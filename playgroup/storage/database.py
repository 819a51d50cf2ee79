"""SQLAlchemy-backed Storage. Each mutating call commits on its own."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.models import Activity, Batch, FeePayment, FeeStructure, SchoolClass, Student
from playgroup.db.session import get_db

from .base import Storage

logger = logging.getLogger(__name__)


class DatabaseStorage(Storage):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    # --- Classes ---
    async def get_classes(self) -> List[SchoolClass]:
        result = await self.db.execute(select(SchoolClass).order_by(SchoolClass.id))
        return list(result.scalars().all())

    # --- Batches ---
    async def get_all_batches(self) -> List[Batch]:
        result = await self.db.execute(select(Batch).order_by(Batch.id))
        return list(result.scalars().all())

    async def get_batch(self, batch_id: int) -> Optional[Batch]:
        return await self.db.get(Batch, batch_id)

    async def get_students_by_batch(self, batch_id: int) -> List[Student]:
        result = await self.db.execute(
            select(Student).where(Student.batch_id == batch_id).order_by(Student.id)
        )
        return list(result.scalars().all())

    # --- Students ---
    async def get_students(self) -> List[Student]:
        result = await self.db.execute(select(Student).order_by(Student.id))
        return list(result.scalars().all())

    async def get_student(self, student_id: int) -> Optional[Student]:
        return await self.db.get(Student, student_id)

    async def update_student(self, student_id: int, data: Dict[str, Any]) -> Optional[Student]:
        student = await self.db.get(Student, student_id)
        if student is None:
            return None
        for key, value in data.items():
            setattr(student, key, value)
        await self._commit()
        await self.db.refresh(student)
        return student

    # --- Fee structures ---
    async def get_fee_structures(self) -> List[FeeStructure]:
        result = await self.db.execute(select(FeeStructure).order_by(FeeStructure.id))
        return list(result.scalars().all())

    async def get_fee_structure(self, fee_structure_id: int) -> Optional[FeeStructure]:
        return await self.db.get(FeeStructure, fee_structure_id)

    async def create_fee_structure(self, data: Dict[str, Any]) -> FeeStructure:
        fs = FeeStructure(**data)
        self.db.add(fs)
        await self._commit()
        await self.db.refresh(fs)
        return fs

    async def update_fee_structure(self, fee_structure_id: int, data: Dict[str, Any]) -> Optional[FeeStructure]:
        fs = await self.db.get(FeeStructure, fee_structure_id)
        if fs is None:
            return None
        for key, value in data.items():
            setattr(fs, key, value)
        await self._commit()
        await self.db.refresh(fs)
        return fs

    # --- Fee payments ---
    async def get_fee_payments(
        self,
        student_id: Optional[int] = None,
        fee_structure_id: Optional[int] = None,
    ) -> List[FeePayment]:
        stmt = select(FeePayment)
        if student_id is not None:
            stmt = stmt.where(FeePayment.student_id == student_id)
        if fee_structure_id is not None:
            stmt = stmt.where(FeePayment.fee_structure_id == fee_structure_id)
        stmt = stmt.order_by(FeePayment.payment_date, FeePayment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Activity ---
    async def create_activity(self, type: str, action: str, details: Dict[str, Any]) -> Activity:
        activity = Activity(type=type, action=action, details=details)
        self.db.add(activity)
        await self._commit()
        return activity


async def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    return DatabaseStorage(db)
