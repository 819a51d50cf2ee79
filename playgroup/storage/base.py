"""
Storage interface consumed by the fee linking and pending-fee report engine.

The engine only talks to this interface, so the backing store can be the
in-memory mock (MemStorage) or the SQL database (DatabaseStorage).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from playgroup.core.models import Activity, Batch, FeePayment, FeeStructure, SchoolClass, Student


class Storage(ABC):
    # --- Classes ---
    @abstractmethod
    async def get_classes(self) -> List[SchoolClass]: ...

    # --- Batches ---
    @abstractmethod
    async def get_all_batches(self) -> List[Batch]: ...

    @abstractmethod
    async def get_batch(self, batch_id: int) -> Optional[Batch]: ...

    @abstractmethod
    async def get_students_by_batch(self, batch_id: int) -> List[Student]: ...

    # --- Students ---
    @abstractmethod
    async def get_students(self) -> List[Student]: ...

    @abstractmethod
    async def get_student(self, student_id: int) -> Optional[Student]: ...

    @abstractmethod
    async def update_student(self, student_id: int, data: Dict[str, Any]) -> Optional[Student]: ...

    # --- Fee structures ---
    @abstractmethod
    async def get_fee_structures(self) -> List[FeeStructure]: ...

    @abstractmethod
    async def get_fee_structure(self, fee_structure_id: int) -> Optional[FeeStructure]: ...

    @abstractmethod
    async def create_fee_structure(self, data: Dict[str, Any]) -> FeeStructure: ...

    @abstractmethod
    async def update_fee_structure(self, fee_structure_id: int, data: Dict[str, Any]) -> Optional[FeeStructure]: ...

    # --- Fee payments ---
    @abstractmethod
    async def get_fee_payments(
        self,
        student_id: Optional[int] = None,
        fee_structure_id: Optional[int] = None,
    ) -> List[FeePayment]: ...

    # --- Activity ---
    @abstractmethod
    async def create_activity(self, type: str, action: str, details: Dict[str, Any]) -> Activity: ...
