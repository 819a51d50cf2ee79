from playgroup.core.models.academic_year import AcademicYear
from playgroup.core.models.class_model import SchoolClass
from playgroup.core.models.batch import Batch
from playgroup.core.models.fee_structure import FeeStructure
from playgroup.core.models.student import Student
from playgroup.core.models.fee_payment import FeePayment
from playgroup.core.models.receipt_sequence import ReceiptSequence
from playgroup.core.models.reminder import Reminder
from playgroup.core.models.activity import Activity
from playgroup.core.models.expense import Expense
from playgroup.core.models.inventory_item import InventoryItem
from playgroup.core.models.attendance import Attendance

__all__ = [
    "AcademicYear",
    "Activity",
    "Attendance",
    "Batch",
    "Expense",
    "FeePayment",
    "FeeStructure",
    "InventoryItem",
    "ReceiptSequence",
    "Reminder",
    "SchoolClass",
    "Student",
]
