from enum import Enum


class UserRole(str, Enum):
    PARENT = "parent"
    TEACHER = "teacher"
    OFFICE_ADMIN = "officeadmin"
    SUPERADMIN = "superadmin"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CHEQUE = "cheque"
    OTHER = "other"


class ReminderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class PendingFeeStatus(str, Enum):
    OVERDUE = "overdue"
    PARTIAL_OVERDUE = "partial-overdue"
    UPCOMING = "upcoming"
    PARTIAL_PAID = "partial-paid"


class LinkOutcomeStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


# Module keys used by role permissions
PERMISSION_MODULES = (
    "students",
    "classes",
    "fee_management",
    "fee_payments",
    "expenses",
    "inventory",
    "reports",
    "attendance",
    "settings",
    "user_management",
    "role_management",
)
