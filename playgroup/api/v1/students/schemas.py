from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from playgroup.core.enums import StudentStatus
from playgroup.core.schemas import CamelModel


class StudentBase(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: str = Field(..., description="YYYY-MM-DD")
    age: Optional[int] = Field(None, ge=0)
    gender: str
    guardian_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    status: StudentStatus = StudentStatus.ACTIVE
    notes: Optional[str] = None


class StudentCreate(StudentBase):
    class_id: Optional[int] = None
    batch_id: Optional[int] = None
    fee_structure_id: Optional[int] = None


class StudentUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_of_birth: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None
    guardian_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    status: Optional[StudentStatus] = None
    notes: Optional[str] = None
    class_id: Optional[int] = None
    batch_id: Optional[int] = None
    fee_structure_id: Optional[int] = None


class StudentResponse(CamelModel):
    id: int
    full_name: str
    date_of_birth: str
    age: Optional[int] = None
    gender: str
    guardian_name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    status: str
    notes: Optional[str] = None
    class_id: Optional[int] = None
    batch_id: Optional[int] = None
    fee_structure_id: Optional[int] = None
    created_at: datetime


class StudentListResponse(CamelModel):
    items: List[StudentResponse]
    total: int
