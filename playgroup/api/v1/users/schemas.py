from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from playgroup.core.enums import UserRole
from playgroup.core.schemas import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6)
    role: UserRole
    active: bool = True
    student_id: Optional[int] = None


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    active: Optional[bool] = None
    student_id: Optional[int] = None


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    full_name: str
    role: str
    active: bool
    student_id: Optional[int] = None
    created_at: datetime


class ParentAccountCreate(CamelModel):
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
