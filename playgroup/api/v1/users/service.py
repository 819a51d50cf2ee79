import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.models import User
from playgroup.auth.security import hash_password
from playgroup.core.activity import log_activity
from playgroup.core.enums import UserRole
from playgroup.core.exceptions import NotFoundError, ServiceError
from playgroup.core.models import Student

from .schemas import ParentAccountCreate, UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)


async def _ensure_available(
    db: AsyncSession,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    clauses = []
    if username:
        clauses.append(User.username == username)
    if email:
        clauses.append(func.lower(User.email) == email.lower())
    if not clauses:
        return
    stmt = select(User.id).where(or_(*clauses))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ServiceError("A user with this username or email already exists", status.HTTP_409_CONFLICT)


async def _validate_student(db: AsyncSession, student_id: Optional[int]) -> None:
    if student_id is not None and not await db.get(Student, student_id):
        raise ServiceError("Invalid student", status.HTTP_400_BAD_REQUEST)


async def create_user(db: AsyncSession, payload: UserCreate) -> UserResponse:
    username = payload.username.strip()
    email = str(payload.email).lower()
    await _ensure_available(db, username, email)
    await _validate_student(db, payload.student_id)
    user = User(
        username=username,
        email=email,
        full_name=payload.full_name.strip(),
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        active=payload.active,
        student_id=payload.student_id,
    )
    db.add(user)
    await db.flush()
    log_activity(db, "user", "create", {"userId": user.id, "username": username, "role": user.role})
    await db.commit()
    await db.refresh(user)
    logger.info("Created %s user %s", user.role, username)
    return UserResponse.model_validate(user)


async def list_users(db: AsyncSession, role: Optional[str] = None) -> List[UserResponse]:
    stmt = select(User)
    if role:
        stmt = stmt.where(User.role == role)
    result = await db.execute(stmt.order_by(User.username))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: int) -> Optional[UserResponse]:
    user = await db.get(User, user_id)
    return UserResponse.model_validate(user) if user else None


async def update_user(db: AsyncSession, user_id: int, payload: UserUpdate) -> Optional[UserResponse]:
    user = await db.get(User, user_id)
    if not user:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("email"):
        data["email"] = str(data["email"]).lower()
        await _ensure_available(db, None, data["email"], exclude_id=user_id)
    if "student_id" in data:
        await _validate_student(db, data["student_id"])
    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    if data.get("role") is not None:
        data["role"] = data["role"].value
    for key, value in data.items():
        if value is not None or key == "student_id":
            setattr(user, key, value)
    log_activity(db, "user", "update", {"userId": user_id, "username": user.username})
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


async def delete_user(db: AsyncSession, user_id: int, acting_user_id: int) -> bool:
    user = await db.get(User, user_id)
    if not user:
        return False
    if user.id == acting_user_id:
        raise ServiceError("You cannot delete your own account", status.HTTP_400_BAD_REQUEST)
    await db.delete(user)
    log_activity(db, "user", "delete", {"userId": user_id, "username": user.username})
    await db.commit()
    return True


async def create_parent_account(
    db: AsyncSession,
    student_id: int,
    payload: ParentAccountCreate,
) -> UserResponse:
    """Create a parent login for a student. Username is the local part of the guardian email."""
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    if not student.email:
        raise ServiceError("Student has no guardian email", status.HTTP_400_BAD_REQUEST)

    email = student.email.strip().lower()
    username = email.split("@", 1)[0]
    await _ensure_available(db, username, email)

    user = User(
        username=username,
        email=email,
        full_name=(payload.full_name or student.guardian_name).strip(),
        password_hash=hash_password(payload.password),
        role=UserRole.PARENT.value,
        active=True,
        student_id=student.id,
    )
    db.add(user)
    await db.flush()
    log_activity(
        db,
        "user",
        "create",
        {"userId": user.id, "username": username, "role": user.role, "studentId": student.id},
    )
    await db.commit()
    await db.refresh(user)
    logger.info("Created parent account %s for student %s", username, student_id)
    return UserResponse.model_validate(user)
