import logging
from typing import Dict, Tuple

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.models import RolePermission, User
from playgroup.auth.schemas import LoginRequest, LoginResponse, UserInfo
from playgroup.auth.security import create_access_token, hash_password, verify_password
from playgroup.core.config import settings
from playgroup.core.enums import PERMISSION_MODULES, UserRole
from playgroup.core.exceptions import ServiceError

logger = logging.getLogger(__name__)

# (can_view, can_create, can_edit, can_delete) per role and module; superadmin bypasses the table
_FULL = (True, True, True, True)
_READ = (True, False, False, False)
_NONE = (False, False, False, False)

DEFAULT_PERMISSIONS: Dict[str, Dict[str, Tuple[bool, bool, bool, bool]]] = {
    UserRole.OFFICE_ADMIN.value: {
        module: (_READ if module == "role_management" else _FULL) for module in PERMISSION_MODULES
    },
    UserRole.TEACHER.value: {
        "students": _READ,
        "classes": _READ,
        "attendance": (True, True, True, False),
        "reports": _READ,
        "inventory": _READ,
    },
    UserRole.PARENT.value: {
        "students": _READ,
        "fee_payments": _READ,
        "attendance": _READ,
    },
}


def user_to_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        student_id=user.student_id,
    )


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    identifier = payload.username.strip()
    result = await db.execute(
        select(User).where(
            or_(User.username == identifier, func.lower(User.email) == identifier.lower())
        )
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid username or password", status.HTTP_401_UNAUTHORIZED)
    if not user.active:
        raise ServiceError("User account is inactive", status.HTTP_403_FORBIDDEN)

    token = create_access_token(user.id, user.role)
    logger.info("User %s logged in", user.username)
    return LoginResponse(access_token=token, user=user_to_info(user))


async def seed_default_permissions(db: AsyncSession) -> int:
    """Insert the default permission matrix when role_permissions is empty. Returns rows created."""
    existing = (await db.execute(select(func.count(RolePermission.id)))).scalar() or 0
    if existing:
        return 0
    created = 0
    for role, modules in DEFAULT_PERMISSIONS.items():
        for module in PERMISSION_MODULES:
            can_view, can_create, can_edit, can_delete = modules.get(module, _NONE)
            db.add(
                RolePermission(
                    role=role,
                    module=module,
                    can_view=can_view,
                    can_create=can_create,
                    can_edit=can_edit,
                    can_delete=can_delete,
                )
            )
            created += 1
    await db.commit()
    logger.info("Seeded %d default role permissions", created)
    return created


async def seed_superadmin(db: AsyncSession) -> None:
    """Create the configured superadmin account if it does not exist yet."""
    if not settings.superadmin_username or not settings.superadmin_password:
        return
    existing = (
        await db.execute(select(User).where(User.username == settings.superadmin_username))
    ).scalar_one_or_none()
    if existing:
        return
    db.add(
        User(
            username=settings.superadmin_username,
            email=settings.superadmin_email or f"{settings.superadmin_username}@localhost",
            full_name="Super Administrator",
            password_hash=hash_password(settings.superadmin_password),
            role=UserRole.SUPERADMIN.value,
            active=True,
        )
    )
    await db.commit()
    logger.info("Created superadmin account %s", settings.superadmin_username)
