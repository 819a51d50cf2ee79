from typing import Dict

from fastapi import Depends, HTTPException, status

from playgroup.auth.dependencies import get_current_user
from playgroup.auth.schemas import CurrentUser
from playgroup.core.enums import UserRole


def has_permission(current_user: CurrentUser, module: str, action: str) -> bool:
    """superadmin always passes; everyone else goes through the role's module table."""
    if current_user.role == UserRole.SUPERADMIN.value:
        return True
    permissions: Dict[str, Dict[str, bool]] = current_user.permissions or {}
    return bool(permissions.get(module, {}).get(action, False))


def check_permission(module: str, action: str):
    """
    Dependency factory to enforce a specific permission.

    Example:
        Depends(check_permission("fee_management", "create"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if not has_permission(current_user, module, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker


async def require_superadmin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Role permission edits are reserved to superadmin."""
    if current_user.role != UserRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a superadmin can perform this action",
        )
    return current_user


def parent_can_access_student(current_user: CurrentUser, student) -> bool:
    """Parents see a student linked by id, or one whose guardian email is theirs."""
    if not current_user.is_parent:
        return True
    if current_user.student_id is not None and student.id == current_user.student_id:
        return True
    if student.email and current_user.email:
        return student.email.strip().lower() == current_user.email.strip().lower()
    return False
