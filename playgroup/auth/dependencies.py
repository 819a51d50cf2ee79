from typing import Dict

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.models import RolePermission, User
from playgroup.auth.schemas import CurrentUser
from playgroup.auth.security import InvalidTokenError, decode_access_token
from playgroup.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


def permissions_to_dict(rows) -> Dict[str, Dict[str, bool]]:
    """RolePermission rows -> {module: {"read", "create", "update", "delete"}}."""
    return {
        row.module: {
            "read": bool(row.can_view),
            "create": bool(row.can_create),
            "update": bool(row.can_edit),
            "delete": bool(row.can_delete),
        }
        for row in rows
    }


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user and their role permissions from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = decode_access_token(token)
    except InvalidTokenError:
        raise credentials_exception

    user = await db.get(User, user_id)
    if not user or not user.active:
        raise credentials_exception

    # Permissions are read per request so role edits apply without re-login
    result = await db.execute(select(RolePermission).where(RolePermission.role == user.role))

    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        student_id=user.student_id,
        permissions=permissions_to_dict(result.scalars().all()),
    )
