from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.dependencies import get_current_user
from playgroup.auth.models import RolePermission
from playgroup.auth.rbac import check_permission, require_superadmin
from playgroup.auth.schemas import (
    CurrentUser,
    ModulePermissionFlags,
    RolePermissionResponse,
    RolePermissionUpsert,
)
from playgroup.core.activity import log_activity
from playgroup.core.enums import PERMISSION_MODULES, UserRole
from playgroup.db.session import get_db

router = APIRouter(prefix="/api/v1", tags=["role-permissions"])


@router.get(
    "/role-permissions",
    response_model=List[RolePermissionResponse],
    dependencies=[Depends(check_permission("role_management", "read"))],
)
async def list_role_permissions(
    role: Optional[UserRole] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[RolePermissionResponse]:
    stmt = select(RolePermission)
    if role is not None:
        stmt = stmt.where(RolePermission.role == role.value)
    result = await db.execute(stmt.order_by(RolePermission.role, RolePermission.module))
    return [RolePermissionResponse.model_validate(r) for r in result.scalars().all()]


@router.put("/role-permissions", response_model=RolePermissionResponse)
async def upsert_role_permission(
    payload: RolePermissionUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_superadmin),
) -> RolePermissionResponse:
    """Create or replace the flags of one role/module pair."""
    if payload.role == UserRole.SUPERADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="superadmin permissions cannot be changed",
        )
    if payload.module not in PERMISSION_MODULES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown module '{payload.module}'",
        )
    row = (
        await db.execute(
            select(RolePermission).where(
                RolePermission.role == payload.role.value,
                RolePermission.module == payload.module,
            )
        )
    ).scalar_one_or_none()
    if row is None:
        row = RolePermission(role=payload.role.value, module=payload.module)
        db.add(row)
    row.can_view = payload.can_view
    row.can_create = payload.can_create
    row.can_edit = payload.can_edit
    row.can_delete = payload.can_delete
    log_activity(
        db,
        "role_permission",
        "update",
        {"role": payload.role.value, "module": payload.module, "updatedBy": current_user.id},
    )
    await db.commit()
    await db.refresh(row)
    return RolePermissionResponse.model_validate(row)


@router.get("/module-permissions", response_model=Dict[str, ModulePermissionFlags])
async def get_module_permissions(
    role: Optional[UserRole] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, ModulePermissionFlags]:
    """Flags per module for a role (default: the caller's). Only superadmin may look up other roles."""
    target = role.value if role is not None else current_user.role
    if target != current_user.role and current_user.role != UserRole.SUPERADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")

    if target == UserRole.SUPERADMIN.value:
        full = ModulePermissionFlags(can_view=True, can_create=True, can_edit=True, can_delete=True)
        return {module: full for module in PERMISSION_MODULES}

    result = await db.execute(select(RolePermission).where(RolePermission.role == target))
    rows = {r.module: r for r in result.scalars().all()}
    flags: Dict[str, ModulePermissionFlags] = {}
    for module in PERMISSION_MODULES:
        row = rows.get(module)
        flags[module] = (
            ModulePermissionFlags.model_validate(row)
            if row is not None
            else ModulePermissionFlags(can_view=False, can_create=False, can_edit=False, can_delete=False)
        )
    return flags
