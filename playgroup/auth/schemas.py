from typing import Dict, Optional

from pydantic import BaseModel, Field

from playgroup.core.enums import UserRole
from playgroup.core.schemas import CamelModel


class LoginRequest(CamelModel):
    # Username or email
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserInfo(CamelModel):
    id: int
    username: str
    email: str
    full_name: str
    role: UserRole
    student_id: Optional[int] = None


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated user for RBAC checks.
    permissions maps module -> {"read": bool, "create": bool, "update": bool, "delete": bool}.
    """

    id: int
    username: str
    email: str
    role: str
    student_id: Optional[int] = None
    permissions: Dict[str, Dict[str, bool]] = Field(default_factory=dict)

    @property
    def is_parent(self) -> bool:
        return self.role == UserRole.PARENT.value


# --- Role permissions ---
class ModulePermissionFlags(CamelModel):
    can_view: bool
    can_create: bool
    can_edit: bool
    can_delete: bool


class RolePermissionUpsert(ModulePermissionFlags):
    role: UserRole
    module: str = Field(..., min_length=1, max_length=50)


class RolePermissionResponse(ModulePermissionFlags):
    id: int
    role: str
    module: str
