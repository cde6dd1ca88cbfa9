# teamcal/core/permissions/schemas.py

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from teamcal.core.users.models import Role
from .models import Module, PermissionLevel


class ModulePermission(BaseModel):
    """Уровни доступа к одному модулю (camelCase на проводе, как у фронтенда)."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    module: Module
    my_level: PermissionLevel = Field(..., alias="myLevel")
    all_level: PermissionLevel = Field(..., alias="allLevel")


class StoredPermission(ModulePermission):
    user_id: str = Field(..., alias="userId")


class UpdatePermissionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    permissions: List[ModulePermission]


class UpdatePermissionsResponse(BaseModel):
    message: str = "Permissions updated successfully"
    permissions: List[StoredPermission]


class UserWithPermissions(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    permissions: List[ModulePermission]


class UsersWithPermissionsOut(BaseModel):
    users: List[UserWithPermissions]


__all__: list[str] = [
    "ModulePermission", "StoredPermission", "UpdatePermissionsRequest",
    "UpdatePermissionsResponse", "UserWithPermissions", "UsersWithPermissionsOut",
]
