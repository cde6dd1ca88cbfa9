# teamcal/api/v1/permissions.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.auth.security import require_admin
from teamcal.core.permissions.schemas import (
    UpdatePermissionsRequest,
    UpdatePermissionsResponse,
    UsersWithPermissionsOut,
)
from teamcal.core.permissions.service import PermissionsService
from teamcal.db.base import get_async_db_session

router = APIRouter(
    prefix="/admin/permissions",
    tags=["Admin: Permissions"],
    dependencies=[Depends(require_admin)],  # Только ADMIN
)
log = logging.getLogger(__name__)


@router.get(
    "",
    response_model=UsersWithPermissionsOut,
    summary="All users with their module permissions",
)
async def get_permissions(db: AsyncSession = Depends(get_async_db_session)) -> UsersWithPermissionsOut:
    users = await PermissionsService(db).list_users_with_permissions()
    log.info("API: Found %d users with permissions", len(users))
    return UsersWithPermissionsOut(users=users)


@router.put(
    "",
    response_model=UpdatePermissionsResponse,
    summary="Upsert permissions for one user",
    description="Modules missing from the list keep their current levels.",
)
async def update_permissions(
    payload: UpdatePermissionsRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> UpdatePermissionsResponse:
    log.info("API: Updating %d permission(s) for user %s", len(payload.permissions), payload.user_id)
    written = await PermissionsService(db).set_permissions(payload.user_id, payload.permissions)
    return UpdatePermissionsResponse(permissions=written)
