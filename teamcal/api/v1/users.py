# teamcal/api/v1/users.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.auth.security import require_auth
from teamcal.core.users.schemas import UserOut, UsersListOut
from teamcal.core.users.service import UsersService
from teamcal.db.base import get_async_db_session

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_auth)],
)
log = logging.getLogger(__name__)


@router.get("", response_model=UsersListOut, summary="All users (for pickers)")
async def list_users(db: AsyncSession = Depends(get_async_db_session)) -> UsersListOut:
    users = await UsersService(db).list_users()
    log.info("API: Found %d users", len(users))
    return UsersListOut(users=[UserOut.model_validate(u) for u in users])
