# teamcal/api/v1/calendar.py

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.auth.schemas import SuccessOut
from teamcal.core.auth.security import require_admin, require_auth
from teamcal.core.calendar.schemas import (
    CalendarItemCreate,
    CalendarItemEnvelope,
    CalendarItemOut,
    CalendarItemsOut,
    CalendarItemsQuery,
    CalendarItemUpdate,
)
from teamcal.core.calendar.models import CalendarItemType, ItemStatus
from teamcal.core.calendar.service import CalendarService
from teamcal.core.users.models import User
from teamcal.db.base import get_async_db_session

router = APIRouter(prefix="/calendar/items", tags=["Calendar"])
log = logging.getLogger(__name__)


@router.get(
    "",
    response_model=CalendarItemsOut,
    summary="List meetings and deadlines",
    description="`from`/`to` are inclusive bounds on startAt; `search` is a case-sensitive title match.",
    dependencies=[Depends(require_auth)],
)
async def list_calendar_items(
    from_: Optional[dt.datetime] = Query(None, alias="from"),
    to: Optional[dt.datetime] = Query(None),
    item_type: Optional[CalendarItemType] = Query(None, alias="type"),
    item_status: Optional[ItemStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_async_db_session),
) -> CalendarItemsOut:
    filters = CalendarItemsQuery(from_=from_, to=to, type=item_type, status=item_status, search=search)
    items = await CalendarService(db).list_items(filters)
    log.info("API: Found %d calendar items", len(items))
    return CalendarItemsOut(items=[CalendarItemOut.model_validate(i) for i in items])


@router.post(
    "",
    response_model=CalendarItemEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a calendar item (admin only)",
)
async def create_calendar_item(
    payload: CalendarItemCreate = Body(...),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db_session),
) -> CalendarItemEnvelope:
    item = await CalendarService(db).create(payload, created_by_id=current_user.id)
    return CalendarItemEnvelope(item=CalendarItemOut.model_validate(item))


@router.patch(
    "/{item_id}",
    response_model=CalendarItemEnvelope,
    summary="Update a calendar item (admin only)",
    dependencies=[Depends(require_admin)],
)
async def update_calendar_item(
    item_id: str,
    payload: CalendarItemUpdate = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> CalendarItemEnvelope:
    item = await CalendarService(db).update(item_id, payload.changes())
    return CalendarItemEnvelope(item=CalendarItemOut.model_validate(item))


@router.delete(
    "/{item_id}",
    response_model=SuccessOut,
    summary="Delete a calendar item (admin only)",
    dependencies=[Depends(require_admin)],
)
async def delete_calendar_item(
    item_id: str,
    db: AsyncSession = Depends(get_async_db_session),
) -> SuccessOut:
    await CalendarService(db).delete(item_id)
    return SuccessOut()
