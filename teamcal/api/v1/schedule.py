# teamcal/api/v1/schedule.py

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.auth.schemas import SuccessOut
from teamcal.core.auth.security import require_admin, require_auth
from teamcal.core.errors import ValidationError
from teamcal.core.schedule.schemas import (
    ScheduleEntriesOut,
    ScheduleEntryCreate,
    ScheduleEntryEnvelope,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
    ScheduleQuery,
)
from teamcal.core.schedule.service import ScheduleService
from teamcal.core.users.models import User
from teamcal.db.base import get_async_db_session

router = APIRouter(prefix="/schedule", tags=["Schedule"])
log = logging.getLogger(__name__)


@router.get(
    "",
    response_model=ScheduleEntriesOut,
    summary="Schedule entries for one day",
    dependencies=[Depends(require_auth)],
)
async def get_schedule(
    date: Optional[str] = Query(None, description="Day in YYYY-MM-DD format"),
    db: AsyncSession = Depends(get_async_db_session),
) -> ScheduleEntriesOut:
    if not date:
        raise ValidationError("Date parameter is required")
    try:
        query = ScheduleQuery.model_validate({"date": date})
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid date format", details=exc.errors(include_url=False, include_context=False)
        ) from exc

    entries = await ScheduleService(db).list_by_date(query.date)
    log.info("API: Found %d schedule entries for %s", len(entries), date)
    return ScheduleEntriesOut(entries=[ScheduleEntryOut.model_validate(e) for e in entries])


@router.post(
    "",
    response_model=ScheduleEntryEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a schedule entry (admin only)",
    responses={409: {"description": "Entry already exists for this user on this date"}},
)
async def create_schedule_entry(
    payload: ScheduleEntryCreate = Body(...),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db_session),
) -> ScheduleEntryEnvelope:
    entry = await ScheduleService(db).create(
        payload.date,
        payload.user_id,
        payload.start_time,
        payload.end_time,
        payload.note,
        created_by_id=current_user.id,
    )
    return ScheduleEntryEnvelope(entry=ScheduleEntryOut.model_validate(entry))


@router.patch(
    "/{entry_id}",
    response_model=ScheduleEntryEnvelope,
    summary="Update a schedule entry (admin only)",
    dependencies=[Depends(require_admin)],
)
async def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryUpdate = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> ScheduleEntryEnvelope:
    entry = await ScheduleService(db).update(entry_id, payload.changes())
    return ScheduleEntryEnvelope(entry=ScheduleEntryOut.model_validate(entry))


@router.delete(
    "/{entry_id}",
    response_model=SuccessOut,
    summary="Delete a schedule entry (admin only)",
    dependencies=[Depends(require_admin)],
)
async def delete_schedule_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_async_db_session),
) -> SuccessOut:
    await ScheduleService(db).delete(entry_id)
    return SuccessOut()
