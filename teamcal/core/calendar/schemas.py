# teamcal/core/calendar/schemas.py
"""
Pydantic-схемы календарных элементов.

Используются в:
    * teamcal/api/v1/calendar.py      ― REST-эндпоинты /calendar/items
    * teamcal/core/calendar/service.py ― входные данные create/update
"""

from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from teamcal.core.users.schemas import UserBrief
from teamcal.core.utils import to_utc
from .models import CalendarItemType, ItemStatus, ParticipantRole, RsvpStatus

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CalendarItemsQuery(BaseModel):
    """Фильтры списка; ``from``/``to`` включительно по startAt."""
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[dt.datetime] = Field(None, alias="from")
    to: Optional[dt.datetime] = None
    type: Optional[CalendarItemType] = None
    status: Optional[ItemStatus] = None
    search: Optional[str] = None


class ParticipantIn(BaseModel):
    model_config = _camel

    user_id: str = Field(..., min_length=1)
    role: ParticipantRole = ParticipantRole.PARTICIPANT
    rsvp: Optional[RsvpStatus] = None


class CalendarItemCreate(BaseModel):
    model_config = _camel

    type: CalendarItemType
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    start_at: dt.datetime
    end_at: Optional[dt.datetime] = None
    all_day: bool = False
    status: ItemStatus = ItemStatus.DRAFT
    location: Optional[str] = Field(None, max_length=255)
    participants: Optional[List[ParticipantIn]] = None


class CalendarItemUpdate(BaseModel):
    """Частичное обновление. ``participants`` (если передан) заменяет список целиком."""
    model_config = _camel

    type: Optional[CalendarItemType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    start_at: Optional[dt.datetime] = None
    end_at: Optional[dt.datetime] = None
    all_day: Optional[bool] = None
    status: Optional[ItemStatus] = None
    location: Optional[str] = Field(None, max_length=255)
    participants: Optional[List[ParticipantIn]] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "CalendarItemUpdate":
        # null допустим только для description / endAt / location
        for name in ("type", "title", "start_at", "all_day", "status", "participants"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ParticipantOut(BaseModel):
    model_config = _camel

    id: str
    item_id: str
    user_id: str
    role: ParticipantRole
    rsvp: Optional[RsvpStatus] = None
    user: UserBrief


class CalendarItemOut(BaseModel):
    model_config = _camel

    id: str
    type: CalendarItemType
    title: str
    description: Optional[str] = None
    start_at: dt.datetime
    end_at: Optional[dt.datetime] = None
    all_day: bool
    status: ItemStatus
    location: Optional[str] = None
    created_by_id: str
    created_at: dt.datetime
    updated_at: dt.datetime
    created_by: UserBrief
    participants: List[ParticipantOut] = Field(default_factory=list)

    @field_serializer("start_at", "end_at", "created_at", "updated_at")
    def serialize_utc(self, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return to_utc(value)


class CalendarItemEnvelope(BaseModel):
    item: CalendarItemOut


class CalendarItemsOut(BaseModel):
    items: List[CalendarItemOut]


__all__: list[str] = [
    "CalendarItemsQuery", "ParticipantIn", "CalendarItemCreate", "CalendarItemUpdate",
    "ParticipantOut", "CalendarItemOut", "CalendarItemEnvelope", "CalendarItemsOut",
]
