# teamcal/core/schedule/schemas.py
"""
Pydantic-схемы записей расписания.

Имена полей на проводе - camelCase (``startTime``, ``userId``), внутри - snake_case.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from teamcal.core.users.schemas import UserBrief, UserNameOut
from teamcal.core.utils import to_utc

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _check_date_format(value: Any) -> Any:
    if isinstance(value, str) and not DATE_RE.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return value


class ScheduleQuery(BaseModel):
    date: dt.date

    date_format = field_validator("date", mode="before")(_check_date_format)


class ScheduleEntryCreate(BaseModel):
    model_config = _camel

    date: dt.date
    user_id: str = Field(..., min_length=1)
    start_time: int = Field(..., ge=0, le=1439)
    end_time: int = Field(..., ge=0, le=1439)
    note: Optional[str] = Field(None, max_length=500)

    date_format = field_validator("date", mode="before")(_check_date_format)

    @model_validator(mode="after")
    def check_time_order(self) -> "ScheduleEntryCreate":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ScheduleEntryUpdate(BaseModel):
    """Частичное обновление; отсутствующие поля не трогаются, ``note: null`` очищает заметку."""
    model_config = _camel

    date: Optional[dt.date] = None
    user_id: Optional[str] = Field(None, min_length=1)
    start_time: Optional[int] = Field(None, ge=0, le=1439)
    end_time: Optional[int] = Field(None, ge=0, le=1439)
    note: Optional[str] = Field(None, max_length=500)

    date_format = field_validator("date", mode="before")(_check_date_format)

    @model_validator(mode="after")
    def check_time_order(self) -> "ScheduleEntryUpdate":
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ScheduleEntryOut(BaseModel):
    model_config = _camel

    id: str
    date: dt.date
    user_id: str
    start_time: int
    end_time: int
    note: Optional[str] = None
    created_by_id: str
    created_at: dt.datetime
    updated_at: dt.datetime
    user: UserBrief
    created_by: UserNameOut

    @field_serializer("created_at", "updated_at")
    def serialize_utc(self, value: dt.datetime) -> dt.datetime:
        return to_utc(value)


class ScheduleEntryEnvelope(BaseModel):
    entry: ScheduleEntryOut


class ScheduleEntriesOut(BaseModel):
    entries: List[ScheduleEntryOut]


__all__: list[str] = [
    "ScheduleQuery", "ScheduleEntryCreate", "ScheduleEntryUpdate",
    "ScheduleEntryOut", "ScheduleEntryEnvelope", "ScheduleEntriesOut",
]
