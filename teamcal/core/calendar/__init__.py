"""
Calendar subsystem package.

• ``CalendarItem`` / ``CalendarItemParticipant`` - ORM-модели встреч и дедлайнов.
• ``CalendarService`` - CRUD и фильтрация списка.
"""
from __future__ import annotations

from .models import CalendarItem, CalendarItemParticipant  # noqa: F401
from .service import CalendarService  # noqa: F401

__all__: list[str] = [
    "CalendarItem",
    "CalendarItemParticipant",
    "CalendarService",
]
