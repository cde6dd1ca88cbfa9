# teamcal/core/calendar/service.py

"""Service-layer for calendar items (meetings and deadlines)."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Iterable, List, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teamcal.core.errors import NotFoundError, ValidationError, field_error
from teamcal.core.utils import to_utc
from teamcal.core.users.service import UsersService
from .models import (
    CalendarItem,
    CalendarItemParticipant,
    CalendarItemType,
    ItemStatus,
)
from .schemas import CalendarItemCreate, CalendarItemsQuery, ParticipantIn

log = logging.getLogger(__name__)

_UPDATABLE = (
    "type", "title", "description", "start_at", "end_at",
    "all_day", "status", "location", "participants",
)


class CalendarService:
    """
    Асинхронный сервис встреч и дедлайнов.
    Владелец элемента - всегда тот, кто его создал.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session
        self.users = UsersService(db_session)

    # ------------------------------------------------------------------ #
    #                           helpers                                  #
    # ------------------------------------------------------------------ #

    def _loaded(self):
        return (
            select(CalendarItem)
            .options(
                selectinload(CalendarItem.created_by),
                selectinload(CalendarItem.participants).selectinload(CalendarItemParticipant.user),
            )
            .execution_options(populate_existing=True)
        )

    async def get_item(self, item_id: str) -> CalendarItem | None:
        result = await self.db.scalars(self._loaded().where(CalendarItem.id == item_id))
        return result.one_or_none()

    async def _check_participants(self, participants: Sequence[ParticipantIn]) -> None:
        wanted = [p.user_id for p in participants]
        missing = set(wanted) - await self.users.existing_ids(wanted)
        if missing:
            raise ValidationError(
                "Invalid request body",
                details=[field_error("participants", f"Unknown user: {uid}") for uid in sorted(missing)],
            )

    def _build_participants(self, item_id: str, participants: Iterable[ParticipantIn]) -> List[CalendarItemParticipant]:
        return [
            CalendarItemParticipant(
                item_id=item_id, user_id=p.user_id, role=p.role, rsvp=p.rsvp, position=index
            )
            for index, p in enumerate(participants)
        ]

    @staticmethod
    def _warn_if_inverted(item_id: str | None, start_at: dt.datetime, end_at: dt.datetime | None) -> None:
        if end_at is not None and end_at < start_at:
            # Не исправляем и не отклоняем: такие диапазоны хранятся как есть
            log.warning("Calendar item %s has endAt (%s) before startAt (%s)",
                        item_id or "<new>", end_at.isoformat(), start_at.isoformat())

    # ------------------------------------------------------------------ #
    #                       Public business-methods                      #
    # ------------------------------------------------------------------ #

    async def create(self, data: CalendarItemCreate, *, created_by_id: str) -> CalendarItem:
        """
        Создает элемент вместе с участниками (в одной транзакции).

        Args:
            data (CalendarItemCreate): Поля элемента и необязательный список участников.
            created_by_id (str): Владелец (текущий администратор).

        Returns:
            CalendarItem: Созданный элемент с created_by и participants.

        Raises:
            ValidationError: Участник ссылается на несуществующего пользователя.
        """
        participants = data.participants or []
        await self._check_participants(participants)

        start_at = to_utc(data.start_at)
        end_at = to_utc(data.end_at)
        self._warn_if_inverted(None, start_at, end_at)

        item = CalendarItem(
            type=data.type,
            title=data.title,
            description=data.description,
            start_at=start_at,
            end_at=end_at,
            all_day=data.all_day,
            status=data.status,
            location=data.location,
            created_by_id=created_by_id,
        )
        self.db.add(item)
        await self.db.flush()
        self.db.add_all(self._build_participants(item.id, participants))
        await self.db.flush()

        log.info("Created calendar item id=%s (%s) with %d participant(s)",
                 item.id, item.type.value, len(participants))
        return await self.get_item(item.id)

    async def update(self, item_id: str, changes: Mapping[str, Any]) -> CalendarItem:
        """
        Частичное обновление. Участники, если переданы, удаляются и создаются заново.

        Raises:
            NotFoundError: Элемента нет.
            ValidationError: Неизвестный участник или поле.
        """
        item = await self.get_item(item_id)
        if item is None:
            raise NotFoundError("Calendar item not found")

        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(
                "Invalid request body",
                details=[field_error(name, "Unknown field") for name in sorted(unknown)],
            )

        participants = changes.get("participants")
        if participants is not None:
            participants = [p if isinstance(p, ParticipantIn) else ParticipantIn.model_validate(p)
                            for p in participants]
            await self._check_participants(participants)

        for name, value in changes.items():
            if name == "participants":
                continue
            if name in ("start_at", "end_at"):
                value = to_utc(value)
            setattr(item, name, value)
        self._warn_if_inverted(item.id, to_utc(item.start_at), to_utc(item.end_at))

        if participants is not None:
            # Полная замена: старые строки удаляются (delete-orphan), новые создаются
            item.participants.clear()
            await self.db.flush()
            item.participants.extend(self._build_participants(item.id, participants))

        await self.db.flush()
        log.info("Updated calendar item id=%s (%s)", item.id, ", ".join(sorted(changes)) or "no changes")
        return await self.get_item(item.id)

    async def delete(self, item_id: str) -> None:
        item = await self.db.get(CalendarItem, item_id)
        if item is None:
            raise NotFoundError("Calendar item not found")
        # Участники удаляются каскадом (ON DELETE CASCADE)
        await self.db.delete(item)
        await self.db.flush()
        log.info("Deleted calendar item id=%s", item_id)

    async def list_items(self, filters: CalendarItemsQuery | None = None) -> Sequence[CalendarItem]:
        """
        Список элементов по startAt (по возрастанию).

        ``search`` - подстрока в title с учетом регистра.
        """
        filters = filters or CalendarItemsQuery()
        stmt = self._loaded()
        if filters.from_ is not None:
            stmt = stmt.where(CalendarItem.start_at >= to_utc(filters.from_))
        if filters.to is not None:
            stmt = stmt.where(CalendarItem.start_at <= to_utc(filters.to))
        if filters.type is not None:
            stmt = stmt.where(CalendarItem.type == CalendarItemType(filters.type))
        if filters.status is not None:
            stmt = stmt.where(CalendarItem.status == ItemStatus(filters.status))
        if filters.search:
            stmt = stmt.where(CalendarItem.title.contains(filters.search, autoescape=True))
        stmt = stmt.order_by(CalendarItem.start_at.asc(), CalendarItem.id)

        result = await self.db.scalars(stmt)
        items = result.all()
        if filters.search:
            # LIKE в SQLite регистронезависим для ASCII
            items = [i for i in items if filters.search in i.title]
        log.debug("Found %d calendar items", len(items))
        return items
