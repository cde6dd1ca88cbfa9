# teamcal/core/schedule/service.py

"""Service-layer for staff schedule entries."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teamcal.core.errors import ConflictError, NotFoundError, ValidationError, field_error
from teamcal.core.users.models import User
from .models import MINUTES_PER_DAY, ScheduleEntry
from .utils import format_time_range

log = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Schedule entry already exists for this user on this date"
_UPDATABLE = ("date", "user_id", "start_time", "end_time", "note")
_REQUIRED_ON_UPDATE = ("date", "user_id", "start_time", "end_time")


def normalize_day(value: dt.date | dt.datetime | str) -> dt.date:
    """Отбрасывает время суток: запись расписания привязана к календарному дню."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(value[:10])
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "Date must be in YYYY-MM-DD format", details=[field_error("date", "Invalid date")]
        ) from exc


def validate_time_range(start_time: int, end_time: int) -> None:
    """
    Raises:
        ValidationError: время вне [0, 1439] или end_time <= start_time.
    """
    details: List[Dict[str, Any]] = []
    for name, value in (("startTime", start_time), ("endTime", end_time)):
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < MINUTES_PER_DAY:
            details.append(field_error(name, "Must be an integer between 0 and 1439"))
    if details:
        raise ValidationError("Invalid time range", details=details)
    if end_time <= start_time:
        raise ValidationError(
            "End time must be after start time",
            details=[field_error("endTime", "End time must be after start time")],
        )


class ScheduleService:
    """
    Асинхронный сервис расписания.

    Инвариант: не больше одной записи на (user_id, date). Сервис проверяет это
    заранее (чтобы вернуть 409 с понятным текстом), а окончательно гарантирует
    уникальный индекс: IntegrityError на flush тоже превращается в ConflictError.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        """
        Args:
            db_session (AsyncSession): Активная асинхронная сессия SQLAlchemy.
        """
        self.db: AsyncSession = db_session

    # ------------------------------------------------------------------ #
    #                           helpers                                  #
    # ------------------------------------------------------------------ #

    def _loaded(self):
        return (
            select(ScheduleEntry)
            .options(selectinload(ScheduleEntry.user), selectinload(ScheduleEntry.created_by))
            .execution_options(populate_existing=True)
        )

    async def get_entry(self, entry_id: str) -> ScheduleEntry | None:
        result = await self.db.scalars(self._loaded().where(ScheduleEntry.id == entry_id))
        return result.one_or_none()

    async def _find_conflict(self, user_id: str, day: dt.date, exclude_id: str | None = None) -> ScheduleEntry | None:
        stmt = select(ScheduleEntry).where(ScheduleEntry.user_id == user_id, ScheduleEntry.date == day)
        if exclude_id is not None:
            stmt = stmt.where(ScheduleEntry.id != exclude_id)
        result = await self.db.scalars(stmt.limit(1))
        return result.first()

    async def _require_user(self, user_id: str) -> None:
        if await self.db.get(User, user_id) is None:
            raise ValidationError("User does not exist", details=[field_error("userId", "Unknown user")])

    async def _flush_or_conflict(self, user_id: str, day: dt.date) -> None:
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # Параллельная запись прошла пред-проверку раньше нас
            log.warning("Unique constraint rejected schedule entry for user %s on %s: %s",
                        user_id, day.isoformat(), exc.orig)
            raise ConflictError(CONFLICT_MESSAGE) from exc

    # ------------------------------------------------------------------ #
    #                       Public business-methods                      #
    # ------------------------------------------------------------------ #

    async def create(
        self,
        date: dt.date | dt.datetime | str,
        user_id: str,
        start_time: int,
        end_time: int,
        note: str | None = None,
        *,
        created_by_id: str,
    ) -> ScheduleEntry:
        """
        Создает запись расписания.

        Args:
            date: День (время суток отбрасывается).
            user_id (str): Сотрудник.
            start_time (int): Начало, минуты от полуночи.
            end_time (int): Конец, минуты от полуночи.
            note (str | None, optional): Заметка.
            created_by_id (str): Кто создал (администратор).

        Returns:
            ScheduleEntry: Созданная запись с подгруженными user/created_by.

        Raises:
            ValidationError: Неверный диапазон времени или неизвестный пользователь.
            ConflictError: У пользователя уже есть запись на этот день.
        """
        day = normalize_day(date)
        validate_time_range(start_time, end_time)
        await self._require_user(user_id)

        if await self._find_conflict(user_id, day):
            log.info("Schedule conflict for user %s on %s", user_id, day.isoformat())
            raise ConflictError(CONFLICT_MESSAGE)

        entry = ScheduleEntry(
            date=day,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            note=note,
            created_by_id=created_by_id,
        )
        self.db.add(entry)
        await self._flush_or_conflict(user_id, day)
        log.info("Created schedule entry id=%s for user %s on %s (%s)",
                 entry.id, user_id, day.isoformat(), format_time_range(start_time, end_time))
        return await self.get_entry(entry.id)

    async def update(self, entry_id: str, changes: Mapping[str, Any]) -> ScheduleEntry:
        """
        Частичное обновление записи.

        Проверка уникальности запускается, только если меняются ``date`` или
        ``user_id``; проверка порядка времени - только если меняется время.
        Итоговые start/end собираются из новых и старых значений.

        Raises:
            NotFoundError: Записи нет.
            ValidationError: Неверные значения.
            ConflictError: Новая пара (user_id, date) занята другой записью.
        """
        entry = await self.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Schedule entry not found")

        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(
                "Invalid request body",
                details=[field_error(name, "Unknown field") for name in sorted(unknown)],
            )
        nulls = [name for name in _REQUIRED_ON_UPDATE if name in changes and changes[name] is None]
        if nulls:
            raise ValidationError(
                "Invalid request body",
                details=[field_error(name, "Field cannot be null") for name in nulls],
            )

        new_day = normalize_day(changes["date"]) if "date" in changes else entry.date
        new_user_id = changes.get("user_id", entry.user_id)

        if "start_time" in changes or "end_time" in changes:
            validate_time_range(
                changes.get("start_time", entry.start_time),
                changes.get("end_time", entry.end_time),
            )

        if "date" in changes or "user_id" in changes:
            if new_user_id != entry.user_id:
                await self._require_user(new_user_id)
            if await self._find_conflict(new_user_id, new_day, exclude_id=entry.id):
                log.info("Schedule conflict on update of %s: user %s on %s",
                         entry.id, new_user_id, new_day.isoformat())
                raise ConflictError(CONFLICT_MESSAGE)

        entry.date = new_day
        entry.user_id = new_user_id
        if "start_time" in changes:
            entry.start_time = changes["start_time"]
        if "end_time" in changes:
            entry.end_time = changes["end_time"]
        if "note" in changes:
            entry.note = changes["note"]

        await self._flush_or_conflict(new_user_id, new_day)
        log.info("Updated schedule entry id=%s (%s)", entry.id, ", ".join(sorted(changes)) or "no changes")
        return await self.get_entry(entry.id)

    async def delete(self, entry_id: str) -> None:
        entry = await self.db.get(ScheduleEntry, entry_id)
        if entry is None:
            raise NotFoundError("Schedule entry not found")
        await self.db.delete(entry)
        await self.db.flush()
        log.info("Deleted schedule entry id=%s", entry_id)

    async def list_by_date(self, date: dt.date | dt.datetime | str) -> Sequence[ScheduleEntry]:
        """Записи за день: по start_time, при равенстве - по имени сотрудника."""
        day = normalize_day(date)
        stmt = (
            self._loaded()
            .join(User, User.id == ScheduleEntry.user_id)
            .where(ScheduleEntry.date == day)
            .order_by(ScheduleEntry.start_time.asc(), User.name.asc())
        )
        result = await self.db.scalars(stmt)
        entries = result.all()
        log.debug("Found %d schedule entries for %s", len(entries), day.isoformat())
        return entries
