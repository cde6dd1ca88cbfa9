# teamcal/core/schedule/models.py

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from teamcal.core.users.models import new_id
from teamcal.db.base import Base

if TYPE_CHECKING:  # pragma: no cover
    from teamcal.core.users.models import User

MINUTES_PER_DAY = 24 * 60


class ScheduleEntry(Base):
    """
    Рабочее окно одного сотрудника на один день.

    Время хранится в минутах от полуночи (0..1439). На пару (user_id, date)
    допускается ровно одна запись - это гарантирует уникальный индекс,
    сервис лишь проверяет заранее, чтобы вернуть понятную 409.
    """
    __tablename__ = 'schedule_entries'
    __table_args__ = (
        UniqueConstraint('user_id', 'date', name='uq_schedule_entries_user_date'),
        CheckConstraint('end_time > start_time', name='ck_schedule_entries_time_order'),
        CheckConstraint('start_time >= 0 AND start_time < 1440', name='ck_schedule_entries_start_range'),
        CheckConstraint('end_time >= 0 AND end_time < 1440', name='ck_schedule_entries_end_range'),
        Index('ix_schedule_entries_date_start', 'date', 'start_time'),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('users.id', ondelete='CASCADE', name='fk_schedule_entries_user_id'),
        nullable=False, index=True,
    )
    start_time: Mapped[int] = mapped_column(Integer, nullable=False)
    end_time: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('users.id', name='fk_schedule_entries_created_by_id'), nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user: Mapped["User"] = relationship(foreign_keys=[user_id])
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_id])

    def __repr__(self) -> str:  # pragma: no cover
        return (f"<ScheduleEntry id={self.id!r} user_id={self.user_id!r} "
                f"date={self.date.isoformat()} {self.start_time}-{self.end_time}>")
