# teamcal/core/calendar/models.py

from __future__ import annotations

import datetime as dt
import enum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from teamcal.core.users.models import new_id
from teamcal.db.base import Base

if TYPE_CHECKING:  # pragma: no cover
    from teamcal.core.users.models import User


class CalendarItemType(str, enum.Enum):
    MEETING = "MEETING"
    DEADLINE = "DEADLINE"


class ItemStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    DONE = "DONE"
    CANCELED = "CANCELED"


class ParticipantRole(str, enum.Enum):
    OWNER = "OWNER"
    PARTICIPANT = "PARTICIPANT"
    RESPONSIBLE = "RESPONSIBLE"


class RsvpStatus(str, enum.Enum):
    YES = "YES"
    NO = "NO"
    MAYBE = "MAYBE"


class CalendarItem(Base):
    """
    ORM модель встречи или дедлайна.

    ``end_at`` может отсутствовать; порядок start/end не проверяется.
    """
    __tablename__ = 'calendar_items'
    __table_args__ = (
        Index('ix_calendar_items_type_status', 'type', 'status'),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    type: Mapped[CalendarItemType] = mapped_column(Enum(CalendarItemType, native_enum=False, length=16), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    all_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[ItemStatus] = mapped_column(
        Enum(ItemStatus, native_enum=False, length=16), nullable=False, default=ItemStatus.DRAFT
    )
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('users.id', name='fk_calendar_items_created_by_id'), nullable=False, index=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    created_by: Mapped["User"] = relationship()
    participants: Mapped[List["CalendarItemParticipant"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CalendarItemParticipant.position",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<CalendarItem id={self.id!r} type={self.type.value} title={self.title!r}>"


class CalendarItemParticipant(Base):
    __tablename__ = 'calendar_item_participants'

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    item_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('calendar_items.id', ondelete='CASCADE', name='fk_participants_item_id'),
        nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('users.id', ondelete='CASCADE', name='fk_participants_user_id'),
        nullable=False, index=True,
    )
    role: Mapped[ParticipantRole] = mapped_column(
        Enum(ParticipantRole, native_enum=False, length=16), nullable=False, default=ParticipantRole.PARTICIPANT
    )
    rsvp: Mapped[Optional[RsvpStatus]] = mapped_column(Enum(RsvpStatus, native_enum=False, length=8), nullable=True)
    # Порядок участников как в запросе
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    item: Mapped["CalendarItem"] = relationship(back_populates="participants")
    user: Mapped["User"] = relationship()
