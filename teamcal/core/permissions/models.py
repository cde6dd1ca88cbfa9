# teamcal/core/permissions/models.py

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamcal.db.base import Base

if TYPE_CHECKING:  # pragma: no cover
    from teamcal.core.users.models import User


class Module(str, enum.Enum):
    MEETINGS = "meetings"
    DEADLINES = "deadlines"
    SCHEDULE = "schedule"


class PermissionLevel(str, enum.Enum):
    """NONE < VIEW < EDIT."""
    NONE = "NONE"
    VIEW = "VIEW"
    EDIT = "EDIT"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def at_least(self, other: "PermissionLevel") -> bool:
        return self.rank >= PermissionLevel(other).rank


_LEVEL_RANK = {
    PermissionLevel.NONE: 0,
    PermissionLevel.VIEW: 1,
    PermissionLevel.EDIT: 2,
}


class UserPermission(Base):
    """
    Уровни доступа пользователя к модулю. Не больше одной строки на (user_id, module).
    Отсутствие строки означает NONE/NONE.
    """
    __tablename__ = "user_permissions"
    __table_args__ = (UniqueConstraint('user_id', 'module', name='uq_user_permissions_user_module'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey('users.id', ondelete='CASCADE', name='fk_user_permissions_user_id'),
        nullable=False, index=True,
    )
    module: Mapped[Module] = mapped_column(
        Enum(Module, native_enum=False, length=16, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    my_level: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, native_enum=False, length=8), nullable=False, default=PermissionLevel.NONE
    )
    all_level: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, native_enum=False, length=8), nullable=False, default=PermissionLevel.NONE
    )

    user: Mapped["User"] = relationship(back_populates="permissions")

    def __repr__(self) -> str:  # pragma: no cover
        return (f"<UserPermission user_id={self.user_id!r} module={self.module.value} "
                f"my={self.my_level.value} all={self.all_level.value}>")
