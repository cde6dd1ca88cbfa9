# teamcal/core/permissions/service.py

"""Service-layer for per-module user permissions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.errors import NotFoundError, ValidationError
from teamcal.core.users.models import User
from teamcal.core.users.service import UsersService
from .models import Module, PermissionLevel, UserPermission
from .schemas import ModulePermission, StoredPermission, UserWithPermissions

log = logging.getLogger(__name__)

_PERMISSION_LIST = TypeAdapter(List[ModulePermission])

# INSERT ... ON CONFLICT DO UPDATE для поддерживаемых диалектов
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PermissionsService:
    """
    Асинхронный сервис модели прав.

    Хранит два независимых уровня (my/all) на пару (пользователь, модуль).
    Отсутствующая запись разрешается в NONE/NONE.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session
        self.users = UsersService(db_session)

    # ------------------------------------------------------------------ #
    #                           helpers                                  #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _resolve(stored: Iterable[UserPermission]) -> List[ModulePermission]:
        """Одна запись на каждый модуль в порядке объявления ``Module``."""
        by_module = {p.module: p for p in stored}
        resolved: List[ModulePermission] = []
        for module in Module:
            record = by_module.get(module)
            resolved.append(
                ModulePermission(
                    module=module,
                    my_level=record.my_level if record else PermissionLevel.NONE,
                    all_level=record.all_level if record else PermissionLevel.NONE,
                )
            )
        return resolved

    async def _stored_for(self, user_id: str) -> Sequence[UserPermission]:
        result = await self.db.scalars(
            select(UserPermission)
            .where(UserPermission.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.all()

    async def _require_user(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            log.warning("Permissions: user id=%s not found", user_id)
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _parse_entries(entries: Sequence[ModulePermission | Dict[str, Any]]) -> List[ModulePermission]:
        try:
            return _PERMISSION_LIST.validate_python(
                [e.model_dump() if isinstance(e, ModulePermission) else e for e in entries]
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                "Validation error",
                details=exc.errors(include_url=False, include_context=False),
            ) from exc

    def _upsert_statement(self, user_id: str, perms: Iterable[ModulePermission]):
        """
        Один INSERT ... ON CONFLICT (user_id, module) DO UPDATE: параллельный
        писатель, вставивший ту же пару раньше, просто перезаписывается.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Permission upsert is not supported for dialect {dialect!r}")
        stmt = insert(UserPermission).values([
            {"user_id": user_id, "module": p.module, "my_level": p.my_level, "all_level": p.all_level}
            for p in perms
        ])
        return stmt.on_conflict_do_update(
            index_elements=["user_id", "module"],
            set_={"my_level": stmt.excluded.my_level, "all_level": stmt.excluded.all_level},
        )

    # ------------------------------------------------------------------ #
    #                       Public business-methods                      #
    # ------------------------------------------------------------------ #

    async def get_permissions(self, user_id: str) -> List[ModulePermission]:
        """
        Возвращает уровни доступа пользователя по всем модулям.

        Args:
            user_id (str): ID пользователя.

        Returns:
            List[ModulePermission]: Ровно одна запись на модуль; NONE/NONE по умолчанию.

        Raises:
            NotFoundError: Пользователь не существует.
        """
        await self._require_user(user_id)
        return self._resolve(await self._stored_for(user_id))

    async def set_permissions(
        self,
        user_id: str,
        entries: Sequence[ModulePermission | Dict[str, Any]],
    ) -> List[StoredPermission]:
        """
        Upsert уровней по ключу (user_id, module). Модули, которых нет в списке,
        не меняются. Повторный вызов с тем же списком дает то же состояние.

        Args:
            user_id (str): ID пользователя.
            entries: Список ``{module, myLevel, allLevel}``.

        Returns:
            List[StoredPermission]: Записанные значения, по одному на модуль из запроса.

        Raises:
            ValidationError: Неизвестный модуль или уровень.
            NotFoundError: Пользователь не существует.
        """
        parsed = self._parse_entries(entries)
        await self._require_user(user_id)

        # Повтор модуля в одном запросе: побеждает последний
        wanted: Dict[Module, ModulePermission] = {p.module: p for p in parsed}
        if wanted:
            await self.db.execute(self._upsert_statement(user_id, wanted.values()))

        log.info("Updated %d permission(s) for user %s", len(wanted), user_id)
        return [
            StoredPermission(
                user_id=user_id, module=p.module, my_level=p.my_level, all_level=p.all_level
            )
            for p in wanted.values()
        ]

    async def check(
        self,
        user_id: str,
        module: Module | str,
        required: PermissionLevel | str,
        *,
        own: bool,
    ) -> bool:
        """
        Проверка "не ниже чем" по нужной оси: ``my`` для своих записей, ``all`` для чужих.
        """
        module = Module(module)
        required = PermissionLevel(required)
        for perm in await self.get_permissions(user_id):
            if perm.module == module:
                level = perm.my_level if own else perm.all_level
                return level.at_least(required)
        return False  # pragma: no cover

    async def list_users_with_permissions(self) -> List[UserWithPermissions]:
        """Все пользователи (по имени) с разрешенными уровнями по каждому модулю."""
        users = await self.users.list_users()
        result = await self.db.scalars(select(UserPermission).execution_options(populate_existing=True))
        by_user: Dict[str, List[UserPermission]] = {}
        for record in result.all():
            by_user.setdefault(record.user_id, []).append(record)

        return [
            UserWithPermissions(
                id=u.id,
                name=u.name,
                email=u.email,
                role=u.role,
                permissions=self._resolve(by_user.get(u.id, [])),
            )
            for u in users
        ]
