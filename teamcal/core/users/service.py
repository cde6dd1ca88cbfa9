# teamcal/core/users/service.py

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Role, User

log = logging.getLogger(__name__)


class UsersService:
    """
    Асинхронный сервис для чтения пользователей.
    Пользователи создаются вне API (seed / администратор), здесь только чтение
    и идемпотентное ``ensure_user`` для сидинга.
    """
    model = User

    def __init__(self, db_session: AsyncSession):
        """
        Args:
            db_session (AsyncSession): Активная сессия SQLAlchemy.
        """
        self.db: AsyncSession = db_session

    async def get_by_id(self, user_id: str) -> User | None:
        log.debug("Getting user by id=%s", user_id)
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        log.debug("Getting user by email=%s", email)
        result = await self.db.scalars(select(User).where(User.email == email))
        return result.one_or_none()

    async def list_users(self) -> Sequence[User]:
        """Все пользователи, отсортированные по имени."""
        result = await self.db.scalars(select(User).order_by(User.name, User.id))
        users = result.all()
        log.debug("Found %d users", len(users))
        return users

    async def existing_ids(self, user_ids: Sequence[str]) -> set[str]:
        """Возвращает подмножество ``user_ids``, которое реально есть в таблице."""
        if not user_ids:
            return set()
        result = await self.db.scalars(select(User.id).where(User.id.in_(set(user_ids))))
        return set(result.all())

    async def ensure_user(self, email: str, name: str, role: Role = Role.USER) -> User:
        """
        Находит пользователя по email или создает нового.

        Args:
            email (str): Email (уникальный).
            name (str): Отображаемое имя.
            role (Role, optional): Роль для нового пользователя. Defaults to Role.USER.

        Returns:
            User: Найденный или созданный пользователь.
        """
        user = await self.get_by_email(email)
        if user:
            log.debug("Found existing user: %r", user)
            return user
        log.info("User with email=%s not found, creating (role=%s).", email, role.value)
        user = User(email=email, name=name, role=role)
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user
