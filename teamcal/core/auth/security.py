# teamcal/core/auth/security.py

from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.config import settings
from teamcal.core.errors import ForbiddenError, StorageError, UnauthorizedError
from teamcal.core.users.models import Role, User
from teamcal.db.base import get_async_db_session

from .session import decode_session

log = logging.getLogger(__name__)


async def resolve_user(db: AsyncSession, token: str | None) -> User | None:
    """
    Токен сессии -> user_id -> пользователь.

    Args:
        db (AsyncSession): Асинхронная сессия БД.
        token (str | None): Значение cookie сессии.

    Returns:
        User | None: Пользователь или None (нет токена, токен невалиден,
                     пользователь удален).

    Raises:
        StorageError: БД недоступна. "Не залогинен" и "не смогли проверить" различаются.
    """
    user_id = decode_session(token)
    if user_id is None:
        return None
    try:
        user = await db.get(User, user_id)
    except SQLAlchemyError as exc:
        log.exception("Storage failure while resolving user id=%s from session", user_id)
        await db.rollback()
        raise StorageError("Database unavailable while resolving identity") from exc
    if user is None:
        log.warning("User with id %s from valid session not found in DB.", user_id)
    return user


# --- FastAPI Dependencies ---

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_db_session),
) -> User | None:
    """FastAPI зависимость: текущий пользователь или None (не ошибка)."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return await resolve_user(db, token)


def ensure_authenticated(user: User | None) -> User:
    if user is None:
        raise UnauthorizedError("Unauthorized")
    return user


def ensure_admin(user: User | None) -> User:
    user = ensure_authenticated(user)
    if user.role != Role.ADMIN:
        log.warning("Admin access denied for user %s (role=%s)", user.id, user.role.value)
        raise ForbiddenError("Forbidden: Admin access required")
    return user


async def require_auth(current_user: User | None = Depends(get_current_user)) -> User:
    """
    Любой аутентифицированный пользователь.

    Raises:
        UnauthorizedError: 401, если сессии нет.
    """
    return ensure_authenticated(current_user)


async def require_admin(current_user: User | None = Depends(get_current_user)) -> User:
    """
    Только ADMIN.

    Raises:
        UnauthorizedError: 401, если сессии нет.
        ForbiddenError: 403, если роль не ADMIN.
    """
    return ensure_admin(current_user)


__all__ = [
    "resolve_user", "get_current_user", "ensure_authenticated", "ensure_admin",
    "require_auth", "require_admin",
]
