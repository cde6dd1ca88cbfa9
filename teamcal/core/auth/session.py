# teamcal/core/auth/session.py
"""
Session token: the user id signed into a JWT that lives in an HTTP-only cookie.

Серверной таблицы сессий нет: токен сам по себе и есть сессия. Подделка
отсекается подписью (HMAC), срок жизни - полем ``exp``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Response
from jose import jwt, JWTError

from teamcal.config import settings

log = logging.getLogger(__name__)


def encode_session(user_id: str, now: datetime | None = None) -> str:
    """
    Создает подписанный токен сессии.

    Args:
        user_id (str): ID пользователя (станет ``sub``).
        now (datetime | None, optional): Момент выдачи (для тестов). Defaults to UTC now.

    Returns:
        str: JWT токен с абсолютным сроком жизни ``SESSION_MAX_AGE_DAYS``.
    """
    if not user_id:
        raise ValueError("user_id is required to create a session")
    issued = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(days=settings.SESSION_MAX_AGE_DAYS)).timestamp()),
    }
    token = jwt.encode(payload, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)
    log.debug("Created session token for sub: %s", user_id)
    return token


def decode_session(token: str | None) -> str | None:
    """
    Возвращает user_id из токена или None, если токена нет, он испорчен,
    подделан или истек. Никогда не бросает исключений.
    """
    if not token:
        return None
    try:
        payload: dict[str, Any] = jwt.decode(
            token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM]
        )
    except JWTError as e:
        log.info("Session token rejected: %s", e)
        return None
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        log.warning("Session token rejected: 'sub' claim missing.")
        return None
    return user_id


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=bool(settings.SESSION_COOKIE_SECURE),
    )


def clear_session_cookie(response: Response) -> None:
    # Идемпотентно: удаление отсутствующей cookie - тоже успех
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=bool(settings.SESSION_COOKIE_SECURE),
    )


__all__ = ["encode_session", "decode_session", "set_session_cookie", "clear_session_cookie"]
