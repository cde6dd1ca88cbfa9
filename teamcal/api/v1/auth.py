# teamcal/api/v1/auth.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.config import settings
from teamcal.core.auth.rate_limit import RedisRateLimiter, get_rate_limiter
from teamcal.core.auth.schemas import LoginRequest, SuccessOut, UserEnvelope
from teamcal.core.auth.security import resolve_user
from teamcal.core.auth.session import clear_session_cookie, encode_session, set_session_cookie
from teamcal.core.errors import NotFoundError, RateLimitedError, StorageError, ValidationError
from teamcal.core.users.schemas import UserOut
from teamcal.core.users.service import UsersService
from teamcal.db.base import get_async_db_session

router = APIRouter(prefix="/auth", tags=["Authentication"])
log = logging.getLogger(__name__)


@router.post(
    "/login",
    response_model=UserEnvelope,
    summary="Log in by email",
    description="Finds the user by email and sets the signed session cookie (7 days).",
)
async def login(
    response: Response,
    payload: LoginRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> UserEnvelope:
    email = (payload.email or "").strip()
    if not email:
        raise ValidationError("Email is required")

    user = await UsersService(db).get_by_email(email)
    if user is None:
        log.info("Login attempt for unknown email: %s", email)
        raise NotFoundError("User not found")

    # Повторный логин просто перезаписывает cookie
    set_session_cookie(response, encode_session(user.id))
    log.info("User logged in: %s (%s)", user.email, user.role.value)
    return UserEnvelope(user=UserOut.model_validate(user))


@router.post("/logout", response_model=SuccessOut, summary="Log out (clears the session cookie)")
async def logout(response: Response) -> SuccessOut:
    clear_session_cookie(response)
    log.debug("Session cookie cleared")
    return SuccessOut()


@router.get(
    "/me",
    response_model=UserEnvelope,
    summary="Current user",
    description="Returns `{user: null}` when not logged in. Rate limited per client.",
    responses={429: {"description": "Rate limited"}, 500: {"description": "Database unavailable"}},
)
async def me(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db_session),
    limiter: RedisRateLimiter = Depends(get_rate_limiter),
):
    client_key = request.client.host if request.client else "unknown"
    limit = await limiter.hit(client_key)
    if not limit.allowed:
        raise RateLimitedError("Rate limit exceeded. Please try again later.")
    response.headers["X-RateLimit-Remaining"] = str(limit.remaining)

    try:
        user = await resolve_user(db, request.cookies.get(settings.SESSION_COOKIE_NAME))
    except StorageError:
        # Отдельный флаг: клиент должен отличать "БД недоступна" от "не залогинен"
        return JSONResponse(
            status_code=500,
            content={
                "user": None,
                "error": "DatabaseError",
                "message": "Database connection error while resolving the session.",
            },
            headers={"X-RateLimit-Remaining": str(limit.remaining)},
        )

    return UserEnvelope(user=UserOut.model_validate(user) if user else None)
