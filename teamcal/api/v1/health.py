from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from teamcal.config import settings
from teamcal.db.base import engine

router = APIRouter(tags=["Health"])
log = logging.getLogger(__name__)


@router.get("/healthz", status_code=status.HTTP_200_OK)
async def healthz() -> dict[str, str]:
    out: dict[str, str] = {}

    # DB
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        out["db"] = "ok"
    except SQLAlchemyError as exc:
        log.exception("DB health check failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="db error") from exc

    # Redis
    r = Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
    try:
        if not await r.ping():
            raise RedisError("PING returned a falsy reply")
        out["cache"] = "ok"
    except RedisError as exc:
        log.exception("Redis health check failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="cache error") from exc
    finally:
        await r.aclose()

    return out
