from __future__ import annotations
import logging

from fastapi import FastAPI

from teamcal.api.errors import register_exception_handlers
from teamcal.api.v1.auth import router as auth_router
from teamcal.api.v1.calendar import router as calendar_router
from teamcal.api.v1.health import router as health_router
from teamcal.api.v1.permissions import router as permissions_router
from teamcal.api.v1.schedule import router as schedule_router
from teamcal.api.v1.users import router as users_router
from teamcal.config import settings

logging.basicConfig(level=settings.LOG_LEVEL.upper())
log = logging.getLogger(__name__)

description = """
Team calendar: meetings, deadlines and the daily staff schedule.

* Session: signed HTTP-only cookie, issued by `POST /auth/login`.
* Mutations are limited to ADMIN users.
"""
tags_metadata = [
    {"name": "Authentication", "description": "Login, logout and the current user."},
    {"name": "Users", "description": "User directory."},
    {"name": "Admin: Permissions", "description": "Per-module access levels (admin only)."},
    {"name": "Calendar", "description": "Meetings and deadlines."},
    {"name": "Schedule", "description": "Daily working windows, one per user per day."},
    {"name": "Health", "description": "DB and Redis liveness."},
]

app = FastAPI(
    title="Team Calendar API",
    description=description,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(permissions_router)
app.include_router(calendar_router)
app.include_router(schedule_router)
app.include_router(health_router)

log.info("\U0001F331 FastAPI application configured. Environment: %s", settings.ENVIRONMENT)


@app.on_event("startup")
async def startup_event() -> None:
    log.info("\U0001F680 FastAPI application startup complete.")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    log.info("\U0001F44B FastAPI application shutdown.")
