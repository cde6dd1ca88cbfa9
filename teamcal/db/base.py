# teamcal/db/base.py

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    async_sessionmaker,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError

from teamcal.config import settings
from teamcal.core.errors import AppError

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


# --- Engine & Session factory ---
if settings.ENVIRONMENT == "test":
    _test_url = settings.DATABASE_URL if settings.DATABASE_URL.startswith("sqlite+aiosqlite") \
        else "sqlite+aiosqlite:///:memory:"
    log.info("Using in-memory SQLite database (aiosqlite) for tests: %s", _test_url)
    # StaticPool: одно соединение на весь процесс, иначе :memory: у каждого своя
    engine = create_async_engine(
        _test_url, connect_args={"check_same_thread": False}, poolclass=StaticPool, echo=False
    )
else:
    log.info("Using ASYNC PostgreSQL database: %s", settings.DATABASE_URL[:25])
    if not settings.DATABASE_URL.startswith("postgresql+asyncpg://"):
        log.warning("DATABASE_URL does not start with 'postgresql+asyncpg://'.")
        raise ValueError("DATABASE_URL must use 'asyncpg' driver for async operations.")

    engine = create_async_engine(
        settings.DATABASE_URL, echo=(settings.ENVIRONMENT == "dev"), pool_pre_ping=True
    )

async_session_factory = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


@event.listens_for(engine.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite не проверяет FK (и не делает ON DELETE CASCADE) без этого PRAGMA
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: Creates and yields an async session, handling commit/rollback.
    """
    session: AsyncSession = async_session_factory()
    session_id_for_log = id(session)
    log.debug("get_async_db_session: Session %s created, yielding...", session_id_for_log)
    try:
        yield session
        await session.commit()
        log.debug("get_async_db_session: Session %s committed.", session_id_for_log)
    except AppError as exc:
        # Ожидаемые бизнес-ошибки (404, 409, ...) - без трейсбэка
        log.debug("get_async_db_session: %s in session %s, rolling back...",
                  exc.kind.value, session_id_for_log)
        await session.rollback()
        raise
    except SQLAlchemyError:
        log.exception("get_async_db_session: SQLAlchemyError in session %s, rolling back...",
                      session_id_for_log)
        await session.rollback()
        raise
    except Exception:
        log.exception("get_async_db_session: Non-DB Exception in session %s scope, rolling back...",
                      session_id_for_log)
        await session.rollback()
        raise
    finally:
        await session.close()


@contextlib.asynccontextmanager
async def async_session_context() -> AsyncGenerator[AsyncSession, None]:
    session: AsyncSession = async_session_factory()
    log.debug("Entering async session context %s", id(session))
    try:
        yield session
        await session.commit()
    except Exception:
        log.debug("Rolling back session %s from context due to exception", id(session))
        await session.rollback()
        raise
    finally:
        await session.close()


def _import_models() -> None:
    # Регистрируем все модели в Base.metadata
    import teamcal.core.users.models  # noqa: F401
    import teamcal.core.permissions.models  # noqa: F401
    import teamcal.core.calendar.models  # noqa: F401
    import teamcal.core.schedule.models  # noqa: F401


async def create_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.debug("Database tables created")


async def drop_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Соединение пересоздается в следующем event loop
    await engine.dispose()
    log.debug("Database tables dropped")


__all__ = [
    "Base", "engine", "async_session_factory", "AsyncSession",
    "get_async_db_session", "async_session_context",
    "create_db_and_tables", "drop_db_and_tables",
]
