# alembic/env.py

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# --- Метаданные Моделей ---
from teamcal.config import settings
from teamcal.db.base import Base

# Импортируем модули с моделями, чтобы Alembic их "увидел"
import teamcal.core.users.models  # noqa
import teamcal.core.permissions.models  # noqa
import teamcal.core.calendar.models  # noqa
import teamcal.core.schedule.models  # noqa

target_metadata = Base.metadata


def _database_url() -> str:
    # alembic.ini (sqlalchemy.url) имеет приоритет над DATABASE_URL
    return config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.
    Генерирует SQL скрипты без подключения к БД.
    """
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    db_url = _database_url()

    # Адаптируем URL для asyncpg, если он в синхронном формате
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("postgresql+psycopg2://"):
        db_url = db_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    elif not db_url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        raise ValueError(f"Unsupported DB URL scheme for async operation: {db_url}")

    connectable = create_async_engine(db_url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
