# teamcal/db/seed.py
"""
Идемпотентный сидинг пользователей: ``python -m teamcal.db.seed``.

Пользователи в системе не создаются через API, поэтому первый ADMIN
появляется только отсюда.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.users.models import Role, User
from teamcal.core.users.service import UsersService
from teamcal.db.base import async_session_context, create_db_and_tables

log = logging.getLogger(__name__)

# (email, name, role)
DEFAULT_USERS: Tuple[Tuple[str, str, Role], ...] = (
    ("admin@example.com", "Admin", Role.ADMIN),
    ("alice@example.com", "Alice", Role.USER),
    ("bob@example.com", "Bob", Role.USER),
)


async def seed_users(
    session: AsyncSession, users: Iterable[Tuple[str, str, Role]] = DEFAULT_USERS
) -> List[User]:
    """Создает недостающих пользователей; существующие (по email) не трогает."""
    service = UsersService(session)
    created: List[User] = []
    for email, name, role in users:
        created.append(await service.ensure_user(email, name, role))
    log.info("Seeded %d user(s)", len(created))
    return created


async def main() -> None:
    await create_db_and_tables()
    async with async_session_context() as session:
        await seed_users(session)


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
