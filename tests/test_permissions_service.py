# tests/test_permissions_service.py
import pytest
from sqlalchemy import func, select

from teamcal.core.errors import NotFoundError, ValidationError
from teamcal.core.permissions import Module, PermissionLevel, PermissionsService
from teamcal.core.permissions.models import UserPermission
from teamcal.db.base import async_session_context


@pytest.mark.asyncio
async def test_defaults_to_none_for_every_module(db_session, users):
    perms = await PermissionsService(db_session).get_permissions(users["alice"].id)

    assert [p.module for p in perms] == [Module.MEETINGS, Module.DEADLINES, Module.SCHEDULE]
    assert all(p.my_level == PermissionLevel.NONE and p.all_level == PermissionLevel.NONE for p in perms)


@pytest.mark.asyncio
async def test_set_then_get_and_untouched_modules_keep_levels(db_session, users):
    service = PermissionsService(db_session)
    user_id = users["alice"].id

    await service.set_permissions(user_id, [
        {"module": "meetings", "myLevel": "EDIT", "allLevel": "VIEW"},
        {"module": "schedule", "myLevel": "VIEW", "allLevel": "NONE"},
    ])
    await db_session.commit()
    written = await service.set_permissions(user_id, [
        {"module": "meetings", "myLevel": "VIEW", "allLevel": "VIEW"},
    ])
    await db_session.commit()

    assert [(w.module, w.my_level, w.all_level) for w in written] == [
        (Module.MEETINGS, PermissionLevel.VIEW, PermissionLevel.VIEW)
    ]
    by_module = {p.module: p for p in await service.get_permissions(user_id)}
    assert by_module[Module.MEETINGS].my_level == PermissionLevel.VIEW
    assert by_module[Module.SCHEDULE].my_level == PermissionLevel.VIEW
    assert by_module[Module.DEADLINES].my_level == PermissionLevel.NONE


@pytest.mark.asyncio
async def test_set_is_idempotent(db_session, users):
    service = PermissionsService(db_session)
    entries = [{"module": "deadlines", "myLevel": "EDIT", "allLevel": "EDIT"}]

    first = await service.set_permissions(users["bob"].id, entries)
    second = await service.set_permissions(users["bob"].id, entries)
    await db_session.commit()

    assert [p.model_dump() for p in first] == [p.model_dump() for p in second]
    perms = await service.get_permissions(users["bob"].id)
    assert sum(1 for p in perms if p.module == Module.DEADLINES) == 1


@pytest.mark.asyncio
async def test_repeated_module_in_one_request_last_wins(db_session, users):
    service = PermissionsService(db_session)
    written = await service.set_permissions(users["bob"].id, [
        {"module": "meetings", "myLevel": "VIEW", "allLevel": "NONE"},
        {"module": "meetings", "myLevel": "EDIT", "allLevel": "EDIT"},
    ])
    assert len(written) == 1
    assert written[0].my_level == PermissionLevel.EDIT


@pytest.mark.asyncio
@pytest.mark.parametrize("entry", [
    {"module": "payroll", "myLevel": "VIEW", "allLevel": "VIEW"},
    {"module": "meetings", "myLevel": "ADMIN", "allLevel": "VIEW"},
    {"module": "meetings", "myLevel": "VIEW"},
])
async def test_invalid_entries_are_rejected(db_session, users, entry):
    with pytest.raises(ValidationError) as exc_info:
        await PermissionsService(db_session).set_permissions(users["alice"].id, [entry])
    assert exc_info.value.details


@pytest.mark.asyncio
async def test_unknown_user(db_session):
    service = PermissionsService(db_session)
    with pytest.raises(NotFoundError):
        await service.get_permissions("ghost")
    with pytest.raises(NotFoundError):
        await service.set_permissions("ghost", [{"module": "meetings", "myLevel": "VIEW", "allLevel": "VIEW"}])


@pytest.mark.asyncio
async def test_check_uses_my_or_all_axis(db_session, users):
    service = PermissionsService(db_session)
    user_id = users["alice"].id
    await service.set_permissions(user_id, [{"module": "meetings", "myLevel": "EDIT", "allLevel": "VIEW"}])

    assert await service.check(user_id, "meetings", PermissionLevel.EDIT, own=True)
    assert await service.check(user_id, Module.MEETINGS, "VIEW", own=False)
    assert not await service.check(user_id, Module.MEETINGS, PermissionLevel.EDIT, own=False)
    assert not await service.check(user_id, Module.SCHEDULE, PermissionLevel.VIEW, own=True)


def test_level_ordering():
    assert PermissionLevel.EDIT.at_least(PermissionLevel.VIEW)
    assert PermissionLevel.VIEW.at_least(PermissionLevel.VIEW)
    assert not PermissionLevel.NONE.at_least(PermissionLevel.VIEW)


@pytest.mark.asyncio
async def test_list_users_with_permissions(db_session, users):
    service = PermissionsService(db_session)
    await service.set_permissions(users["bob"].id, [{"module": "schedule", "myLevel": "EDIT", "allLevel": "VIEW"}])

    listed = await service.list_users_with_permissions()

    assert [u.name for u in listed] == ["Admin", "Alice", "Bob"]
    bob = listed[2]
    assert len(bob.permissions) == 3
    schedule = next(p for p in bob.permissions if p.module == Module.SCHEDULE)
    assert (schedule.my_level, schedule.all_level) == (PermissionLevel.EDIT, PermissionLevel.VIEW)


@pytest.mark.asyncio
async def test_set_overwrites_row_written_concurrently(db_session, users):
    """Строку для (user, module) вставил другой писатель: upsert ее перезаписывает."""
    user_id = users["alice"].id
    async with async_session_context() as other:
        other.add(UserPermission(
            user_id=user_id, module=Module.MEETINGS,
            my_level=PermissionLevel.VIEW, all_level=PermissionLevel.VIEW,
        ))

    service = PermissionsService(db_session)
    written = await service.set_permissions(user_id, [
        {"module": "meetings", "myLevel": "EDIT", "allLevel": "NONE"},
    ])
    await db_session.commit()

    assert (written[0].my_level, written[0].all_level) == (PermissionLevel.EDIT, PermissionLevel.NONE)
    rows = await db_session.scalar(
        select(func.count()).select_from(UserPermission).where(UserPermission.user_id == user_id)
    )
    assert rows == 1
    meetings = next(p for p in await service.get_permissions(user_id) if p.module == Module.MEETINGS)
    assert (meetings.my_level, meetings.all_level) == (PermissionLevel.EDIT, PermissionLevel.NONE)


@pytest.mark.asyncio
async def test_get_after_set_ignores_stale_loaded_rows(db_session, users):
    service = PermissionsService(db_session)
    user_id = users["bob"].id
    await service.set_permissions(user_id, [{"module": "schedule", "myLevel": "VIEW", "allLevel": "VIEW"}])
    # Загружаем строку в сессию, затем перезаписываем ее мимо ORM
    await service.get_permissions(user_id)
    await service.set_permissions(user_id, [{"module": "schedule", "myLevel": "EDIT", "allLevel": "EDIT"}])

    schedule = next(p for p in await service.get_permissions(user_id) if p.module == Module.SCHEDULE)
    assert schedule.my_level == PermissionLevel.EDIT
