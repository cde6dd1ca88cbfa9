# tests/test_users_api.py
import pytest

from conftest import login


@pytest.mark.asyncio
async def test_users_requires_session(client, users):
    response = await client.get("/users")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_users_sorted_by_name(client, users):
    await login(client, "bob@example.com")
    response = await client.get("/users")

    assert response.status_code == 200
    listed = response.json()["users"]
    assert [u["name"] for u in listed] == ["Admin", "Alice", "Bob"]
    assert set(listed[0]) == {"id", "name", "email", "role"}
