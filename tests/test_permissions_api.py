# tests/test_permissions_api.py
import pytest

from conftest import login


@pytest.mark.asyncio
async def test_requires_admin(client, users):
    assert (await client.get("/admin/permissions")).status_code == 401

    await login(client, "alice@example.com")
    response = await client.get("/admin/permissions")
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Admin access required"}

    put = await client.put("/admin/permissions", json={"userId": users["alice"].id, "permissions": []})
    assert put.status_code == 403


@pytest.mark.asyncio
async def test_put_then_get(client, users):
    await login(client, "admin@example.com")
    alice_id = users["alice"].id

    put = await client.put("/admin/permissions", json={
        "userId": alice_id,
        "permissions": [{"module": "meetings", "myLevel": "EDIT", "allLevel": "VIEW"}],
    })
    assert put.status_code == 200
    body = put.json()
    assert body["message"] == "Permissions updated successfully"
    assert body["permissions"] == [
        {"module": "meetings", "myLevel": "EDIT", "allLevel": "VIEW", "userId": alice_id}
    ]

    listed = (await client.get("/admin/permissions")).json()["users"]
    alice = next(u for u in listed if u["id"] == alice_id)
    assert alice["permissions"] == [
        {"module": "meetings", "myLevel": "EDIT", "allLevel": "VIEW"},
        {"module": "deadlines", "myLevel": "NONE", "allLevel": "NONE"},
        {"module": "schedule", "myLevel": "NONE", "allLevel": "NONE"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"permissions": []},
    {"userId": "x", "permissions": [{"module": "payroll", "myLevel": "VIEW", "allLevel": "VIEW"}]},
    {"userId": "x", "permissions": [{"module": "meetings", "myLevel": "OWNER", "allLevel": "VIEW"}]},
])
async def test_put_validation(client, users, body):
    await login(client, "admin@example.com")
    response = await client.put("/admin/permissions", json=body)
    assert response.status_code == 400
    assert response.json()["details"]


@pytest.mark.asyncio
async def test_put_unknown_user(client, users):
    await login(client, "admin@example.com")
    response = await client.put("/admin/permissions", json={
        "userId": "ghost", "permissions": [{"module": "meetings", "myLevel": "VIEW", "allLevel": "VIEW"}],
    })
    assert response.status_code == 404
