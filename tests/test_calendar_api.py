# tests/test_calendar_api.py
import pytest

from conftest import login


def _meeting(**extra):
    body = {"type": "MEETING", "title": "Sprint review", "startAt": "2025-03-01T10:00:00Z"}
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_create_update_delete(client, users):
    await login(client, "admin@example.com")
    alice_id, bob_id = users["alice"].id, users["bob"].id

    created = await client.post("/calendar/items", json=_meeting(participants=[
        {"userId": alice_id, "role": "OWNER"}, {"userId": bob_id, "rsvp": "MAYBE"},
    ]))
    assert created.status_code == 201
    item = created.json()["item"]
    assert item["status"] == "DRAFT"
    assert item["allDay"] is False
    assert item["createdBy"]["name"] == "Admin"
    assert [(p["userId"], p["role"]) for p in item["participants"]] == [
        (alice_id, "OWNER"), (bob_id, "PARTICIPANT"),
    ]

    updated = await client.patch(f"/calendar/items/{item['id']}", json={
        "title": "Retro", "participants": [{"userId": bob_id}],
    })
    assert updated.status_code == 200
    assert updated.json()["item"]["title"] == "Retro"
    assert [p["userId"] for p in updated.json()["item"]["participants"]] == [bob_id]

    deleted = await client.delete(f"/calendar/items/{item['id']}")
    assert deleted.json() == {"success": True}
    assert (await client.get("/calendar/items")).json() == {"items": []}


@pytest.mark.asyncio
async def test_list_requires_session(client, users):
    assert (await client.get("/calendar/items")).status_code == 401


@pytest.mark.asyncio
async def test_mutations_require_admin(client, users):
    await login(client, "bob@example.com")
    assert (await client.post("/calendar/items", json=_meeting())).status_code == 403
    assert (await client.patch("/calendar/items/x", json={"title": "y"})).status_code == 403
    assert (await client.delete("/calendar/items/x")).status_code == 403


@pytest.mark.asyncio
async def test_list_filters(client, users):
    await login(client, "admin@example.com")
    await client.post("/calendar/items", json=_meeting(title="Planning", startAt="2025-03-01T09:00:00Z"))
    await client.post("/calendar/items", json=_meeting(type="DEADLINE", title="Release", startAt="2025-03-10T00:00:00Z"))
    await client.post("/calendar/items", json=_meeting(title="planning sync", startAt="2025-03-20T00:00:00Z"))

    await login(client, "alice@example.com")
    by_type = await client.get("/calendar/items", params={"type": "DEADLINE"})
    assert [i["title"] for i in by_type.json()["items"]] == ["Release"]

    window = await client.get("/calendar/items", params={
        "from": "2025-03-01T09:00:00Z", "to": "2025-03-10T00:00:00Z",
    })
    assert [i["title"] for i in window.json()["items"]] == ["Planning", "Release"]

    search = await client.get("/calendar/items", params={"search": "plan"})
    assert [i["title"] for i in search.json()["items"]] == ["planning sync"]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"type": "PARTY"}, {"status": "ARCHIVED"}, {"from": "yesterday"}])
async def test_list_invalid_query(client, users, params):
    await login(client, "alice@example.com")
    response = await client.get("/calendar/items", params=params)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid query parameters"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"title": "No type", "startAt": "2025-03-01T10:00:00Z"},
    _meeting(title=""),
    _meeting(title="x" * 256),
    _meeting(startAt="not a date"),
    _meeting(type="PARTY"),
])
async def test_create_validation(client, users, body):
    await login(client, "admin@example.com")
    response = await client.post("/calendar/items", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


@pytest.mark.asyncio
async def test_unknown_participant(client, users):
    await login(client, "admin@example.com")
    response = await client.post("/calendar/items", json=_meeting(participants=[{"userId": "ghost"}]))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_patch_rejects_null_title(client, users):
    await login(client, "admin@example.com")
    item = (await client.post("/calendar/items", json=_meeting())).json()["item"]
    response = await client.patch(f"/calendar/items/{item['id']}", json={"title": None})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_item(client, users):
    await login(client, "admin@example.com")
    assert (await client.patch("/calendar/items/nope", json={"title": "x"})).status_code == 404
    assert (await client.delete("/calendar/items/nope")).status_code == 404


@pytest.mark.asyncio
async def test_datetimes_are_returned_in_utc(client, users):
    await login(client, "admin@example.com")
    created = await client.post("/calendar/items", json=_meeting(
        startAt="2025-03-01T12:00:00+02:00", endAt="2025-03-01T13:00:00+02:00",
    ))
    item = created.json()["item"]
    assert item["startAt"] == "2025-03-01T10:00:00Z"
    assert item["endAt"] == "2025-03-01T11:00:00Z"
    assert item["createdAt"].endswith("Z")

    listed = (await client.get("/calendar/items")).json()["items"]
    assert listed[0]["startAt"] == "2025-03-01T10:00:00Z"
