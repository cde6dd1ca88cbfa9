# tests/test_output_schemas.py
import datetime as dt

from teamcal.core.calendar.schemas import CalendarItemOut

NAIVE = dt.datetime(2024, 6, 10, 9, 0)


def _item(**overrides):
    data = {
        "id": "i1", "type": "MEETING", "title": "Standup", "startAt": NAIVE, "endAt": None,
        "allDay": False, "status": "DRAFT", "createdById": "u1",
        "createdAt": NAIVE, "updatedAt": NAIVE,
        "createdBy": {"id": "u1", "name": "Admin", "email": "admin@example.com"},
    }
    data.update(overrides)
    return CalendarItemOut.model_validate(data)


def test_naive_datetimes_serialize_as_utc():
    body = _item().model_dump(mode="json", by_alias=True)
    assert body["startAt"] == "2024-06-10T09:00:00Z"
    assert body["createdAt"] == "2024-06-10T09:00:00Z"
    assert body["endAt"] is None


def test_aware_datetimes_are_converted_to_utc():
    local = dt.datetime(2024, 6, 10, 11, 0, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    body = _item(startAt=local).model_dump(mode="json", by_alias=True)
    assert body["startAt"] == "2024-06-10T09:00:00Z"
