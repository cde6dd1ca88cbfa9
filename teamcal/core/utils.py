# teamcal/core/utils.py

from __future__ import annotations

import datetime as dt


def to_utc(value: dt.datetime | None) -> dt.datetime | None:
    """Aware -> UTC; naive считается уже UTC (SQLite отдает время без зоны)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)
