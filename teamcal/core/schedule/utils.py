# teamcal/core/schedule/utils.py
"""Helpers for minutes-from-midnight values."""

from __future__ import annotations

from .models import MINUTES_PER_DAY


def minutes_to_time(minutes: int) -> str:
    """540 -> "09:00"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_to_minutes(value: str) -> int:
    """"09:30" -> 570."""
    hours_str, _, mins_str = value.partition(":")
    hours, mins = int(hours_str), int(mins_str)
    if not (0 <= hours < 24 and 0 <= mins < 60):
        raise ValueError(f"invalid time of day: {value!r}")
    return hours * 60 + mins


def format_time_range(start: int, end: int) -> str:
    return f"{minutes_to_time(start)}-{minutes_to_time(end)}"
