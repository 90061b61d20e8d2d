"""Utility functions for PawSteps.

Provides datetime normalisation, numeric helpers and the duration/pace
formatting shared by the walk session aggregate and daily records.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from contextlib import suppress
from datetime import UTC, date, datetime, time, timedelta

from .const import PACE_SENTINEL

type Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc_datetime(value: datetime | date | str | float | None) -> datetime | None:
    """Return a timezone-aware UTC datetime from various input formats."""

    if value is None:
        return None

    if isinstance(value, datetime):
        dt_value = value
    elif isinstance(value, date):
        dt_value = datetime.combine(value, time.min)
    elif isinstance(value, str):
        if not value:
            return None
        dt_value = _parse_datetime_string(value)
        if dt_value is None:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        with suppress(OverflowError, OSError, ValueError):
            return datetime.fromtimestamp(float(value), UTC)
        return None
    else:
        return None

    if dt_value.tzinfo is None:
        dt_value = dt_value.replace(tzinfo=UTC)

    return dt_value.astimezone(UTC)


def _parse_datetime_string(value: str) -> datetime | None:
    """Parse ``value`` into a datetime, accepting a trailing ``Z``."""

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = f"{normalized[:-1]}+00:00"

    with suppress(ValueError):
        return datetime.fromisoformat(normalized)

    with suppress(ValueError):
        return datetime.combine(date.fromisoformat(normalized), time.min)

    return None


def start_of_local_day(moment: datetime) -> datetime:
    """Return local midnight of the calendar day containing ``moment``."""

    local = moment.astimezone() if moment.tzinfo else moment.replace(tzinfo=UTC).astimezone()
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def local_day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """Return ``(start, end)`` of a local calendar day as aware datetimes."""

    if isinstance(day, datetime):
        start = start_of_local_day(day)
    else:
        start = datetime.combine(day, time.min).astimezone()
    return start, start + timedelta(days=1)


def is_same_local_day(first: datetime, second: datetime) -> bool:
    """Return True when both instants fall on the same local calendar day."""
    return start_of_local_day(first) == start_of_local_day(second)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    ``round()`` rounds halves to even, which would make 2.5 -> 2.
    """
    if math.isnan(value) or math.isinf(value):
        return 0
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers with default for division by zero.

    Args:
        numerator: Number to divide
        denominator: Number to divide by
        default: Default value if denominator is zero

    Returns:
        Division result or default
    """
    try:
        return numerator / denominator if denominator != 0 else default
    except (TypeError, ZeroDivisionError):
        return default


def format_clock_duration(seconds: float) -> str:
    """Format a duration as ``H:MM:SS`` or ``MM:SS`` when under an hour."""

    total = max(0, int(seconds))
    hours = total // 3600
    minutes = total % 3600 // 60
    secs = total % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_pace(duration_seconds: float, distance_km: float) -> str:
    """Format pace per kilometre as ``M'SS"``.

    Returns the ``--'--"`` sentinel when either value is not positive.
    """
    if duration_seconds <= 0 or distance_km <= 0:
        return PACE_SENTINEL

    pace_seconds = int(duration_seconds / distance_km)
    minutes = pace_seconds // 60
    seconds = pace_seconds % 60
    return f"{minutes}'{seconds:02d}\""
