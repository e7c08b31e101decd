"""Timestamp helpers.

Every persisted timestamp is an ISO-8601 UTC string with millisecond
precision and a ``Z`` suffix, so lexicographic order equals time order.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

from dashstore.core.exceptions import ValidationError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def normalize_bound(value: str | date | datetime | None, *, end: bool = False) -> str | None:
    """Turn a date-range bound into something comparable with stored timestamps.

    A bare calendar day covers the whole day: it starts at midnight as a lower
    bound and ends at ``23:59:59.999`` as an upper bound. Any other string is
    parsed and re-rendered in the stored UTC form.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_timestamp(value)
    if isinstance(value, date):
        value = value.isoformat()
    value = value.strip()
    if not value:
        return None
    try:
        if len(value) == 10:
            day = date.fromisoformat(value).isoformat()
            return day + ("T23:59:59.999Z" if end else "T00:00:00.000Z")
        return to_timestamp(parse_timestamp(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid date bound: {value}", details={"value": value}) from exc


def same_day(timestamp: str, now: datetime) -> bool:
    return parse_timestamp(timestamp).date() == now.astimezone(timezone.utc).date()
