"""Shared pieces of the entity catalog."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from dashstore.engine.clock import to_timestamp

Currency = Literal["USD", "EUR", "GBP"]
CURRENCIES: tuple[Currency, ...] = ("USD", "EUR", "GBP")


class Record(BaseModel):
    """Base for every entity with an identity."""

    model_config = ConfigDict(extra="forbid")

    id: str


def round_half_up(value: Any) -> int:
    return math.floor(float(value) + 0.5)


def round_money(value: Any) -> float:
    """Money is stored with two decimals."""
    return round(float(value), 2)


def clamp_rating(value: Any) -> int:
    return min(5, max(1, round_half_up(value)))


def at_least_one(value: Any) -> int:
    return max(1, round_half_up(value))


def timestamp_value(value: Any) -> str:
    """Accept datetimes for caller-settable time fields."""
    if isinstance(value, datetime):
        return to_timestamp(value)
    return str(value).strip()
