"""Calendar events, soonest first."""

from __future__ import annotations

from dashstore.engine.collection import CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import Record, timestamp_value


class Event(Record):
    title: str
    time: str


def seed_events(ctx, sources) -> list[dict]:
    return [
        {"id": ctx.uuid(), "title": ctx.words(2, 5), "time": ctx.soon(60)}
        for _ in range(24)
    ]


EVENTS = CollectionSchema(
    key="events",
    model=Event,
    query=QuerySpec(
        search=lambda e: (e.title,),
        sort_fields={"time": lambda e: e.time},
        default_sort="time",
        default_dir="asc",
        date_field="time",
    ),
    seed=seed_events,
    creatable=frozenset({"title", "time"}),
    updatable=frozenset({"title", "time"}),
    required=("title",),
    normalizers={"time": timestamp_value},
    created_field="time",
)
