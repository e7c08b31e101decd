"""Customer feedback with a 1-5 rating."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from dashstore.engine.collection import CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import Record, clamp_rating

FeedbackStatus = Literal["new", "in_progress", "resolved"]


class Feedback(Record):
    author: str
    rating: int = Field(ge=1, le=5)
    comment: str
    status: FeedbackStatus
    time: str


def seed_feedbacks(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "author": ctx.full_name(),
            "rating": ctx.integer(1, 5),
            "comment": ctx.sentence(6, 12),
            "status": ctx.pick(("new", "in_progress", "resolved")),
            "time": ctx.recent(45),
        }
        for _ in range(40)
    ]


FEEDBACKS = CollectionSchema(
    key="feedbacks",
    model=Feedback,
    query=QuerySpec(
        search=lambda f: (f.author, f.comment, f.status, f.rating),
        sort_fields={
            "time": lambda f: f.time,
            "rating": lambda f: f.rating,
        },
        default_sort="time",
        status_field="status",
        date_field="time",
    ),
    seed=seed_feedbacks,
    creatable=frozenset({"author", "comment", "rating", "status"}),
    updatable=frozenset({"author", "comment", "rating", "status"}),
    required=("author", "comment", "rating"),
    defaults=lambda runtime: {"status": "new"},
    normalizers={"rating": clamp_rating},
    created_field="time",
)
