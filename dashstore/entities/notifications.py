"""Notifications and emails: read/unread inbox items, newest first."""

from __future__ import annotations

from typing import Literal

from dashstore.engine.collection import CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import Record

ReadStatus = Literal["unread", "read"]


class Notification(Record):
    title: str
    time: str
    status: ReadStatus


class Email(Record):
    subject: str
    sender: str
    time: str
    status: ReadStatus


def seed_notifications(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "title": ctx.sentence(3, 8),
            "time": ctx.recent(7),
            "status": "unread" if ctx.boolean() else "read",
        }
        for _ in range(24)
    ]


def seed_emails(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "subject": ctx.sentence(3, 8),
            "sender": ctx.email(),
            "time": ctx.recent(30),
            "status": "unread" if ctx.boolean() else "read",
        }
        for _ in range(48)
    ]


NOTIFICATIONS = CollectionSchema(
    key="notifications",
    model=Notification,
    query=QuerySpec(
        search=lambda n: (n.title, n.status),
        sort_fields={"time": lambda n: n.time},
        default_sort="time",
        status_field="status",
        date_field="time",
    ),
    seed=seed_notifications,
    creatable=frozenset({"title", "status"}),
    updatable=frozenset({"title", "status"}),
    required=("title",),
    defaults=lambda runtime: {"status": "unread"},
    created_field="time",
    toggle=("status", "unread", "read"),
)

EMAILS = CollectionSchema(
    key="emails",
    model=Email,
    query=QuerySpec(
        search=lambda e: (e.subject, e.sender, e.status),
        sort_fields={"time": lambda e: e.time},
        default_sort="time",
        status_field="status",
        date_field="time",
    ),
    seed=seed_emails,
    creatable=frozenset({"subject", "sender", "status"}),
    updatable=frozenset({"subject", "sender", "status"}),
    required=("subject", "sender"),
    defaults=lambda runtime: {"status": "unread"},
    created_field="time",
    toggle=("status", "unread", "read"),
)
