"""Chat threads and their messages.

Threads move to the top whenever they are updated: ``time`` doubles as the
last-activity stamp. Messages belong to one thread through ``thread_id``.
"""

from __future__ import annotations

from typing import Literal

from dashstore.core.exceptions import NotFoundError
from dashstore.core.logging import operation_scope
from dashstore.engine.collection import Collection, CollectionSchema
from dashstore.engine.query import QuerySpec, sort_records
from dashstore.entities.base import Record, at_least_one

ChatStatus = Literal["open", "archived"]


class ChatThread(Record):
    title: str
    participants: int
    status: ChatStatus
    time: str


class ChatMessage(Record):
    thread_id: str
    author: str
    content: str
    time: str


def seed_chats(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "title": ctx.words(2, 5),
            "participants": ctx.integer(2, 12),
            "status": "open" if ctx.boolean() else "archived",
            "time": ctx.recent(30),
        }
        for _ in range(30)
    ]


def seed_chat_messages(ctx, sources) -> list[dict]:
    messages = []
    for thread in sources["chats"]:
        for _ in range(ctx.integer(3, 25)):
            messages.append(
                {
                    "id": ctx.uuid(),
                    "thread_id": thread.id,
                    "author": ctx.full_name(),
                    "content": ctx.sentence(4, 12),
                    "time": ctx.recent(30),
                }
            )
    return messages


CHATS = CollectionSchema(
    key="chats",
    model=ChatThread,
    query=QuerySpec(
        search=lambda c: (c.title,),
        sort_fields={"time": lambda c: c.time},
        default_sort="time",
        status_field="status",
        date_field="time",
    ),
    seed=seed_chats,
    creatable=frozenset({"title", "participants", "status"}),
    updatable=frozenset({"title", "participants", "status"}),
    required=("title",),
    defaults=lambda runtime: {"participants": runtime.rng.randint(2, 12), "status": "open"},
    normalizers={"participants": at_least_one},
    created_field="time",
    reorders_on_update=True,
    activity_field="time",
    toggle=("status", "open", "archived"),
)

CHAT_MESSAGES = CollectionSchema(
    key="chat_messages",
    model=ChatMessage,
    query=QuerySpec(
        search=lambda m: (m.author, m.content),
        sort_fields={"time": lambda m: m.time},
        default_sort="time",
        date_field="time",
        filters={"thread_id": lambda m, value: m.thread_id == value},
    ),
    seed=seed_chat_messages,
    creatable=frozenset({"thread_id", "author", "content"}),
    updatable=frozenset({"author", "content"}),
    required=("thread_id", "author", "content"),
    created_field="time",
    seed_from=("chats",),
)


class ChatCollection(Collection[ChatThread]):
    """Threads, with read access to their messages."""

    async def list_messages(self, thread_id: str, limit: int = 10) -> list[ChatMessage]:
        """Newest ``limit`` messages of one thread."""
        with operation_scope(self.key, "list_messages"):
            messages = await self.related("chat_messages").all()
            selected = [message for message in messages if message.thread_id == thread_id]
            ordered = sort_records(selected, lambda m: m.time, "desc")
            return ordered[:max(0, limit)]


class ChatMessageCollection(Collection[ChatMessage]):
    async def _before_create(self, record: ChatMessage) -> None:
        threads = await self.related("chats").all()
        if not any(thread.id == record.thread_id for thread in threads):
            raise NotFoundError("Chat thread not found", collection="chats", id=record.thread_id)
