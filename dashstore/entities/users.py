"""Users: mutable records ordered newest-first by creation date."""

from __future__ import annotations

from typing import Literal, Optional

from dashstore.engine.collection import CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import Record

UserRole = Literal["Admin", "Editor", "Viewer"]
UserStatus = Literal["active", "inactive"]


class User(Record):
    name: str
    role: UserRole
    status: UserStatus
    created_at: Optional[str] = None


def seed_users(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "name": ctx.full_name(),
            "role": ctx.pick(("Admin", "Editor", "Viewer")),
            "status": "active" if ctx.boolean() else "inactive",
            "created_at": ctx.recent(365),
        }
        for _ in range(36)
    ]


USERS = CollectionSchema(
    key="users",
    model=User,
    query=QuerySpec(
        search=lambda u: (u.name, u.role, u.status),
        sort_fields={
            "created_at": lambda u: u.created_at,
            "name": lambda u: u.name,
        },
        default_sort="created_at",
        status_field="status",
        date_field="created_at",
    ),
    seed=seed_users,
    creatable=frozenset({"name", "role", "status"}),
    updatable=frozenset({"name", "role", "status"}),
    required=("name",),
    defaults=lambda runtime: {"role": "Viewer", "status": "active"},
    created_field="created_at",
    toggle=("status", "active", "inactive"),
)
