"""External APIs and the credential keys issued for them.

Keys are owned by an API through ``api_id``: creating a key requires the API to
exist, and deleting an API (single or bulk) removes its keys too.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from dashstore.core.exceptions import NotFoundError
from dashstore.core.logging import get_logger, operation_scope
from dashstore.engine.collection import Collection, CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import Record, timestamp_value

logger = get_logger(__name__)

ApiStatus = Literal["up", "down"]
KeyStatus = Literal["active", "revoked"]

API_VERSIONS = ("v1", "v2", "v3")
API_TAGS = ("billing", "auth", "crm", "search", "ml", "maps", "storage")
KEY_SCOPES = ("read", "write", "admin", "billing", "usage")
DEFAULT_SCOPES = ["read"]
SECRET_LENGTH = 32


class Api(Record):
    name: str
    base_url: str
    version: str
    status: ApiStatus
    latency_ms: int
    uptime_pct: float
    last_checked: str
    enabled: bool
    tags: list[str]


class ApiKey(Record):
    api_id: str
    label: str
    key: str
    status: KeyStatus
    scopes: list[str]
    created_at: str
    last_used_at: Optional[str] = None


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if str(item).strip()]


def _scopes(value: Any) -> list[str]:
    return _string_list(value) or list(DEFAULT_SCOPES)


def seed_apis(ctx, sources) -> list[dict]:
    seeded = []
    for _ in range(24):
        status = "up" if ctx.boolean() else "down"
        seeded.append(
            {
                "id": ctx.uuid(),
                "name": ctx.company(),
                "base_url": ctx.url(),
                "version": ctx.pick(API_VERSIONS),
                "status": status,
                "latency_ms": ctx.integer(50, 1500),
                "uptime_pct": ctx.decimal(95, 99.99),
                "last_checked": ctx.recent(3),
                "enabled": True if status == "up" else ctx.boolean(),
                "tags": ctx.pick_some(API_TAGS, 1, 3),
            }
        )
    return seeded


def seed_api_keys(ctx, sources) -> list[dict]:
    seeded = []
    for api in sources["apis"]:
        for i in range(ctx.integer(1, 3)):
            seeded.append(
                {
                    "id": ctx.uuid(),
                    "api_id": api.id,
                    "label": f"{api.name} key {i + 1}",
                    "key": ctx.alphanumeric(SECRET_LENGTH),
                    "status": "active" if ctx.boolean() else "revoked",
                    "scopes": ctx.pick_some(KEY_SCOPES, 1, 3),
                    "created_at": ctx.recent(30),
                    "last_used_at": ctx.recent(10) if ctx.boolean() else None,
                }
            )
    return seeded


def _api_defaults(runtime) -> dict[str, Any]:
    return {
        "version": "v1",
        "status": "up",
        "enabled": True,
        "tags": [],
        "latency_ms": runtime.rng.randint(50, 1500),
        "uptime_pct": round(runtime.rng.uniform(95, 99.99), 2),
    }


def _key_defaults(runtime) -> dict[str, Any]:
    return {
        "key": runtime.new_secret(SECRET_LENGTH),
        "status": "active",
        "scopes": list(DEFAULT_SCOPES),
    }


APIS = CollectionSchema(
    key="apis",
    model=Api,
    query=QuerySpec(
        search=lambda a: (a.name, a.base_url, a.version, a.status, a.tags),
        sort_fields={
            "last_checked": lambda a: a.last_checked,
            "name": lambda a: a.name,
            "latency_ms": lambda a: a.latency_ms,
        },
        default_sort="last_checked",
        status_field="status",
        date_field="last_checked",
    ),
    seed=seed_apis,
    creatable=frozenset({"name", "base_url", "version", "status", "enabled", "tags"}),
    updatable=frozenset(
        {"name", "base_url", "version", "status", "enabled", "tags", "latency_ms", "uptime_pct", "last_checked"}
    ),
    required=("name", "base_url"),
    defaults=_api_defaults,
    normalizers={
        "tags": _string_list,
        "uptime_pct": lambda v: round(float(v), 2),
        "last_checked": timestamp_value,
    },
    created_field="last_checked",
    reorders_on_update=True,
    activity_field="last_checked",
)

API_KEYS = CollectionSchema(
    key="api_keys",
    model=ApiKey,
    query=QuerySpec(
        search=lambda k: (k.label, k.status, k.scopes),
        sort_fields={
            "created_at": lambda k: k.created_at,
            "last_used_at": lambda k: k.last_used_at,
            "label": lambda k: k.label,
        },
        default_sort="created_at",
        status_field="status",
        date_field="created_at",
        filters={"api_id": lambda k, value: k.api_id == value},
    ),
    seed=seed_api_keys,
    creatable=frozenset({"api_id", "label", "scopes", "status"}),
    updatable=frozenset({"label", "status", "scopes", "last_used_at"}),
    required=("api_id", "label"),
    defaults=_key_defaults,
    normalizers={"scopes": _scopes, "last_used_at": timestamp_value},
    created_field="created_at",
    toggle=("status", "active", "revoked"),
    seed_from=("apis",),
)


class ApiCollection(Collection[Api]):
    """APIs; removing one also removes the keys issued for it."""

    async def _remove_ids(self, id_set: set[str]) -> int:
        removed = await super()._remove_ids(id_set)
        keys = await self.related("api_keys").remove_where(lambda key: key.api_id in id_set)
        if keys:
            logger.info("Cascaded key deletion", data={"apis": len(id_set), "keys": keys})
        return removed


class ApiKeyCollection(Collection[ApiKey]):
    """Credential keys scoped to one API each."""

    async def _before_create(self, record: ApiKey) -> None:
        apis = await self.related("apis").all()
        if not any(api.id == record.api_id for api in apis):
            raise NotFoundError("Api not found for key", collection="apis", id=record.api_id)

    async def rotate(self, id: str) -> ApiKey:
        """Issue a new secret for a key; its creation time becomes now."""
        with operation_scope(self.key, "rotate"):
            records = await self._ensure_seeded()
            idx = self._index_of(records, id)
            if idx == -1:
                raise self._not_found(id)
            rotated = records[idx].model_copy(
                update={"key": self._runtime.new_secret(SECRET_LENGTH), "created_at": self._runtime.timestamp()}
            )
            records[idx] = rotated
            await self._persist(self.schema.canonical(records))
            logger.info("Key rotated", data={"id": id})
            return rotated

