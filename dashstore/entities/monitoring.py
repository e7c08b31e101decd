"""Operational metrics: host monitoring and the internal API request log."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

from dashstore.core.exceptions import ValidationError
from dashstore.core.logging import get_logger, operation_scope
from dashstore.core.persistence import PersistenceAdapter
from dashstore.engine.clock import to_timestamp
from dashstore.engine.collection import Collection, CollectionSchema, Singleton
from dashstore.engine.query import Page, QueryParams, QuerySpec
from dashstore.engine.runtime import StoreRuntime
from dashstore.engine.seeding import SeedContext
from dashstore.entities.base import Record

logger = get_logger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

METHODS: tuple[HttpMethod, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE")
ROUTES = (
    "/auth/login",
    "/auth/logout",
    "/users",
    "/users/{id}",
    "/payments",
    "/payments/{id}",
    "/subscriptions",
    "/subscriptions/{id}",
    "/notifications",
    "/emails",
    "/feedbacks",
    "/chats",
    "/chats/{id}/messages",
)
# Recent traffic only hits the collection roots
LIVE_ROUTES = ("/auth/login", "/users", "/payments", "/subscriptions", "/notifications", "/emails")
STATUS_WEIGHTS = (
    (200, 60),
    (201, 10),
    (204, 5),
    (400, 8),
    (401, 4),
    (403, 3),
    (404, 6),
    (500, 3),
    (502, 1),
)
STATUS_CLASSES = {"2xx": 200, "4xx": 400, "5xx": 500}


class MonitoringMetrics(BaseModel):
    cpu: int
    memory_mb: int
    updated_at: str


class InternalApiMetrics(BaseModel):
    success_rate_pct: int
    error_rate_pct: int
    avg_response_ms: int
    requests_last_24h: int
    updated_at: str


class InternalApiLog(Record):
    time: str
    method: HttpMethod
    route: str
    status: int
    duration_ms: int
    user: str


def seed_monitoring(ctx: SeedContext) -> MonitoringMetrics:
    return MonitoringMetrics(
        cpu=ctx.integer(5, 95),
        memory_mb=ctx.integer(512, 32768),
        updated_at=to_timestamp(ctx.now),
    )


def seed_internal_metrics(ctx: SeedContext) -> InternalApiMetrics:
    success = ctx.integer(90, 99)
    return InternalApiMetrics(
        success_rate_pct=success,
        error_rate_pct=max(0, 100 - success),
        avg_response_ms=ctx.integer(80, 450),
        requests_last_24h=ctx.integer(500, 5000),
        updated_at=to_timestamp(ctx.now),
    )


def make_log(ctx: SeedContext, routes: tuple[str, ...], time: str) -> dict[str, Any]:
    route = ctx.pick(routes).replace("{id}", ctx.alphanumeric(8))
    return {
        "id": ctx.uuid(),
        "time": time,
        "method": ctx.pick(METHODS),
        "route": route,
        "status": ctx.weighted(STATUS_WEIGHTS),
        "duration_ms": ctx.integer(20, 2000),
        "user": ctx.username(),
    }


def seed_logs(ctx: SeedContext, sources) -> list[dict]:
    return [make_log(ctx, ROUTES, ctx.recent(7)) for _ in range(60)]


def _check_status_class(value: Any) -> None:
    if str(value).lower() not in STATUS_CLASSES:
        raise ValidationError(
            f"Unknown status class: {value}",
            details={"collection": "internal_api_logs", "allowed": ["all", *STATUS_CLASSES]},
        )


def _status_class(log: InternalApiLog, value: Any) -> bool:
    low = STATUS_CLASSES[str(value).lower()]
    return low <= log.status < low + 100


def _method(log: InternalApiLog, value: Any) -> bool:
    return log.method == str(value).upper()


INTERNAL_API_LOGS = CollectionSchema(
    key="internal_api_logs",
    model=InternalApiLog,
    query=QuerySpec(
        search=lambda log: (log.route, log.user),
        sort_fields={"time": lambda log: log.time},
        default_sort="time",
        date_field="time",
        filters={"method": _method, "status_class": _status_class},
        validators={"status_class": _check_status_class},
    ),
    seed=seed_logs,
    creatable=frozenset(),
    updatable=frozenset(),
)


class MonitoringService:
    """Host CPU and memory gauges."""

    def __init__(self, adapter: PersistenceAdapter, runtime: StoreRuntime):
        self._runtime = runtime
        self.store = Singleton("monitoring_metrics", MonitoringMetrics, seed_monitoring, adapter, runtime)

    async def metrics(self) -> MonitoringMetrics:
        return await self.store.get()

    async def refresh(self) -> MonitoringMetrics:
        with operation_scope("monitoring_metrics", "refresh"):
            rng = self._runtime.rng
            current = await self.store.get()
            refreshed = MonitoringMetrics(
                cpu=min(100, max(0, current.cpu + rng.randint(-10, 10))),
                memory_mb=max(256, current.memory_mb + rng.randint(-256, 512)),
                updated_at=self._runtime.timestamp(),
            )
            await self.store.put(refreshed)
            return refreshed

    async def reset(self) -> None:
        await self.store.reset()


class InternalApiService:
    """Success/error rates of the internal API and its request log."""

    def __init__(self, adapter: PersistenceAdapter, runtime: StoreRuntime):
        self._runtime = runtime
        self.store = Singleton("internal_api_metrics", InternalApiMetrics, seed_internal_metrics, adapter, runtime)
        self.logs = Collection(INTERNAL_API_LOGS, adapter, runtime)

    async def metrics(self) -> InternalApiMetrics:
        return await self.store.get()

    async def list_logs(self, params: QueryParams | None = None, **kwargs: Any) -> Page[InternalApiLog]:
        """Request log page; ``method`` and ``status_class`` narrow it down."""
        return await self.logs.list(params, **kwargs)

    async def refresh_metrics(self) -> InternalApiMetrics:
        """Drift the metrics and record a few fresh requests."""
        with operation_scope("internal_api_metrics", "refresh"):
            rng = self._runtime.rng
            current = await self.store.get()
            success = min(100, max(0, current.success_rate_pct + rng.randint(-3, 3)))
            refreshed = InternalApiMetrics(
                success_rate_pct=success,
                error_rate_pct=max(0, 100 - success),
                avg_response_ms=max(10, current.avg_response_ms + rng.randint(-50, 80)),
                requests_last_24h=max(0, current.requests_last_24h + rng.randint(-200, 400)),
                updated_at=self._runtime.timestamp(),
            )
            await self.store.put(refreshed)

            ctx = SeedContext(rng=rng, now=self._runtime.now())
            now = self._runtime.timestamp()
            fresh = [
                InternalApiLog(**{**make_log(ctx, LIVE_ROUTES, now), "id": self._runtime.new_id()})
                for _ in range(rng.randint(1, 4))
            ]
            await self.logs.prepend(fresh)
            logger.debug("Internal API metrics refreshed", data={"success": success, "new_logs": len(fresh)})
            return refreshed

    async def reset(self) -> None:
        await self.store.reset()
        await self.logs.reset()
