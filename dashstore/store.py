"""The entity store: every collection over one persistence backend.

Usage:
    async with open_store() as store:
        page = await store.users.list(q="ada", status="active", sort_by="name")
        key = await store.api_keys.rotate(page.items[0].id)

Tests build the store directly around an ``InMemoryBackend`` with a frozen
clock so seeding is reproducible.
"""

from __future__ import annotations

import random
from typing import Any, Optional

from dashstore.config.settings import Settings, get_settings
from dashstore.core.logging import get_logger, setup_logging
from dashstore.core.persistence import BlobBackend, PersistenceAdapter
from dashstore.core.persistence.factory import get_backend_from_settings
from dashstore.engine.clock import Clock, utc_now
from dashstore.engine.collection import Collection
from dashstore.engine.runtime import StoreRuntime
from dashstore.entities import (
    API_KEYS,
    APIS,
    CHAT_MESSAGES,
    CHATS,
    EMAILS,
    EVENTS,
    FEEDBACKS,
    NOTIFICATIONS,
    PAYMENTS,
    SUBSCRIPTIONS,
    USERS,
    AnalyticsService,
    ApiCollection,
    ApiKeyCollection,
    ChatCollection,
    ChatMessageCollection,
    InternalApiService,
    MonitoringService,
)

logger = get_logger(__name__)


class EntityStore:
    """Owns a backend, a clock and a random source; exposes every collection."""

    def __init__(
        self,
        backend: BlobBackend,
        *,
        seed: int = 42,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
        key_prefix: str = "dc_",
        default_page_size: int = 10,
        max_page_size: int = 100,
    ):
        self.adapter = PersistenceAdapter(backend, key_prefix=key_prefix)
        self.runtime = StoreRuntime(
            seed=seed,
            clock=clock,
            rng=rng or random.Random(),
            default_page_size=default_page_size,
            max_page_size=max_page_size,
        )
        adapter, runtime = self.adapter, self.runtime

        self.users = Collection(USERS, adapter, runtime)
        self.notifications = Collection(NOTIFICATIONS, adapter, runtime)
        self.emails = Collection(EMAILS, adapter, runtime)
        self.feedbacks = Collection(FEEDBACKS, adapter, runtime)
        self.payments = Collection(PAYMENTS, adapter, runtime)
        self.subscriptions = Collection(SUBSCRIPTIONS, adapter, runtime)
        self.events = Collection(EVENTS, adapter, runtime)

        self.apis = ApiCollection(APIS, adapter, runtime)
        self.api_keys = ApiKeyCollection(API_KEYS, adapter, runtime, sources={"apis": self.apis})
        self.apis.link("api_keys", self.api_keys)

        self.chats = ChatCollection(CHATS, adapter, runtime)
        self.chat_messages = ChatMessageCollection(CHAT_MESSAGES, adapter, runtime, sources={"chats": self.chats})
        self.chats.link("chat_messages", self.chat_messages)

        self.analytics = AnalyticsService(adapter, runtime)
        self.monitoring = MonitoringService(adapter, runtime)
        self.internal_apis = InternalApiService(adapter, runtime)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "EntityStore":
        options: dict[str, Any] = {
            "seed": settings.seed,
            "key_prefix": settings.key_prefix,
            "default_page_size": settings.default_page_size,
            "max_page_size": settings.max_page_size,
        }
        options.update(overrides)
        return cls(get_backend_from_settings(settings), **options)

    @property
    def collections(self) -> dict[str, Collection[Any]]:
        """Every record collection by persisted key."""
        found = [
            self.users,
            self.notifications,
            self.emails,
            self.feedbacks,
            self.payments,
            self.subscriptions,
            self.events,
            self.apis,
            self.api_keys,
            self.chats,
            self.chat_messages,
            self.internal_apis.logs,
        ]
        return {collection.key: collection for collection in found}

    async def reset(self) -> None:
        """Forget every stored blob; the next access reseeds each one."""
        for collection in self.collections.values():
            await collection.reset()
        await self.analytics.reset()
        await self.monitoring.reset()
        await self.internal_apis.reset()
        logger.info("Store reset")

    async def close(self) -> None:
        await self.adapter.close()

    async def __aenter__(self) -> "EntityStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def open_store(settings: Optional[Settings] = None, **overrides: Any) -> EntityStore:
    """Build a store from settings (environment by default) and configure logging."""
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, json_output=settings.log_json, log_file=settings.log_file)
    store = EntityStore.from_settings(settings, **overrides)
    logger.info(
        "Store opened",
        data={"backend": settings.storage_backend, "environment": settings.environment, "seed": settings.seed},
    )
    return store
