"""Pytest configuration and shared fixtures for dashstore tests.

Every store built here runs against an ``InMemoryBackend`` with a frozen clock
and a seeded mutation random source, so seeded data is identical run to run.
"""

import os
import random
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from dashstore.core.persistence.memory import InMemoryBackend
from dashstore.store import EntityStore

FROZEN_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Register markers and force the test environment before settings load."""
    config.addinivalue_line("markers", "slow: Slow-running tests (excluded from fast)")
    config.addinivalue_line("markers", "integration: Integration tests requiring external services")

    os.environ.setdefault("DASHSTORE_ENVIRONMENT", "test")
    os.environ.setdefault("DASHSTORE_STORAGE_BACKEND", "memory")


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest_asyncio.fixture
async def store(backend, clock):
    """Fresh store over an empty in-memory backend."""
    entity_store = EntityStore(backend, seed=42, clock=clock, rng=random.Random(7))
    yield entity_store
    await entity_store.close()
