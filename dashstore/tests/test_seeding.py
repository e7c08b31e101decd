"""Seeding: first access only, deterministic, never repeated once persisted."""

import random

import pytest

from dashstore.core.persistence.memory import InMemoryBackend
from dashstore.store import EntityStore

pytestmark = pytest.mark.asyncio

SEED_SIZES = {
    "users": 36,
    "notifications": 24,
    "emails": 48,
    "feedbacks": 40,
    "payments": 40,
    "subscriptions": 50,
    "events": 24,
    "apis": 24,
    "chats": 30,
    "internal_api_logs": 60,
}


async def test_seed_sizes(store):
    for key, expected in SEED_SIZES.items():
        records = await store.collections[key].all()
        assert len(records) == expected, key


async def test_child_collections_seed_from_their_parents(store):
    apis = {api.id: api for api in await store.apis.all()}
    keys = await store.api_keys.all()
    assert keys
    assert {key.api_id for key in keys} <= set(apis)
    per_api = {}
    for key in keys:
        per_api[key.api_id] = per_api.get(key.api_id, 0) + 1
        assert key.label.startswith(apis[key.api_id].name)
        assert len(key.key) == 32
    assert all(1 <= count <= 3 for count in per_api.values())

    threads = {thread.id for thread in await store.chats.all()}
    messages = await store.chat_messages.all()
    assert {message.thread_id for message in messages} <= threads


async def test_seeding_is_idempotent(store, backend):
    await store.users.list()
    before = backend.snapshot()
    first = await store.users.list(page_size=100)
    second = await store.users.list(page_size=100)
    assert backend.snapshot() == before
    assert first == second


async def test_same_seed_and_clock_reproduce_records(clock):
    left_backend, right_backend = InMemoryBackend(), InMemoryBackend()
    left = EntityStore(left_backend, seed=42, clock=clock, rng=random.Random(1))
    right = EntityStore(right_backend, seed=42, clock=clock, rng=random.Random(2))

    for store in (left, right):
        for collection in store.collections.values():
            await collection.all()

    assert left_backend.snapshot() == right_backend.snapshot()


async def test_different_seed_changes_records(clock):
    left = EntityStore(InMemoryBackend(), seed=42, clock=clock)
    right = EntityStore(InMemoryBackend(), seed=43, clock=clock)
    assert [u.id for u in await left.users.all()] != [u.id for u in await right.users.all()]


async def test_seeded_records_are_in_canonical_order(store):
    users = await store.users.all()
    stamps = [user.created_at for user in users]
    assert stamps == sorted(stamps, reverse=True)

    events = await store.events.all()
    times = [event.time for event in events]
    assert times == sorted(times)


async def test_emptied_collection_is_not_reseeded(store):
    users = await store.users.all()
    await store.users.delete_bulk([user.id for user in users])

    page = await store.users.list()
    assert page.total == 0
    assert page.items == []
    assert page.total_pages == 1


async def test_reset_brings_seed_data_back(store):
    original = await store.users.all()
    await store.users.delete(original[0].id)
    await store.users.reset()

    assert [user.id for user in await store.users.all()] == [user.id for user in original]


async def test_corrupt_blob_is_recovered_by_reseeding(store, backend):
    await backend.write("dc_notifications", "{not json")
    page = await store.notifications.list()
    assert page.total == 24


async def test_blob_with_wrong_shape_is_recovered(store, backend):
    await backend.write("dc_emails", '{"unexpected": "object"}')
    assert len(await store.emails.all()) == 48

    await backend.write("dc_emails", '[{"id": "x", "subject": 3}]')
    assert len(await store.emails.all()) == 48


async def test_store_reset_clears_every_blob(store, backend):
    for collection in store.collections.values():
        await collection.all()
    await store.analytics.kpis()
    await store.monitoring.metrics()
    assert backend.snapshot()

    await store.reset()
    assert backend.snapshot() == {}


async def test_keys_are_namespaced(store, backend):
    await store.users.all()
    assert "dc_users" in backend.snapshot()


async def test_custom_key_prefix(clock):
    backend = InMemoryBackend()
    store = EntityStore(backend, clock=clock, key_prefix="demo_")
    await store.payments.all()
    assert list(backend.snapshot()) == ["demo_payments"]


async def test_collections_do_not_share_seeded_ids(store):
    seen = {}
    for key, collection in store.collections.items():
        for record in await collection.all():
            assert record.id not in seen, f"{key} reuses an id from {seen.get(record.id)}"
            seen[record.id] = key
