"""Uniform list/create/update/delete behaviour of the record collections."""

from datetime import datetime, timezone

import pytest

from dashstore.core.exceptions import NotFoundError, ValidationError
from dashstore.engine.query import QueryParams

pytestmark = pytest.mark.asyncio

NOW = "2026-10-19T12:00:00.000Z"


class TestList:
    async def test_kwargs_and_params_are_equivalent(self, store):
        by_kwargs = await store.users.list(q="a", status="active", sort_by="name", sort_dir="asc")
        by_params = await store.users.list(QueryParams(q="a", status="active", sort_by="name", sort_dir="asc"))
        assert by_kwargs == by_params

    async def test_pages_cover_a_real_collection_exactly_once(self, store):
        total = len(await store.emails.all())
        seen = []
        page = 1
        while True:
            result = await store.emails.list(page=page, page_size=7)
            assert result.total == total
            assert len(result.items) <= 7
            if not result.items:
                break
            seen.extend(item.id for item in result.items)
            page += 1
        assert page == result.total_pages + 1
        assert len(seen) == len(set(seen)) == total

    async def test_filtered_total_matches_status_count(self, store):
        notifications = await store.notifications.all()
        unread = [n for n in notifications if n.status == "unread"]
        page = await store.notifications.list(status="unread", page_size=100)
        assert page.total == len(unread)
        assert all(n.status == "unread" for n in page.items)

    async def test_date_range_excludes_records_outside_it(self, store):
        payments = await store.payments.all()
        times = sorted(p.time for p in payments)
        low, high = times[10], times[20]
        page = await store.payments.list(date_from=low, date_to=high, page_size=100)
        assert page.total == 11
        assert all(low <= p.time <= high for p in page.items)

    async def test_second_precision_bound_includes_that_second(self, store):
        newest = (await store.payments.list(sort_by="time", sort_dir="desc")).items[0]
        page = await store.payments.list(date_from=newest.time[:19] + "Z", page_size=100)
        assert newest.id in [p.id for p in page.items]

    async def test_unparseable_bound_is_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.payments.list(date_to="next week")

    async def test_missing_query_matches_everything(self, store):
        page = await store.users.list(q=None)
        assert page.total == len(await store.users.all())

    async def test_sort_by_secondary_field(self, store):
        page = await store.feedbacks.list(sort_by="rating", sort_dir="asc", page_size=100)
        ratings = [f.rating for f in page.items]
        assert ratings == sorted(ratings)

    async def test_events_default_to_soonest_first(self, store):
        page = await store.events.list(page_size=100)
        times = [e.time for e in page.items]
        assert times == sorted(times)

    async def test_free_text_search(self, store):
        target = (await store.users.all())[5]
        page = await store.users.list(q=target.name.upper(), page_size=100)
        assert target.id in [u.id for u in page.items]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": 0},
            {"page_size": 0},
            {"page_size": 101},
            {"sort_by": "email"},
            {"sort_dir": "sideways"},
            {"api_id": "nope"},
        ],
    )
    async def test_bad_parameters_are_rejected(self, store, kwargs):
        with pytest.raises(ValidationError):
            await store.users.list(**kwargs)

    async def test_params_and_kwargs_together_are_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.users.list(QueryParams(), q="x")


class TestCreate:
    async def test_round_trip(self, store):
        created = await store.users.create({"name": "  Ada Lovelace  ", "role": "Admin"})
        assert created.name == "Ada Lovelace"
        assert created.status == "active"
        assert created.created_at == NOW
        assert await store.users.get(created.id) == created

        page = await store.users.list(id=created.id)
        assert page.total == 1
        assert page.items == [created]

    async def test_id_filter_is_available_on_every_collection(self, store):
        for key, collection in store.collections.items():
            records = await collection.all()
            page = await collection.list(id=records[0].id)
            assert page.items == [records[0]], key

    async def test_defaults_fill_omitted_fields(self, store):
        user = await store.users.create({"name": "Grace"})
        assert user.role == "Viewer"
        notification = await store.notifications.create({"title": "Build finished"})
        assert notification.status == "unread"
        assert notification.time == NOW

    async def test_ids_are_unique(self, store):
        ids = {(await store.events.create({"title": f"event {n}"})).id for n in range(5)}
        existing = {e.id for e in await store.events.all()}
        assert len(ids) == 5
        assert ids <= existing

    async def test_blank_required_field_is_rejected(self, store, backend):
        await store.users.all()
        before = backend.snapshot()
        with pytest.raises(ValidationError) as exc_info:
            await store.users.create({"name": "   "})
        assert exc_info.value.code == "E4220"
        assert backend.snapshot() == before

    async def test_missing_required_field_is_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.emails.create({"subject": "Hello"})

    async def test_unknown_field_is_rejected(self, store):
        with pytest.raises(ValidationError) as exc_info:
            await store.users.create({"name": "Ada", "email": "ada@example.com"})
        assert exc_info.value.details["fields"] == ["email"]

    async def test_invalid_enum_is_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.users.create({"name": "Ada", "role": "Owner"})

    async def test_money_is_rounded_to_cents(self, store):
        payment = await store.payments.create({"customer": "Acme", "amount": 19.999})
        assert payment.amount == 20.0
        assert payment.currency == "EUR"
        assert payment.status == "succeeded"
        page = await store.payments.list(q="20", page_size=100)
        assert payment.id in [p.id for p in page.items]

    @pytest.mark.parametrize("rating,expected", [(7, 5), (0.4, 1), (2.5, 3), (4.49, 4), (-2, 1)])
    async def test_rating_is_clamped(self, store, rating, expected):
        feedback = await store.feedbacks.create({"author": "Sam", "comment": "ok", "rating": rating})
        assert feedback.rating == expected
        assert feedback.status == "new"

    async def test_subscription_accepts_datetime_start(self, store):
        start = datetime(2026, 9, 1, 8, 30, tzinfo=timezone.utc)
        subscription = await store.subscriptions.create(
            {"customer": "Acme", "plan": "Pro", "price": 49.9, "start": start}
        )
        assert subscription.start == "2026-09-01T08:30:00.000Z"
        assert subscription.end is None
        assert subscription.status == "active"

    async def test_email_sender_is_required(self, store):
        with pytest.raises(ValidationError):
            await store.emails.create({"subject": "Hi", "sender": ""})


class TestUpdate:
    async def test_partial_update_keeps_other_fields(self, store):
        user = (await store.users.all())[0]
        updated = await store.users.update(user.id, {"role": "Editor"})
        assert updated.role == "Editor"
        assert updated.name == user.name
        assert updated.created_at == user.created_at
        assert await store.users.get(user.id) == updated

    async def test_unknown_id_raises_not_found(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.users.update("missing", {"role": "Editor"})
        assert exc_info.value.details == {"collection": "users", "id": "missing"}

    async def test_id_is_immutable(self, store):
        user = (await store.users.all())[0]
        with pytest.raises(ValidationError):
            await store.users.update(user.id, {"id": "other"})

    async def test_rating_is_clamped_on_update(self, store):
        feedback = (await store.feedbacks.all())[0]
        assert (await store.feedbacks.update(feedback.id, {"rating": 11})).rating == 5

    async def test_blank_required_field_is_rejected(self, store):
        feedback = (await store.feedbacks.all())[0]
        with pytest.raises(ValidationError):
            await store.feedbacks.update(feedback.id, {"author": " "})

    async def test_update_resorts_collection(self, store):
        events = await store.events.all()
        last = events[-1]
        await store.events.update(last.id, {"time": "2026-10-19T00:00:00.000Z"})
        assert (await store.events.all())[0].id == last.id


class TestDelete:
    async def test_delete_is_idempotent(self, store, backend):
        user = (await store.users.all())[0]
        await store.users.delete(user.id)
        after_first = backend.snapshot()
        await store.users.delete(user.id)
        assert backend.snapshot() == after_first
        with pytest.raises(NotFoundError):
            await store.users.get(user.id)

    async def test_delete_bulk_ignores_unknown_ids(self, store):
        emails = await store.emails.all()
        await store.emails.delete_bulk([emails[0].id, emails[1].id, "missing"])
        remaining = await store.emails.all()
        assert len(remaining) == len(emails) - 2


class TestBulk:
    async def test_update_bulk(self, store):
        emails = await store.emails.all()
        ids = [e.id for e in emails[:5]]
        await store.emails.update_bulk(ids, {"status": "read"})
        by_id = {e.id: e for e in await store.emails.all()}
        assert all(by_id[i].status == "read" for i in ids)

    async def test_empty_id_set_never_touches_storage(self, store, backend):
        await store.emails.update_bulk([], {"status": "read"})
        await store.emails.delete_bulk([])
        assert backend.snapshot() == {}

    async def test_unknown_ids_leave_bytes_unchanged(self, store, backend):
        await store.feedbacks.all()
        before = backend.snapshot()
        await store.feedbacks.update_bulk(["missing"], {"status": "resolved"})
        await store.feedbacks.delete_bulk(["missing"])
        assert backend.snapshot() == before

    async def test_bulk_update_validates_changes(self, store):
        feedbacks = await store.feedbacks.all()
        with pytest.raises(ValidationError):
            await store.feedbacks.update_bulk([feedbacks[0].id], {"status": "closed"})


class TestToggle:
    async def test_user_status_flips_both_ways(self, store):
        user = (await store.users.all())[0]
        flipped = await store.users.toggle_status(user.id)
        assert flipped.status != user.status
        assert (await store.users.toggle_status(user.id)).status == user.status

    async def test_notifications_toggle_read_state(self, store):
        created = await store.notifications.create({"title": "Ping"})
        assert (await store.notifications.toggle_status(created.id)).status == "read"

    async def test_collection_without_toggle(self, store):
        payment = (await store.payments.all())[0]
        with pytest.raises(ValidationError):
            await store.payments.toggle_status(payment.id)
