"""Payments and subscriptions. Amounts and prices carry two decimals."""

from __future__ import annotations

from typing import Literal, Optional

from dashstore.engine.collection import CollectionSchema
from dashstore.engine.query import QuerySpec
from dashstore.entities.base import CURRENCIES, Currency, Record, round_money, timestamp_value

PaymentStatus = Literal["succeeded", "pending", "failed", "refunded"]
Plan = Literal["Basic", "Pro", "Enterprise"]
SubscriptionStatus = Literal["active", "canceled"]


class Payment(Record):
    customer: str
    amount: float
    currency: Currency
    status: PaymentStatus
    time: str


class Subscription(Record):
    customer: str
    plan: Plan
    price: float
    currency: Currency
    status: SubscriptionStatus
    start: str
    end: Optional[str] = None


def seed_payments(ctx, sources) -> list[dict]:
    return [
        {
            "id": ctx.uuid(),
            "customer": ctx.full_name(),
            "amount": ctx.decimal(10, 2000),
            "currency": ctx.pick(CURRENCIES),
            "status": ctx.pick(("succeeded", "pending", "failed", "refunded")),
            "time": ctx.recent(60),
        }
        for _ in range(40)
    ]


def seed_subscriptions(ctx, sources) -> list[dict]:
    seeded = []
    for _ in range(50):
        is_active = ctx.integer(0, 100) < 80
        start = ctx.recent(90)
        duration_days = ctx.integer(30, 365)
        seeded.append(
            {
                "id": ctx.uuid(),
                "customer": ctx.full_name(),
                "plan": ctx.pick(("Basic", "Pro", "Enterprise")),
                "price": ctx.decimal(5, 300),
                "currency": ctx.pick(CURRENCIES),
                "status": "active" if is_active else "canceled",
                "start": start,
                "end": None if is_active else ctx.soon(duration_days),
            }
        )
    return seeded


PAYMENTS = CollectionSchema(
    key="payments",
    model=Payment,
    query=QuerySpec(
        search=lambda p: (p.customer, p.currency, p.amount, p.status),
        sort_fields={
            "time": lambda p: p.time,
            "amount": lambda p: p.amount,
        },
        default_sort="time",
        status_field="status",
        date_field="time",
    ),
    seed=seed_payments,
    creatable=frozenset({"customer", "amount", "currency", "status"}),
    updatable=frozenset({"customer", "amount", "currency", "status"}),
    required=("customer", "amount"),
    defaults=lambda runtime: {"currency": "EUR", "status": "succeeded"},
    normalizers={"amount": round_money},
    created_field="time",
)

SUBSCRIPTIONS = CollectionSchema(
    key="subscriptions",
    model=Subscription,
    query=QuerySpec(
        search=lambda s: (s.customer, s.plan, s.price, s.currency, s.status),
        sort_fields={
            "start": lambda s: s.start,
            "price": lambda s: s.price,
        },
        default_sort="start",
        status_field="status",
        date_field="start",
    ),
    seed=seed_subscriptions,
    creatable=frozenset({"customer", "plan", "price", "currency", "status", "start", "end"}),
    updatable=frozenset({"customer", "plan", "price", "currency", "status", "start", "end"}),
    required=("customer", "plan", "price"),
    defaults=lambda runtime: {"currency": "EUR", "status": "active"},
    normalizers={"price": round_money, "start": timestamp_value, "end": timestamp_value},
    created_field="start",
)
