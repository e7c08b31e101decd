"""Visitor analytics: a daily series, its per-channel breakdown and KPIs.

The per-channel series is derived from the daily one: each day's visitors are
spread over the channels with random weights, flooring every share and letting
the last channel take the remainder so per-day totals reconcile exactly.
"""

from __future__ import annotations

import random
from datetime import timedelta
from typing import Any

from pydantic import BaseModel

from dashstore.core.logging import get_logger, operation_scope
from dashstore.core.persistence import PersistenceAdapter
from dashstore.engine.clock import same_day, to_timestamp
from dashstore.engine.collection import Series, Singleton
from dashstore.engine.runtime import StoreRuntime
from dashstore.engine.seeding import SeedContext
from dashstore.entities.base import round_half_up

logger = get_logger(__name__)

CHANNELS = ("direct", "organic", "social", "referral", "email", "paid")
HISTORY_DAYS = 60


class DailyVisitors(BaseModel):
    date: str
    visitors: int


class ChannelCounts(BaseModel):
    direct: int = 0
    organic: int = 0
    social: int = 0
    referral: int = 0
    email: int = 0
    paid: int = 0

    def total(self) -> int:
        return sum(getattr(self, channel) for channel in CHANNELS)


class DailySources(BaseModel):
    date: str
    channels: ChannelCounts


class AnalyticsSummary(BaseModel):
    days: list[DailyVisitors]
    total_visitors: int
    avg_per_day: int
    updated_at: str


class SourceItem(BaseModel):
    channel: str
    visitors: int
    percent: int


class SourcesBreakdown(BaseModel):
    items: list[SourceItem]
    total: int
    updated_at: str


class AnalyticsKpis(BaseModel):
    signups: int
    conversion_rate_pct: int
    bounce_rate_pct: int
    avg_session_min: int
    updated_at: str


def spread_over_channels(rng: random.Random, visitors: int) -> ChannelCounts:
    """Distribute ``visitors`` over every channel; shares always sum to the input."""
    weights = [rng.randint(1, 10) for _ in CHANNELS]
    total_weight = sum(weights)
    remaining = visitors
    counts: dict[str, int] = {}
    for idx, (channel, weight) in enumerate(zip(CHANNELS, weights)):
        if idx == len(CHANNELS) - 1:
            counts[channel] = max(0, remaining)
        else:
            share = (visitors * weight) // total_weight
            remaining -= share
            counts[channel] = max(0, share)
    return ChannelCounts(**counts)


def seed_daily(ctx: SeedContext, upstream: Any) -> list[dict]:
    return [
        {
            "date": to_timestamp(ctx.now - timedelta(days=HISTORY_DAYS - 1 - i)),
            "visitors": ctx.integer(80, 320),
        }
        for i in range(HISTORY_DAYS)
    ]


def seed_sources(ctx: SeedContext, upstream: list[DailyVisitors]) -> list[DailySources]:
    return [DailySources(date=day.date, channels=spread_over_channels(ctx.rng, day.visitors)) for day in upstream]


def seed_kpis(ctx: SeedContext) -> AnalyticsKpis:
    return AnalyticsKpis(
        signups=ctx.integer(20, 400),
        conversion_rate_pct=ctx.integer(1, 12),
        bounce_rate_pct=ctx.integer(20, 70),
        avg_session_min=ctx.integer(1, 8),
        updated_at=to_timestamp(ctx.now),
    )


def _clamp(value: int, low: int, high: int) -> int:
    return min(high, max(low, value))


class AnalyticsService:
    """Daily visitors, channel breakdown and KPIs of one store."""

    def __init__(self, adapter: PersistenceAdapter, runtime: StoreRuntime):
        self._runtime = runtime
        self.daily = Series("analytics_daily", DailyVisitors, seed_daily, adapter, runtime)
        self.sources = Series(
            "analytics_sources_daily", DailySources, seed_sources, adapter, runtime, source=self.daily
        )
        self.kpi_store = Singleton("analytics_kpis", AnalyticsKpis, seed_kpis, adapter, runtime)

    async def last_days(self, count: int = 7) -> AnalyticsSummary:
        """Visitors of the ``count`` most recent days, oldest first."""
        with operation_scope("analytics_daily", "last_days"):
            days = (await self.daily.get())[-count:] if count > 0 else []
            total = sum(day.visitors for day in days)
            return AnalyticsSummary(
                days=days,
                total_visitors=total,
                avg_per_day=round_half_up(total / len(days)) if days else 0,
                updated_at=self._runtime.timestamp(),
            )

    async def refresh_today(self, count: int = 7) -> AnalyticsSummary:
        """Append today if the series does not reach it yet, otherwise nudge today's count."""
        with operation_scope("analytics_daily", "refresh_today"):
            rng = self._runtime.rng
            now = self._runtime.now()
            days = await self.daily.get()
            if days and same_day(days[-1].date, now):
                last = days[-1]
                days[-1] = last.model_copy(update={"visitors": max(0, last.visitors + rng.randint(-20, 30))})
            else:
                days.append(DailyVisitors(date=to_timestamp(now), visitors=rng.randint(80, 320)))
            await self.daily.put(days)
            logger.debug("Visitors refreshed", data={"date": days[-1].date, "visitors": days[-1].visitors})
        return await self.last_days(count)

    async def sources_breakdown(self, count: int = 7) -> SourcesBreakdown:
        """Per-channel totals over the ``count`` most recent days, biggest first."""
        with operation_scope("analytics_sources_daily", "sources_breakdown"):
            days = (await self.sources.get())[-count:] if count > 0 else []
            totals = {channel: sum(getattr(day.channels, channel) for day in days) for channel in CHANNELS}
            total = sum(totals.values())
            items = [
                SourceItem(
                    channel=channel,
                    visitors=visitors,
                    percent=round_half_up(visitors / total * 100) if total > 0 else 0,
                )
                for channel, visitors in totals.items()
            ]
            items.sort(key=lambda item: item.visitors, reverse=True)
            return SourcesBreakdown(items=items, total=total, updated_at=self._runtime.timestamp())

    async def refresh_sources(self, count: int = 7) -> SourcesBreakdown:
        with operation_scope("analytics_sources_daily", "refresh_sources"):
            rng = self._runtime.rng
            now = self._runtime.now()
            days = await self.sources.get()
            if days and same_day(days[-1].date, now):
                last = days[-1]
                nudged = {
                    channel: max(0, getattr(last.channels, channel) + rng.randint(-10, 15)) for channel in CHANNELS
                }
                days[-1] = DailySources(date=last.date, channels=ChannelCounts(**nudged))
            else:
                days.append(DailySources(date=to_timestamp(now), channels=spread_over_channels(rng, rng.randint(80, 320))))
            await self.sources.put(days)
        return await self.sources_breakdown(count)

    async def kpis(self) -> AnalyticsKpis:
        current = await self.kpi_store.get()
        return current.model_copy(update={"updated_at": self._runtime.timestamp()})

    async def refresh_kpis(self) -> AnalyticsKpis:
        with operation_scope("analytics_kpis", "refresh"):
            rng = self._runtime.rng
            current = await self.kpi_store.get()
            refreshed = AnalyticsKpis(
                signups=max(0, current.signups + rng.randint(-15, 30)),
                conversion_rate_pct=_clamp(current.conversion_rate_pct + rng.randint(-2, 2), 0, 100),
                bounce_rate_pct=_clamp(current.bounce_rate_pct + rng.randint(-3, 3), 0, 100),
                avg_session_min=max(0, current.avg_session_min + rng.randint(-1, 2)),
                updated_at=self._runtime.timestamp(),
            )
            await self.kpi_store.put(refreshed)
            return refreshed

    async def reset(self) -> None:
        await self.daily.reset()
        await self.sources.reset()
        await self.kpi_store.reset()
