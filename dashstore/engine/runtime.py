"""Per-store runtime: clock, random sources and query limits."""

from __future__ import annotations

import random
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from dashstore.engine.clock import Clock, to_timestamp, utc_now
from dashstore.engine.seeding import SeedContext

SECRET_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"


@dataclass
class StoreRuntime:
    """Shared by every collection of one store.

    ``seed`` feeds a fresh ``random.Random`` for each seeding run; ``rng`` is
    the unseeded source used by mutations and metric refreshes.
    """

    seed: int = 42
    clock: Clock = utc_now
    rng: random.Random = field(default_factory=random.Random)
    default_page_size: int = 10
    max_page_size: int = 100

    def now(self) -> datetime:
        return self.clock()

    def timestamp(self) -> str:
        return to_timestamp(self.clock())

    def seed_context(self, key: str) -> SeedContext:
        # Keyed so no two collections draw the same stream (and the same ids)
        return SeedContext(rng=random.Random(f"{self.seed}:{key}"), now=self.clock())

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def new_secret(self, length: int = 32) -> str:
        return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))
