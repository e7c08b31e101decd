"""Deterministic sample-data generation.

A ``SeedContext`` wraps a ``random.Random`` seeded with a fixed value and a
reference "now". Two contexts built from the same seed and the same clock
reading produce identical records, which is what snapshot-style tests rely on.
"""

from __future__ import annotations

import random
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence, TypeVar

from dashstore.engine.clock import to_timestamp

T = TypeVar("T")

FIRST_NAMES = (
    "Ada", "Alan", "Amelia", "Bianca", "Carlos", "Chloe", "Dmitri", "Elena",
    "Farah", "Gabriel", "Hana", "Ibrahim", "Ines", "Jonas", "Keiko", "Liam",
    "Lucia", "Mateo", "Maya", "Nadia", "Noah", "Olga", "Pablo", "Priya",
    "Quentin", "Rosa", "Samir", "Sofia", "Tariq", "Uma", "Victor", "Wen",
    "Yara", "Zoe",
)

LAST_NAMES = (
    "Anderson", "Bauer", "Costa", "Dubois", "Eriksen", "Fischer", "Garcia",
    "Haddad", "Ivanova", "Jensen", "Kowalski", "Laurent", "Moreau", "Nakamura",
    "Okafor", "Petrov", "Quinn", "Rossi", "Schmidt", "Tanaka", "Umarov",
    "Vargas", "Weber", "Xu", "Yilmaz", "Zhang",
)

LOREM = (
    "lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing",
    "elit", "sed", "do", "eiusmod", "tempor", "incididunt", "ut", "labore",
    "et", "dolore", "magna", "aliqua", "enim", "ad", "minim", "veniam", "quis",
    "nostrud", "exercitation", "ullamco", "laboris", "nisi", "aliquip", "ex",
    "ea", "commodo", "consequat", "duis", "aute", "irure", "in",
    "reprehenderit", "voluptate", "velit", "esse", "cillum", "fugiat", "nulla",
    "pariatur", "excepteur", "sint", "occaecat", "cupidatat", "non", "proident",
)

COMPANY_WORDS = (
    "Acme", "Blue", "Cedar", "Delta", "Ember", "Falcon", "Granite", "Harbor",
    "Indigo", "Juniper", "Kestrel", "Lumen", "Meridian", "Nimbus", "Orbit",
    "Pioneer", "Quartz", "Redwood", "Summit", "Tidal", "Vertex", "Willow",
)

COMPANY_SUFFIXES = ("Inc", "LLC", "Group", "Labs", "Systems", "Partners", "and Sons")

DOMAINS = ("example.com", "example.org", "mail.test", "inbox.dev", "corp.io")

TLDS = ("com", "io", "net", "org", "dev")

_ALPHANUMERIC = string.ascii_lowercase + string.digits


@dataclass
class SeedContext:
    """Random source plus reference time for one seeding run."""

    rng: random.Random
    now: datetime

    def uuid(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))

    def integer(self, low: int, high: int) -> int:
        return self.rng.randint(low, high)

    def decimal(self, low: float, high: float, digits: int = 2) -> float:
        return round(self.rng.uniform(low, high), digits)

    def boolean(self) -> bool:
        return self.rng.random() < 0.5

    def pick(self, options: Sequence[T]) -> T:
        return self.rng.choice(options)

    def pick_some(self, options: Sequence[T], low: int, high: int) -> list[T]:
        count = self.rng.randint(low, min(high, len(options)))
        return self.rng.sample(list(options), count)

    def weighted(self, choices: Sequence[tuple[T, int]]) -> T:
        values = [value for value, _ in choices]
        weights = [weight for _, weight in choices]
        return self.rng.choices(values, weights=weights, k=1)[0]

    def recent(self, days: int) -> str:
        """Timestamp within the last ``days`` days."""
        offset = self.rng.uniform(0, days * 86400)
        return to_timestamp(self.now - timedelta(seconds=offset))

    def soon(self, days: int) -> str:
        """Timestamp within the next ``days`` days."""
        offset = self.rng.uniform(0, days * 86400)
        return to_timestamp(self.now + timedelta(seconds=offset))

    def full_name(self) -> str:
        return f"{self.pick(FIRST_NAMES)} {self.pick(LAST_NAMES)}"

    def words(self, low: int, high: int) -> str:
        return " ".join(self.pick(LOREM) for _ in range(self.integer(low, high)))

    def sentence(self, low: int, high: int) -> str:
        text = self.words(low, high)
        return f"{text[:1].upper()}{text[1:]}."

    def username(self) -> str:
        first = self.pick(FIRST_NAMES).lower()
        last = self.pick(LAST_NAMES).lower()
        return f"{first}.{last}{self.integer(1, 99)}"

    def email(self) -> str:
        return f"{self.username()}@{self.pick(DOMAINS)}"

    def company(self) -> str:
        return f"{self.pick(COMPANY_WORDS)} {self.pick(COMPANY_WORDS)} {self.pick(COMPANY_SUFFIXES)}"

    def url(self) -> str:
        return f"https://{self.pick(COMPANY_WORDS).lower()}-{self.pick(LOREM)}.{self.pick(TLDS)}"

    def alphanumeric(self, length: int) -> str:
        return "".join(self.rng.choice(_ALPHANUMERIC) for _ in range(length))
