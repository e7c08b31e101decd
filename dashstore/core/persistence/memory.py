"""In-memory blob backend.

Per-process only: used by tests and throwaway sessions. Swapping it in for a
durable backend gives every test an isolated, empty store.
"""

from __future__ import annotations

from dashstore.core.persistence import BlobBackend


class InMemoryBackend(BlobBackend):
    """Dict of key -> raw blob."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._blobs: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self._blobs.get(key)

    async def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    async def remove(self, key: str) -> None:
        self._blobs.pop(key, None)

    async def close(self) -> None:
        return None

    def snapshot(self) -> dict[str, str]:
        """Copy of every raw blob, for byte-level comparisons."""
        return dict(self._blobs)
