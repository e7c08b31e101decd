"""Blob persistence abstractions.

Every collection is persisted as a single JSON blob under a namespaced key.
Backends only move opaque strings around; the adapter owns namespacing, the
JSON codec and recovery from unreadable blobs.

Usage:
    from dashstore.core.persistence import PersistenceAdapter
    from dashstore.core.persistence.factory import get_backend

    adapter = PersistenceAdapter(get_backend("memory"), key_prefix="dc_")
    await adapter.save("users", [...])
    users = await adapter.load("users")  # None when absent or unreadable
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from dashstore.core.exceptions import PersistenceReadError
from dashstore.core.logging import get_logger

__all__ = [
    "BlobBackend",
    "PersistenceAdapter",
    "encode_blob",
    "decode_blob",
]

logger = get_logger(__name__)


class BlobBackend(Protocol):
    """Protocol for blob storage backends.

    Implementations replace the whole value on write; there is no partial or
    merge semantics at this layer.
    """

    async def read(self, key: str) -> str | None:
        """Return the raw blob stored under ``key``, or None when absent.

        Raises:
            PersistenceReadError: The underlying medium could not be read.
        """
        ...

    async def write(self, key: str, blob: str) -> None:
        """Replace the blob stored under ``key``."""
        ...

    async def remove(self, key: str) -> None:
        """Drop ``key``. Missing keys are ignored."""
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""
        ...


def encode_blob(value: Any) -> str:
    """Canonical JSON encoding: unchanged content always yields identical bytes."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def decode_blob(key: str, blob: str) -> Any:
    try:
        return json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise PersistenceReadError(key, str(exc)) from exc


class PersistenceAdapter:
    """Loads and saves whole collections under namespaced keys."""

    def __init__(self, backend: BlobBackend, key_prefix: str = "dc_"):
        self._backend = backend
        self._prefix = key_prefix

    @property
    def backend(self) -> BlobBackend:
        return self._backend

    def namespaced(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def load(self, key: str) -> Any | None:
        """Return the decoded value for ``key``.

        Missing and malformed blobs both come back as None; callers treat
        that exactly like "not yet created".
        """
        full_key = self.namespaced(key)
        try:
            blob = await self._backend.read(full_key)
            if blob is None:
                return None
            return decode_blob(full_key, blob)
        except PersistenceReadError as exc:
            logger.warning(
                "Unreadable blob treated as empty",
                data={"key": full_key, "reason": exc.message},
            )
            return None

    async def save(self, key: str, value: Any) -> None:
        await self._backend.write(self.namespaced(key), encode_blob(value))

    async def remove(self, key: str) -> None:
        await self._backend.remove(self.namespaced(key))

    async def close(self) -> None:
        await self._backend.close()
