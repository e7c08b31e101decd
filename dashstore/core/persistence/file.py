"""File blob backend: one ``<key>.json`` file per collection in a directory."""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path

from dashstore.core.exceptions import PersistenceReadError
from dashstore.core.persistence import BlobBackend

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileBackend(BlobBackend):
    """Durable backend writing each blob atomically (temp file + replace)."""

    def __init__(self, directory: str | os.PathLike[str]):
        self._directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def _read_sync(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceReadError(key, str(exc)) from exc

    def _write_sync(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(blob, encoding="utf-8")
        os.replace(tmp, path)

    def _remove_sync(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    async def read(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, blob: str) -> None:
        await asyncio.to_thread(self._write_sync, key, blob)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_sync, key)

    async def close(self) -> None:
        return None
