"""Factory functions for blob backends.

Returns the backend implementation matching the configured name
(memory|file|sqlite|sql|redis).

Usage:
    from dashstore.core.persistence.factory import get_backend_from_settings

    backend = get_backend_from_settings(settings)
"""

from __future__ import annotations

from dashstore.config.settings import Settings
from dashstore.core.exceptions import ConfigurationError
from dashstore.core.persistence import BlobBackend
from dashstore.core.persistence.file import FileBackend
from dashstore.core.persistence.memory import InMemoryBackend


def get_backend(
    backend: str = "memory",
    *,
    storage_path: str = "",
    database_url: str = "",
    redis_url: str = "",
) -> BlobBackend:
    """Get a blob backend implementation.

    Args:
        backend: Backend type ("memory", "file", "sqlite", "sql" or "redis")
        storage_path: Directory for the file backend
        database_url: SQLAlchemy async URL for the sqlite/sql backend
        redis_url: Redis connection URL for the redis backend

    Returns:
        BlobBackend implementation

    Raises:
        ConfigurationError: Unknown backend, or its required setting is missing
    """
    if backend == "memory":
        return InMemoryBackend()

    if backend == "file":
        if not storage_path:
            raise ConfigurationError("storage_path is required when storage_backend=file")
        return FileBackend(storage_path)

    if backend in ("sqlite", "sql"):
        if not database_url:
            raise ConfigurationError("database_url is required when storage_backend=sql")
        from dashstore.core.persistence.sql import SqlBackend

        return SqlBackend(database_url)

    if backend == "redis":
        if not redis_url:
            raise ConfigurationError("redis_url is required when storage_backend=redis")
        from dashstore.core.persistence.redis_backend import RedisBackend

        return RedisBackend(redis_url)

    raise ConfigurationError(
        f"Unknown storage_backend: {backend}. Use 'memory', 'file', 'sqlite', 'sql' or 'redis'"
    )


def get_backend_from_settings(settings: Settings) -> BlobBackend:
    """Get the blob backend described by settings."""
    return get_backend(
        settings.storage_backend,
        storage_path=settings.storage_path,
        database_url=settings.database_url,
        redis_url=settings.redis_url,
    )
