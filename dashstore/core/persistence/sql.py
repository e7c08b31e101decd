"""SQL blob backend: one row per collection in ``dashstore_blobs``."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from dashstore.core.exceptions import PersistenceReadError
from dashstore.core.logging import get_logger
from dashstore.core.persistence import BlobBackend
from dashstore.db.models import Base, StoredBlob
from dashstore.db.session import make_engine, make_session_factory

logger = get_logger(__name__)


class SqlBackend(BlobBackend):
    """Async SQLAlchemy backend (SQLite via aiosqlite, Postgres via asyncpg).

    The engine is created lazily and the table is created on first use.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self._database_url = database_url
        self._echo = echo
        self._engine = None
        self._session_factory = None

    async def _get_session_factory(self):
        """Get or create the session factory (lazy initialization)."""
        if self._session_factory is None:
            self._engine = make_engine(self._database_url, echo=self._echo)
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self._session_factory = make_session_factory(self._engine)
            logger.debug("SQL blob backend ready", data={"dialect": self._engine.dialect.name})
        return self._session_factory

    async def read(self, key: str) -> str | None:
        factory = await self._get_session_factory()
        try:
            async with factory() as session:
                result = await session.execute(select(StoredBlob.value).where(StoredBlob.key == key))
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceReadError(key, str(exc)) from exc

    async def write(self, key: str, blob: str) -> None:
        factory = await self._get_session_factory()
        async with factory() as session:
            async with session.begin():
                await session.merge(StoredBlob(key=key, value=blob))

    async def remove(self, key: str) -> None:
        factory = await self._get_session_factory()
        async with factory() as session:
            async with session.begin():
                await session.execute(delete(StoredBlob).where(StoredBlob.key == key))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
