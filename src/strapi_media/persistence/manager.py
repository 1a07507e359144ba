# ABOUTME: Database manager backing the media cache and the local file node store
# ABOUTME: Async SQLite operations via SQLAlchemy async engine and SQLModel sessions

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from strapi_media.core.models import CacheEntry
from strapi_media.persistence.models import LocalFileNode, MediaCacheRecord, utcnow
from strapi_media.utils.logging import get_logger


class DatabaseManager:
    """Persistent cache store and node store for downloaded media.

    Implements the ``get``/``set`` cache interface keyed by ``strapi-media-<id>``
    and the ``get_node``/``touch_node`` node-store interface.
    """

    def __init__(self, database_url: str = "sqlite+aiosqlite:///./data/strapi_media.db"):
        """Initialize the database manager.

        Args:
            database_url: SQLAlchemy async database URL (e.g. sqlite+aiosqlite:///./db.db)
        """
        self.database_url = database_url
        self.logger = get_logger(__name__)
        self.engine = create_async_engine(database_url, echo=False)
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_tables(self) -> None:
        """Create all database tables if they don't exist.

        The directory holding a file-backed SQLite database is created first.
        """
        database_file = self._sqlite_file()
        if database_file is not None:
            database_file.parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    def _sqlite_file(self) -> Path | None:
        """Path of the SQLite database file, or None for in-memory and non-SQLite URLs."""
        url = make_url(self.database_url)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return None
        if url.database.startswith("file:"):
            return None
        return Path(url.database)

    # --- Cache store ---------------------------------------------------------------------
    async def get(self, key: str) -> CacheEntry | None:
        """Return the cache entry stored under ``key``."""
        async with self.async_session() as session:
            record = await session.get(MediaCacheRecord, key)
            if record is None:
                return None
            return CacheEntry(file_node_id=record.file_node_id, updated_at=record.updated_at)

    async def set(self, key: str, entry: CacheEntry) -> None:
        """Insert or overwrite the cache entry stored under ``key``."""
        async with self.async_session() as session:
            record = await session.get(MediaCacheRecord, key)
            if record:
                record.file_node_id = entry.file_node_id
                record.updated_at = entry.updated_at
                record.stored_at = utcnow()
            else:
                record = MediaCacheRecord(key=key, file_node_id=entry.file_node_id, updated_at=entry.updated_at)
            session.add(record)
            await session.commit()

    async def clear_cache(self) -> int:
        """Remove every cache entry. Local file nodes are kept.

        Returns:
            Number of entries removed
        """
        async with self.async_session() as session:
            statement = delete(MediaCacheRecord)
            # exec() is only for SELECT; bulk DELETE goes through the connection
            result = await (await session.connection()).execute(statement)
            await session.commit()
            self.logger.info("Cleared media cache", entries=result.rowcount)
            return result.rowcount

    # --- Node store ----------------------------------------------------------------------
    async def get_node(self, node_id: str) -> LocalFileNode | None:
        async with self.async_session() as session:
            return await session.get(LocalFileNode, node_id)

    async def save_node(self, node: LocalFileNode) -> LocalFileNode:
        """Insert or replace a file node (the same URL always maps to the same id)."""
        async with self.async_session() as session:
            merged = await session.merge(node)
            await session.commit()
            await session.refresh(merged)
            return merged

    async def touch_node(self, node: LocalFileNode) -> None:
        """Mark ``node`` as still referenced so pruning keeps it."""
        async with self.async_session() as session:
            stored = await session.get(LocalFileNode, node.id)
            if stored is None:
                return
            stored.touched_at = utcnow()
            session.add(stored)
            await session.commit()
            node.touched_at = stored.touched_at

    async def prune_untouched_nodes(self, before: datetime) -> list[LocalFileNode]:
        """Delete nodes (and their files) that no run has referenced since ``before``.

        Args:
            before: Typically the start time of the run that just finished

        Returns:
            The removed nodes
        """
        async with self.async_session() as session:
            result = await session.exec(select(LocalFileNode).where(LocalFileNode.touched_at < before))
            stale = list(result.all())
            for node in stale:
                Path(node.path).unlink(missing_ok=True)
                await session.delete(node)
            await session.commit()

        if stale:
            self.logger.info("Pruned untouched file nodes", count=len(stale))
        return stale

    async def close(self) -> None:
        """Close the database connection."""
        await self.engine.dispose()

