# ABOUTME: High-level service wiring persistence, HTTP clients and the resolver into one media sync
# ABOUTME: Used by the CLI to run download_media_files against a configured Strapi instance

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from strapi_media.config import Config, get_config
from strapi_media.core.context import MediaContext
from strapi_media.core.resolver import MediaResolver
from strapi_media.core.walker import download_media_files
from strapi_media.persistence import DatabaseManager, LocalFileNode
from strapi_media.schema.registry import SchemaRegistry
from strapi_media.services.files import RemoteFileFetcher
from strapi_media.services.strapi import StrapiClient
from strapi_media.utils.logging import get_logger


class MediaSyncService:
    """Owns the collaborators of a media sync and their lifecycle."""

    def __init__(
        self,
        schemas: SchemaRegistry,
        config: Config | None = None,
        database: DatabaseManager | None = None,
        strapi_client: StrapiClient | None = None,
        fetcher: RemoteFileFetcher | None = None,
    ):
        self.config = config or get_config()
        self.database = database or DatabaseManager(self.config.database_url)
        self.strapi_client = strapi_client or StrapiClient(
            self.config.api_base,
            api_token=self.config.api_token,
            timeout=self.config.request_timeout,
        )
        self.fetcher = fetcher or RemoteFileFetcher(
            self.database,
            self.config.download_dir,
            timeout=self.config.request_timeout,
            max_concurrent=self.config.max_concurrent_downloads,
        )
        self.resolver = MediaResolver(
            cache=self.database,
            nodes=self.database,
            fetcher=self.fetcher,
            api_url=self.config.api_base,
            remote_file_headers=self.config.remote_file_headers,
        )
        self.context = MediaContext(
            schemas=schemas,
            resolver=self.resolver,
            files=self.strapi_client,
            api_url=self.config.api_base,
        )
        self.logger = get_logger(__name__)

    async def sync(self, entities: Sequence[Mapping[str, Any]], content_type_uid: str) -> list[dict[str, Any]]:
        """Resolve media for a batch of entities of one content type."""
        await self.database.create_tables()
        return await download_media_files(entities, self.context, content_type_uid)

    async def prune(self, run_started_at: datetime) -> list[LocalFileNode]:
        """Drop file nodes the finished run did not reference."""
        return await self.database.prune_untouched_nodes(run_started_at)

    async def close(self) -> None:
        await self.strapi_client.close()
        await self.fetcher.close()
        await self.database.close()
