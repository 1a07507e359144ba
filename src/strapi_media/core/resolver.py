# ABOUTME: Resolves a remote Strapi file to a local file node id, downloading at most once
# ABOUTME: Reuses cached nodes while the file's updatedAt is unchanged and contains download failures

import asyncio

from strapi_media.core.base import FileFetcher, MediaCache, NodeStore
from strapi_media.core.models import CacheEntry, RemoteFileDescriptor
from strapi_media.utils.logging import get_logger


class MediaResolver:
    """Turns file descriptors into local file node ids.

    A cache entry is reused iff its ``updatedAt`` equals the descriptor's and its
    node still exists; otherwise the file is fetched and the entry overwritten.
    Concurrent calls for the same file and ``updatedAt`` share one download.
    """

    def __init__(
        self,
        cache: MediaCache,
        nodes: NodeStore,
        fetcher: FileFetcher,
        api_url: str,
        remote_file_headers: dict[str, str] | None = None,
    ):
        self.cache = cache
        self.nodes = nodes
        self.fetcher = fetcher
        self.api_url = api_url.rstrip("/")
        self.remote_file_headers = dict(remote_file_headers or {})
        self.logger = get_logger(__name__)
        self._inflight: dict[tuple[str, str | None], asyncio.Task[str | None]] = {}

    def source_url(self, descriptor: RemoteFileDescriptor) -> str:
        """Absolute download URL for a descriptor."""
        if descriptor.is_absolute:
            return descriptor.url
        return f"{self.api_url}{descriptor.url}"

    async def resolve_file(self, descriptor: RemoteFileDescriptor) -> str | None:
        """Return the local node id for ``descriptor``, or None if it is unavailable."""
        # One download per file version; a newer updatedAt gets its own task
        key = (descriptor.cache_key, descriptor.updated_at)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(descriptor))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(task)

    def _forget(self, key: tuple[str, str | None], task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _resolve(self, descriptor: RemoteFileDescriptor) -> str | None:
        key = descriptor.cache_key
        source_url = self.source_url(descriptor)
        try:
            cached = await self.cache.get(key)
            if cached and cached.is_valid_for(descriptor):
                node = await self.nodes.get_node(cached.file_node_id)
                if node is not None:
                    await self.nodes.touch_node(node)
                    self.logger.debug("Reusing cached media file", file_id=descriptor.id, node_id=node.id)
                    return cached.file_node_id
                self.logger.info("Cached file node is missing, downloading again", file_id=descriptor.id)

            node = await self.fetcher.fetch(source_url, dict(self.remote_file_headers))
            await self.cache.set(key, CacheEntry(file_node_id=node.id, updated_at=descriptor.updated_at))
            return node.id

        except Exception as e:
            self.logger.warning(
                "Skipping media file",
                file_id=descriptor.id,
                url=source_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
