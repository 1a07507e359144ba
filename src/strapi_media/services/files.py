# ABOUTME: Fetch-and-persist primitive: downloads a remote file and registers a local file node
# ABOUTME: Streams the body to disk under a URL-derived name and returns the stored node

import asyncio
import hashlib
import mimetypes
import uuid
from pathlib import Path
from urllib.parse import urlparse

import httpx

from strapi_media.core.base import FileFetchError
from strapi_media.persistence import DatabaseManager, LocalFileNode
from strapi_media.utils.logging import get_logger


def node_id_for_url(url: str) -> str:
    """Stable local identifier for the file behind ``url``."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, url))


def local_filename(url: str, content_type: str | None = None) -> str:
    """File name for a download: URL hash plus the best extension we can find."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
    suffix = Path(urlparse(url).path).suffix.lower()
    if not suffix and content_type:
        suffix = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
    return f"{digest}{suffix}"


class RemoteFileFetcher:
    """Downloads media files and records them as local file nodes."""

    def __init__(
        self,
        nodes: DatabaseManager,
        download_dir: Path,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_concurrent: int = 8,
    ):
        """Initialize the fetcher.

        Args:
            nodes: Node store the created nodes are saved to
            download_dir: Directory receiving downloaded files
            client: HTTP client to reuse (tests pass one with a mock transport)
            timeout: Download timeout in seconds
            max_concurrent: Maximum number of downloads in flight at once
        """
        self.nodes = nodes
        self.download_dir = Path(download_dir)
        self.http_client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._slots = asyncio.Semaphore(max_concurrent)
        self.logger = get_logger(__name__)

    async def fetch(self, url: str, headers: dict[str, str]) -> LocalFileNode:
        """Download ``url`` and return the local node for it.

        Raises:
            FileFetchError: If the request fails or the file cannot be written
        """
        async with self._slots:
            try:
                path, content_type, size = await self._download(url, headers)
            except httpx.HTTPError as e:
                raise FileFetchError(f"Download failed for {url}: {e}") from e
            except OSError as e:
                raise FileFetchError(f"Could not store {url}: {e}") from e

        node = LocalFileNode(
            id=node_id_for_url(url),
            url=url,
            path=str(path),
            mime_type=content_type,
            size=size,
        )
        node = await self.nodes.save_node(node)
        self.logger.info("Downloaded media file", url=url, node_id=node.id, size=size, path=str(path))
        return node

    async def _download(self, url: str, headers: dict[str, str]) -> tuple[Path, str | None, int]:
        self.download_dir.mkdir(parents=True, exist_ok=True)

        async with self.http_client.stream("GET", url, headers=headers) as response:
            response.raise_for_status()
            content_type = response.headers.get("Content-Type")
            destination = self.download_dir / local_filename(url, content_type)
            partial = destination.with_name(destination.name + ".part")

            size = 0
            try:
                with partial.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
                        size += len(chunk)
            except (httpx.HTTPError, OSError):
                partial.unlink(missing_ok=True)
                raise

        partial.replace(destination)
        return destination, content_type, size

    async def close(self) -> None:
        await self.http_client.aclose()
