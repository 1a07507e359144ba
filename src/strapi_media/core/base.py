# ABOUTME: Protocol interfaces for the collaborators the media pipeline depends on
# ABOUTME: Cache store, node store, fetch-and-persist primitive, file metadata source, and error types

from typing import Protocol

from strapi_media.core.models import CacheEntry, RemoteFileDescriptor
from strapi_media.persistence.models import LocalFileNode


class StrapiMediaError(Exception):
    """Base exception for media pipeline errors."""

    pass


class SchemaNotFoundError(StrapiMediaError):
    """Raised when no content-type schema is registered for a uid."""

    def __init__(self, uid: str):
        super().__init__(f"No content-type schema registered for '{uid}'")
        self.uid = uid


class FileFetchError(StrapiMediaError):
    """Raised when a remote file cannot be downloaded or stored."""

    pass


class FileMetadataError(StrapiMediaError):
    """Raised when the CMS file metadata query fails."""

    pass


class MediaCache(Protocol):
    """Key-value store that survives between pipeline runs."""

    async def get(self, key: str) -> CacheEntry | None: ...

    async def set(self, key: str, entry: CacheEntry) -> None: ...


class NodeStore(Protocol):
    """Registry of local file nodes created by previous downloads."""

    async def get_node(self, node_id: str) -> LocalFileNode | None: ...

    async def touch_node(self, node: LocalFileNode) -> None: ...


class FileFetcher(Protocol):
    """Downloads a URL, persists it locally and returns the created node.

    Raises:
        FileFetchError: If the download or the write fails
    """

    async def fetch(self, url: str, headers: dict[str, str]) -> LocalFileNode: ...


class FileMetadataSource(Protocol):
    """Looks up CMS file metadata by (relative) file URL."""

    async def find_file(self, url: str) -> RemoteFileDescriptor | None: ...
