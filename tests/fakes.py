# ABOUTME: In-memory collaborators for media pipeline tests
# ABOUTME: Dict-backed cache/node store, a recording fetcher, and a dict-backed metadata source

from __future__ import annotations

from strapi_media.core.base import FileFetchError
from strapi_media.core.models import CacheEntry, RemoteFileDescriptor
from strapi_media.persistence import LocalFileNode
from strapi_media.services.files import node_id_for_url

API_URL = "https://cms.example"


class MemoryStore:
    """Dict-backed cache store and node store."""

    def __init__(self):
        self.entries: dict[str, CacheEntry] = {}
        self.nodes: dict[str, LocalFileNode] = {}
        self.touched: list[str] = []

    async def get(self, key: str) -> CacheEntry | None:
        return self.entries.get(key)

    async def set(self, key: str, entry: CacheEntry) -> None:
        self.entries[key] = entry

    async def get_node(self, node_id: str) -> LocalFileNode | None:
        return self.nodes.get(node_id)

    async def touch_node(self, node: LocalFileNode) -> None:
        self.touched.append(node.id)

    async def save_node(self, node: LocalFileNode) -> LocalFileNode:
        self.nodes[node.id] = node
        return node


class RecordingFetcher:
    """Fetch primitive that records calls and fails for selected URLs."""

    def __init__(self, store, failing: set[str] | None = None):
        self.store = store
        self.failing = failing or set()
        self.calls: list[tuple[str, dict[str, str]]] = []

    async def fetch(self, url: str, headers: dict[str, str]) -> LocalFileNode:
        self.calls.append((url, headers))
        if url in self.failing:
            raise FileFetchError(f"Download failed for {url}: 404")
        node = LocalFileNode(id=node_id_for_url(url), url=url, path=f"/tmp/media/{node_id_for_url(url)}", size=1)
        return await self.store.save_node(node)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


class DictFileSource:
    """Metadata source answering from a url -> file dict."""

    def __init__(self, files: dict[str, dict] | None = None):
        self.files = files or {}
        self.queries: list[str] = []

    async def find_file(self, url: str) -> RemoteFileDescriptor | None:
        self.queries.append(url)
        raw = self.files.get(url)
        return RemoteFileDescriptor.model_validate(raw) if raw else None
