# ABOUTME: Tests for the media resolver's cache reuse, change detection, and failure containment
# ABOUTME: Runs against the in-memory SQLite cache/node store with a recording fetcher

import asyncio

import pytest

from strapi_media.core.models import CacheEntry, RemoteFileDescriptor
from strapi_media.core.resolver import MediaResolver
from strapi_media.services.files import node_id_for_url

from tests.fakes import API_URL, RecordingFetcher


def _descriptor(file_id=1, url="/uploads/pic.png", updated_at="2024-01-01T00:00:00.000Z"):
    return RemoteFileDescriptor.model_validate({"id": file_id, "url": url, "updatedAt": updated_at})


def _resolver(db, fetcher, headers=None):
    return MediaResolver(cache=db, nodes=db, fetcher=fetcher, api_url=API_URL, remote_file_headers=headers)


@pytest.mark.asyncio
async def test_first_resolve_downloads_and_caches(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)

    node_id = await resolver.resolve_file(_descriptor())

    assert node_id == node_id_for_url("https://cms.example/uploads/pic.png")
    assert fetcher.urls == ["https://cms.example/uploads/pic.png"]
    entry = await temp_db.get("strapi-media-1")
    assert entry == CacheEntry(file_node_id=node_id, updated_at="2024-01-01T00:00:00.000Z")


@pytest.mark.asyncio
async def test_unchanged_file_is_not_fetched_twice(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)

    first = await resolver.resolve_file(_descriptor())
    second = await resolver.resolve_file(_descriptor())

    assert first == second
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_cache_survives_resolver_instances(temp_db):
    await _resolver(temp_db, RecordingFetcher(temp_db)).resolve_file(_descriptor())

    fetcher = RecordingFetcher(temp_db)
    node_id = await _resolver(temp_db, fetcher).resolve_file(_descriptor())

    assert node_id is not None
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_cache_hit_touches_node(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)
    node_id = await resolver.resolve_file(_descriptor())
    before = (await temp_db.get_node(node_id)).touched_at

    await asyncio.sleep(0.01)
    await resolver.resolve_file(_descriptor())

    after = (await temp_db.get_node(node_id)).touched_at
    assert after > before


@pytest.mark.asyncio
async def test_changed_updated_at_refetches_and_overwrites(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)
    await resolver.resolve_file(_descriptor(updated_at="2024-01-01T00:00:00.000Z"))

    await resolver.resolve_file(_descriptor(updated_at="2024-02-01T00:00:00.000Z"))

    assert len(fetcher.calls) == 2
    entry = await temp_db.get("strapi-media-1")
    assert entry.updated_at == "2024-02-01T00:00:00.000Z"


@pytest.mark.asyncio
async def test_missing_node_forces_download(temp_db):
    await temp_db.set("strapi-media-1", CacheEntry(file_node_id="gone", updated_at="2024-01-01T00:00:00.000Z"))
    fetcher = RecordingFetcher(temp_db)

    node_id = await _resolver(temp_db, fetcher).resolve_file(_descriptor())

    assert node_id != "gone"
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_failed_download_returns_none_without_caching(temp_db):
    fetcher = RecordingFetcher(temp_db, failing={"https://cms.example/uploads/pic.png"})

    node_id = await _resolver(temp_db, fetcher).resolve_file(_descriptor())

    assert node_id is None
    assert await temp_db.get("strapi-media-1") is None


@pytest.mark.asyncio
async def test_absolute_url_and_headers(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher, headers={"X-Token": "secret"})

    await resolver.resolve_file(_descriptor(url="https://bucket.example/pic.png"))

    assert fetcher.calls == [("https://bucket.example/pic.png", {"X-Token": "secret"})]


@pytest.mark.asyncio
async def test_concurrent_resolves_share_one_download(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)

    results = await asyncio.gather(*(resolver.resolve_file(_descriptor()) for _ in range(5)))

    assert len(set(results)) == 1
    assert len(fetcher.calls) == 1


def test_source_url():
    resolver = MediaResolver(cache=None, nodes=None, fetcher=None, api_url="https://cms.example/")

    assert resolver.source_url(_descriptor(url="/uploads/a.png")) == "https://cms.example/uploads/a.png"
    assert resolver.source_url(_descriptor(url="http://cdn.example/a.png")) == "http://cdn.example/a.png"


@pytest.mark.asyncio
async def test_concurrent_resolves_of_different_versions_each_download(temp_db):
    fetcher = RecordingFetcher(temp_db)
    resolver = _resolver(temp_db, fetcher)
    old = _descriptor(updated_at="2024-01-01T00:00:00.000Z")
    new = _descriptor(updated_at="2024-02-01T00:00:00.000Z")

    await asyncio.gather(resolver.resolve_file(old), resolver.resolve_file(new), resolver.resolve_file(new))

    assert len(fetcher.calls) == 2
    entry = await temp_db.get("strapi-media-1")
    assert entry.updated_at in {old.updated_at, new.updated_at}
