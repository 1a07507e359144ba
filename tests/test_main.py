# ABOUTME: Tests for the asyncclick command line interface
# ABOUTME: Covers help output, logging status, input loading, and sync runs against stubbed and mocked services

import functools
import json
import logging

import httpx
import pytest
import structlog
from asyncclick.testing import CliRunner
from loguru import logger as loguru_logger

from strapi_media.main import app, load_entities, load_schema_registry
from strapi_media.utils.logging.config import InterceptHandler


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    # Commands configure global logging
    root = logging.getLogger()
    root.handlers = [handler for handler in root.handlers if not isinstance(handler, InterceptHandler)]
    root.setLevel(logging.NOTSET)
    structlog.reset_defaults()
    loguru_logger.remove()


class StubService:
    """Stands in for MediaSyncService without touching the network."""

    instances = []

    def __init__(self, schemas, *args, **kwargs):
        self.schemas = schemas
        self.closed = False
        self.pruned_before = None
        StubService.instances.append(self)

    async def sync(self, entities, content_type_uid):
        return [{**entity, "cover": {**entity["cover"], "localFile": "node-1"}} for entity in entities]

    async def prune(self, run_started_at):
        self.pruned_before = run_started_at
        return []

    async def close(self):
        self.closed = True


@pytest.fixture
def inputs(workdir):
    entities = workdir / "entities.json"
    entities.write_text(json.dumps({"data": [{"id": 1, "cover": {"id": 3, "url": "/uploads/c.png"}}]}))
    schemas = workdir / "schemas.json"
    schemas.write_text(
        json.dumps(
            {
                "contentTypes": {"data": [{"uid": "api::article.article", "attributes": {"cover": {"type": "media"}}}]},
                "components": [],
            }
        )
    )
    return entities, schemas


@pytest.mark.asyncio
async def test_main_command_help():
    runner = CliRunner()
    result = await runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "Strapi Media Sync" in result.output


@pytest.mark.asyncio
async def test_main_with_logging_status():
    runner = CliRunner()
    result = await runner.invoke(app, ["logging-status"])

    assert result.exit_code == 0
    assert "Logging Configuration" in result.output


def test_load_inputs(inputs):
    entities, schemas = inputs

    assert load_entities(entities) == [{"id": 1, "cover": {"id": 3, "url": "/uploads/c.png"}}]
    assert "api::article.article" in load_schema_registry(schemas)


def test_load_schema_list(workdir):
    path = workdir / "list.json"
    path.write_text(json.dumps([{"uid": "shared.seo", "attributes": {}}]))

    assert len(load_schema_registry(path)) == 1


@pytest.mark.asyncio
async def test_sync_writes_output(inputs, workdir, monkeypatch):
    monkeypatch.setattr("strapi_media.core.service.MediaSyncService", StubService)
    entities, schemas = inputs
    output = workdir / "out" / "result.json"

    runner = CliRunner()
    result = await runner.invoke(
        app,
        ["--json", "sync", str(entities), str(schemas), "--type", "api::article.article", "-o", str(output), "--prune"],
    )

    assert result.exit_code == 0, result.output
    written = json.loads(output.read_text())
    assert written[0]["cover"]["localFile"] == "node-1"
    service = StubService.instances[-1]
    assert service.closed
    assert service.pruned_before is not None


@pytest.mark.asyncio
async def test_sync_json_echoes_result(inputs, monkeypatch):
    monkeypatch.setattr("strapi_media.core.service.MediaSyncService", StubService)
    entities, schemas = inputs

    runner = CliRunner()
    result = await runner.invoke(app, ["--json", "sync", str(entities), str(schemas), "--type", "api::article.article"])

    assert result.exit_code == 0, result.output
    assert '"localFile": "node-1"' in result.output


@pytest.mark.asyncio
async def test_sync_shows_summary(inputs, monkeypatch):
    monkeypatch.setattr("strapi_media.core.service.MediaSyncService", StubService)
    entities, schemas = inputs

    runner = CliRunner()
    result = await runner.invoke(app, ["sync", str(entities), str(schemas), "--type", "api::article.article"])

    assert result.exit_code == 0, result.output
    assert "Media Sync Complete" in result.output


@pytest.fixture
def default_config(monkeypatch):
    """Fresh config from defaults only, so the database and media land under the working directory."""
    monkeypatch.setattr("strapi_media.config._config_instance", None)
    for name in ("DATABASE_URL", "DOWNLOAD_DIR", "API_URL", "API_TOKEN", "LOG_MODE"):
        monkeypatch.delenv(f"STRAPI_MEDIA_{name}", raising=False)
    yield
    monkeypatch.setattr("strapi_media.config._config_instance", None)


def _serve_uploads(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/uploads/c.png":
        return httpx.Response(200, content=b"\x89PNG cover", headers={"Content-Type": "image/png"})
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_sync_with_default_config(inputs, workdir, default_config, monkeypatch):
    monkeypatch.setattr(
        httpx, "AsyncClient", functools.partial(httpx.AsyncClient, transport=httpx.MockTransport(_serve_uploads))
    )
    entities, schemas = inputs
    output = workdir / "result.json"

    runner = CliRunner()
    result = await runner.invoke(
        app, ["--json", "sync", str(entities), str(schemas), "--type", "api::article.article", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    written = json.loads(output.read_text())
    assert written[0]["cover"]["localFile"]
    assert (workdir / "data" / "strapi_media.db").exists()
    assert [path.read_bytes() for path in (workdir / "data" / "media").iterdir()] == [b"\x89PNG cover"]


@pytest.mark.asyncio
async def test_cache_clear_with_default_config(workdir, default_config):
    runner = CliRunner()
    result = await runner.invoke(app, ["--json", "cache-clear"])

    assert result.exit_code == 0, result.output
    assert "Removed 0 cache entries" in result.output
    assert (workdir / "data" / "strapi_media.db").exists()


@pytest.mark.asyncio
async def test_configured_production_mode_skips_log_files(workdir, default_config, monkeypatch):
    monkeypatch.setenv("STRAPI_MEDIA_LOG_MODE", "production")

    runner = CliRunner()
    result = await runner.invoke(app, ["cache-clear"])

    assert result.exit_code == 0, result.output
    assert not (workdir / "logs").exists()
