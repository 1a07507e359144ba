# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands for syncing entity media, clearing the media cache, and logging status

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from strapi_media.config import get_config
from strapi_media.core.walker import collect_local_files
from strapi_media.persistence import DatabaseManager
from strapi_media.schema.registry import SchemaRegistry
from strapi_media.utils.logging import (
    LoggingMode,
    configure_logging,
    get_logging_status,
    with_pipeline_context,
)
from strapi_media.utils.rich_tables import (
    create_logging_status_table,
    create_pruned_files_table,
    create_sync_summary_table,
    print_rich_table,
)

console = Console()


def load_schema_registry(path: Path) -> SchemaRegistry:
    """Load schemas from a JSON file.

    The file holds either a list of schemas or an object with ``contentTypes``
    and ``components`` lists (``data`` wrappers from the Strapi API are unwrapped).
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return SchemaRegistry.from_strapi(payload)

    groups = []
    for key in ("contentTypes", "components"):
        group = payload.get(key) or []
        if isinstance(group, dict):
            group = group.get("data") or []
        groups.append(group)
    return SchemaRegistry.from_strapi(*groups)


def load_entities(path: Path) -> list[dict[str, Any]]:
    """Load a list of entities, accepting a bare list or a ``{"data": [...]}`` response."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        raise click.BadParameter("expected a JSON list of entities", param_hint="ENTITIES")
    return payload


@click.command()
@click.argument("entities_path", metavar="ENTITIES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("schemas_path", metavar="SCHEMAS", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--type", "content_type", required=True, help="Content type uid of the entities, e.g. api::article.article")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write transformed entities here")
@click.option("--prune", is_flag=True, help="Delete local files no entity referenced during this run")
@click.pass_context
async def sync(ctx, entities_path: Path, schemas_path: Path, content_type: str, output: Path | None, prune: bool):
    """
    🖼️ Download every media file referenced by the given entities.

    Media fields, rich-text images, components, dynamic zones and relations are
    walked according to SCHEMAS. Unchanged files are reused from the cache.
    """
    await _sync_async(entities_path, schemas_path, content_type, output, prune, ctx.obj["json_output"])


async def _sync_async(
    entities_path: Path,
    schemas_path: Path,
    content_type: str,
    output: Path | None,
    prune: bool,
    json_output: bool,
):
    """Run a media sync with optional rich display."""
    with with_pipeline_context("media_sync", content_type=content_type) as logger:
        registry = load_schema_registry(schemas_path)
        entities = load_entities(entities_path)
        logger.info("Starting media sync", entities=len(entities), schemas=len(registry))

        if not json_output:
            console.print(
                Panel.fit(
                    f"🖼️ [bold cyan]Strapi Media Sync[/bold cyan]\n{len(entities)} × {content_type}",
                    border_style="magenta",
                )
            )

        from strapi_media.core.service import MediaSyncService

        service = MediaSyncService(registry)
        run_started_at = datetime.now(UTC)
        try:
            if json_output:
                results = await service.sync(entities, content_type)
            else:
                with console.status("Resolving media files..."):
                    results = await service.sync(entities, content_type)

            pruned = await service.prune(run_started_at) if prune else None
        finally:
            await service.close()

        local_files = collect_local_files(results)
        rendered = json.dumps(results, indent=2, ensure_ascii=False)
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(rendered, encoding="utf-8")

        logger.info(
            "Media sync complete",
            entities=len(results),
            local_files=len(local_files),
            pruned=len(pruned) if pruned is not None else None,
        )

        if json_output:
            if not output:
                click.echo(rendered)
            return

        summary = {
            "content_type": content_type,
            "entities": len(results),
            "local_files": len(local_files),
            "unique_files": len(set(local_files)),
            "pruned": len(pruned) if pruned is not None else None,
            "output": str(output) if output else None,
        }
        print_rich_table(console, create_sync_summary_table(summary))
        if pruned:
            print_rich_table(console, create_pruned_files_table(pruned))


@click.command(name="cache-clear")
async def cache_clear():
    """
    🧹 Forget every cached download so the next sync fetches files again.
    """
    db = DatabaseManager(get_config().database_url)
    try:
        await db.create_tables()
        removed = await db.clear_cache()
    finally:
        await db.close()
    console.print(f"[green]Removed {removed} cache entries.[/green]")


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    try:
        config = get_config()
        configured_production = config.log_mode == LoggingMode.PRODUCTION
        mode = LoggingMode.PRODUCTION if json_output or configured_production else LoggingMode.INTERACTIVE

        # Use config defaults when CLI parameters are not provided
        final_log_level = log_level or config.log_level
        final_log_file = log_file or (str(config.log_file) if config.log_file else None)

        configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)
    except OSError:
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE
        configure_logging(mode=mode, log_level=log_level or "INFO", log_file=log_file)


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    logging_table = create_logging_status_table(status)
    print_rich_table(console, logging_table)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    🖼️ Strapi Media Sync - local copies of every file your content references

    Walks Strapi entities against their content-type schemas and downloads each
    referenced media file once, attaching local file ids to the entities.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    _initialize_logging(json, log_level, log_file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(sync)
app.add_command(cache_clear)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
