# ABOUTME: Rich tables for the CLI: sync summary, pruned file list, and logging status
# ABOUTME: All tables share one rounded key/value look

from collections.abc import Iterable, Mapping
from typing import Any

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table

from strapi_media.persistence.models import LocalFileNode


def create_key_value_table(title: str, data: Mapping[str, Any], title_style: str = "bold green") -> Table:
    """Two-column Field/Value table; values are rendered with ``str``."""
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=ROUNDED,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
    )
    table.add_column("Field", style="bold blue")
    table.add_column("Value", style="green")

    for key, value in data.items():
        table.add_row(key, str(value))
    return table


def create_sync_summary_table(summary: Mapping[str, Any]) -> Table:
    """Table shown after a media sync.

    Args:
        summary: Keys ``content_type``, ``entities``, ``local_files``, ``unique_files``, ``pruned``, ``output``
    """
    rows: dict[str, Any] = {
        "🧩 Content Type": summary["content_type"],
        "📄 Entities": f"{summary['entities']:,}",
        "🖼️ Attached Files": f"{summary['local_files']:,}",
        "💾 Unique Files": f"{summary['unique_files']:,}",
    }
    if summary.get("pruned") is not None:
        rows["🧹 Pruned Nodes"] = f"{summary['pruned']:,}"
    if summary.get("output"):
        rows["📁 Output"] = summary["output"]

    return create_key_value_table("✅ Media Sync Complete", rows)


def create_pruned_files_table(nodes: Iterable[LocalFileNode]) -> Table:
    table = Table(title="[bold yellow]🧹 Pruned Files[/bold yellow]", box=ROUNDED, title_justify="left")
    table.add_column("Source URL", style="cyan", overflow="fold")
    table.add_column("Size", justify="right")
    for node in nodes:
        table.add_row(node.url, f"{node.size:,} B")
    return table


def create_logging_status_table(status: Mapping[str, Any]) -> Table:
    labels = {"main": "📝 Main Log", "json": "📊 JSON Log", "errors": "🚨 Error Log"}
    rows: dict[str, Any] = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }
    rows.update({labels[key]: path for key, path in status["log_files"].items() if path})

    return create_key_value_table("🔍 Logging Configuration", rows)


def print_rich_table(console: Console, table: Table) -> None:
    """Print a table with a blank line before and after."""
    console.print()
    console.print(table)
    console.print()
