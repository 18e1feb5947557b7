"""Upload hash cache commands."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from hosting_tools.commands.common import echo_json, wants_json
from hosting_tools.core.config import AppConfig
from hosting_tools.hosting import hash_cache
from hosting_tools.hosting.hash_cache import LoadStatus


@click.group(name="cache")
@click.pass_context
def cache_group(ctx: click.Context) -> None:
    """Inspect upload hash caches."""
    pass


@cache_group.command(name="show")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("name")
@click.option("--limit", "-l", type=int, default=50, help="Number of entries to show")
@click.pass_context
def show_cache(ctx: click.Context, root: Path, name: str, limit: int) -> None:
    """Show the hash cache NAME of project ROOT."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    result = hash_cache.load(root, name, config.hash_cache.dir_name)

    if wants_json(ctx):
        echo_json({
            "path": str(hash_cache.cache_path(root, name, config.hash_cache.dir_name)),
            "status": result.status.value,
            "error": result.error,
            "entries": {
                path: {"mtime": entry.mtime, "hash": entry.hash}
                for path, entry in result.entries.items()
            },
        })
        return

    if result.status == LoadStatus.MISSING:
        console.print(f"No hash cache '{name}' under {root}")
        return
    if result.status == LoadStatus.ERROR:
        console.print(f"[red]Error:[/red] Could not read hash cache: {result.error}")
        ctx.exit(1)

    table = Table(title=f"Hash cache '{name}' ({len(result.entries)} files)")
    table.add_column("Path", style="cyan")
    table.add_column("Modified", style="yellow")
    table.add_column("Hash", style="green")

    for path, entry in list(result.entries.items())[:limit]:
        modified = datetime.fromtimestamp(entry.mtime / 1000, tz=UTC)
        table.add_row(path, modified.isoformat(), entry.hash[:16] + "...")

    console.print(table)
    if len(result.entries) > limit:
        console.print(f"\nShowing {limit} of {len(result.entries)} entries")
