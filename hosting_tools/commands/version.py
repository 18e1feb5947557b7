"""Version and release commands."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from hosting_tools.commands.common import echo_json, run_async, wants_json
from hosting_tools.core.config import AppConfig
from hosting_tools.core.types import Release, Version
from hosting_tools.core.utils import format_size
from hosting_tools.hosting.api import HostingClient, normalize_name


def _print_version(console: Console, version: Version) -> None:
    table = Table(title=f"Version {version.version_id}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", version.name)
    table.add_row("Status", version.status.value)
    table.add_row("Files", str(version.file_count))
    table.add_row("Size", format_size(version.version_bytes))
    if version.create_time:
        table.add_row("Created", version.create_time.isoformat())
    if version.finalize_time:
        table.add_row("Finalized", version.finalize_time.isoformat())
    for key, value in version.labels.items():
        table.add_row(f"Label {key}", value)

    console.print(table)


@click.group(name="version")
@click.pass_context
def version_group(ctx: click.Context) -> None:
    """Manage site versions."""
    pass


@version_group.command(name="clone")
@click.argument("site")
@click.argument("source_version")
@click.option("--finalize", is_flag=True, help="Finalize the cloned version")
@click.pass_context
def clone_version(
    ctx: click.Context, site: str, source_version: str, finalize: bool
) -> None:
    """Copy SOURCE_VERSION into a new version of SITE.

    SOURCE_VERSION is a full resource name such as
    sites/my-site/versions/abc123.
    """
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> Version:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.clone_version(site, source_version, finalize=finalize)
        finally:
            await client.aclose()

    with console.status("Cloning version..."):
        version = run_async(console, _run(), "clone version")

    if wants_json(ctx):
        echo_json(version.model_dump(mode="json", by_alias=True))
        return
    console.print(f"[green]✓[/green] Cloned {source_version} into {version.name}")
    _print_version(console, version)


@version_group.command(name="finalize")
@click.argument("version_name")
@click.pass_context
def finalize_version(ctx: click.Context, version_name: str) -> None:
    """Finalize VERSION_NAME so it can be released."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> Version:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.finalize_version(version_name)
        finally:
            await client.aclose()

    version = run_async(console, _run(), "finalize version")
    if wants_json(ctx):
        echo_json(version.model_dump(mode="json", by_alias=True))
        return
    console.print(f"[green]✓[/green] Finalized {version.name}")


@click.group(name="release")
@click.pass_context
def release_group(ctx: click.Context) -> None:
    """Manage channel releases."""
    pass


@release_group.command(name="create")
@click.argument("site")
@click.argument("channel_id")
@click.argument("version_name")
@click.pass_context
def create_release(
    ctx: click.Context, site: str, channel_id: str, version_name: str
) -> None:
    """Release VERSION_NAME on a channel of SITE."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> Release:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.create_release(site, normalize_name(channel_id), version_name)
        finally:
            await client.aclose()

    release = run_async(console, _run(), "create release")
    if wants_json(ctx):
        echo_json(release.model_dump(mode="json", by_alias=True))
        return
    console.print(f"[green]✓[/green] Released {version_name} as {release.name}")


@release_group.command(name="list")
@click.argument("site")
@click.argument("channel_id")
@click.option("--limit", "-l", type=int, default=20, help="Number of releases to show")
@click.pass_context
def list_releases(ctx: click.Context, site: str, channel_id: str, limit: int) -> None:
    """List the release history of a channel."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> list[Release]:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.list_releases(site, normalize_name(channel_id))
        finally:
            await client.aclose()

    releases = run_async(console, _run(), "list releases")
    if wants_json(ctx):
        echo_json([r.model_dump(mode="json", by_alias=True) for r in releases[:limit]])
        return

    if not releases:
        console.print(f"No releases found for channel '{channel_id}'")
        return

    table = Table(title=f"Releases for {site}/{channel_id}")
    table.add_column("Release", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Version", style="green")
    table.add_column("Time", style="blue")

    for release in releases[:limit]:
        table.add_row(
            release.name.rsplit("/", 1)[-1],
            release.type.value,
            release.version.version_id if release.version else "",
            release.release_time.isoformat() if release.release_time else "",
        )

    console.print(table)
    if len(releases) > limit:
        console.print(f"\nShowing {limit} of {len(releases)} releases")
