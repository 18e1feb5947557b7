"""Preview channel commands."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from hosting_tools.commands.common import echo_json, run_async, wants_json
from hosting_tools.core.config import AppConfig
from hosting_tools.core.errors import HostingError
from hosting_tools.core.types import Channel
from hosting_tools.hosting.api import HostingClient, normalize_name
from hosting_tools.hosting.expire import calculate_channel_expire_ttl

PROJECT_OPTION = click.option(
    "--project", "-p", default="-", show_default=True, help="Project ID or number"
)
EXPIRES_OPTION = click.option(
    "--expires", "-e", default="7d", show_default=True,
    help="Time until the channel expires (e.g. 12h, 7d, at most 30d)",
)


def _channel_row(channel: Channel) -> list[str]:
    version = ""
    if channel.release and channel.release.version:
        version = channel.release.version.version_id
    expires = channel.expire_time.isoformat() if channel.expire_time else "never"
    return [channel.channel_id, channel.url, expires, version]


def _print_channels(ctx: click.Context, channels: list[Channel], title: str) -> None:
    console: Console = ctx.obj["console"]
    if wants_json(ctx):
        echo_json([c.model_dump(mode="json", by_alias=True) for c in channels])
        return

    table = Table(title=title)
    table.add_column("Channel", style="cyan")
    table.add_column("URL", style="green")
    table.add_column("Expires", style="yellow")
    table.add_column("Version", style="blue")
    for channel in channels:
        table.add_row(*_channel_row(channel))
    console.print(table)


@click.group(name="channel")
@click.pass_context
def channel_group(ctx: click.Context) -> None:
    """Manage preview channels."""
    pass


@channel_group.command(name="list")
@click.argument("site")
@PROJECT_OPTION
@click.pass_context
def list_channels(ctx: click.Context, site: str, project: str) -> None:
    """List the channels of a site."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> list[Channel]:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.list_channels(project, site)
        finally:
            await client.aclose()

    channels = run_async(console, _run(), "list channels")
    if not channels and not wants_json(ctx):
        console.print(f"No channels found for site '{site}'")
        return
    _print_channels(ctx, channels, f"Channels for {site}")


@channel_group.command(name="get")
@click.argument("site")
@click.argument("channel_id")
@PROJECT_OPTION
@click.pass_context
def get_channel(ctx: click.Context, site: str, channel_id: str, project: str) -> None:
    """Show a single channel."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    async def _run() -> Channel | None:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.get_channel(project, site, normalize_name(channel_id))
        finally:
            await client.aclose()

    channel = run_async(console, _run(), "get channel")
    if channel is None:
        console.print(f"[yellow]Channel not found:[/yellow] {channel_id}")
        ctx.exit(1)
    _print_channels(ctx, [channel], f"Channel {channel.channel_id}")


@channel_group.command(name="create")
@click.argument("site")
@click.argument("channel_id")
@PROJECT_OPTION
@EXPIRES_OPTION
@click.pass_context
def create_channel(
    ctx: click.Context, site: str, channel_id: str, project: str, expires: str
) -> None:
    """Create a preview channel."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    try:
        ttl = calculate_channel_expire_ttl(expires)
    except HostingError as e:
        raise click.BadParameter(str(e), param_hint="--expires") from e

    async def _run() -> Channel:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.create_channel(project, site, normalize_name(channel_id), ttl)
        finally:
            await client.aclose()

    channel = run_async(console, _run(), "create channel")
    if wants_json(ctx):
        echo_json(channel.model_dump(mode="json", by_alias=True))
        return
    console.print(f"[green]✓[/green] Created channel {channel.channel_id}: {channel.url}")


@channel_group.command(name="extend")
@click.argument("site")
@click.argument("channel_id")
@PROJECT_OPTION
@EXPIRES_OPTION
@click.pass_context
def extend_channel(
    ctx: click.Context, site: str, channel_id: str, project: str, expires: str
) -> None:
    """Reset a channel's expiration time."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    try:
        ttl = calculate_channel_expire_ttl(expires)
    except HostingError as e:
        raise click.BadParameter(str(e), param_hint="--expires") from e

    async def _run() -> Channel:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            return await client.update_channel_ttl(project, site, normalize_name(channel_id), ttl)
        finally:
            await client.aclose()

    channel = run_async(console, _run(), "extend channel")
    expires_at = channel.expire_time.isoformat() if channel.expire_time else "never"
    console.print(f"[green]✓[/green] Channel {channel.channel_id} now expires {expires_at}")


@channel_group.command(name="delete")
@click.argument("site")
@click.argument("channel_id")
@PROJECT_OPTION
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_channel(
    ctx: click.Context, site: str, channel_id: str, project: str, force: bool
) -> None:
    """Delete a channel and its release history."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    channel_id = normalize_name(channel_id)

    if not force:
        click.confirm(f"Delete channel {channel_id} of site {site}?", abort=True)

    async def _run() -> None:
        client = HostingClient(config.hosting, poller_config=config.poller)
        try:
            await client.delete_channel(project, site, channel_id)
        finally:
            await client.aclose()

    run_async(console, _run(), "delete channel")
    console.print(f"[green]✓[/green] Deleted channel {channel_id}")
