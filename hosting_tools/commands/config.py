"""Hosting configuration commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from hosting_tools.commands.common import echo_json, wants_json
from hosting_tools.core.config import AppConfig
from hosting_tools.core.errors import HostingConfigError
from hosting_tools.hosting.convert_config import convert_config


def select_hosting_config(data: Any, target: str | None) -> dict[str, Any]:
    """Pick the hosting block out of a project config file.

    The ``hosting`` key holds either a single block or a list of blocks,
    each identified by ``target`` or ``site``.
    """
    if not isinstance(data, dict):
        raise click.ClickException("Config file must contain a JSON object")

    hosting = data.get("hosting", data)
    if isinstance(hosting, dict):
        return hosting
    if not isinstance(hosting, list) or not hosting:
        raise click.ClickException('"hosting" must be an object or a non-empty list')

    if target is None:
        if len(hosting) == 1:
            return hosting[0]
        raise click.ClickException(
            "Config has multiple hosting targets, choose one with --target"
        )

    for block in hosting:
        if isinstance(block, dict) and target in (block.get("target"), block.get("site")):
            return block
    raise click.ClickException(f"No hosting config for target '{target}'")


@click.group(name="config")
@click.pass_context
def config_group(ctx: click.Context) -> None:
    """Compile hosting configs and show tool settings."""
    pass


@config_group.command(name="compile")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--target", "-t", help="Hosting target or site to compile")
@click.pass_context
def compile_config(ctx: click.Context, file: Path, target: str | None) -> None:
    """Compile the hosting section of FILE into a serving config."""
    console: Console = ctx.obj["console"]

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {file}: {e}") from e

    hosting = select_hosting_config(data, target)
    try:
        serving = convert_config(hosting)
    except HostingConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.ClickException(f"Failed to compile config: {e}") from e

    if wants_json(ctx) or ctx.obj["config"].output_format == "plain":
        echo_json(serving.to_api())
    else:
        console.print_json(data=serving.to_api())


@config_group.command(name="show")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective tool settings."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    settings = config.model_dump(mode="json", exclude={"hosting": {"access_token"}})
    if wants_json(ctx):
        echo_json(settings)
        return

    table = Table(title="hosting-tools settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for section, values in settings.items():
        if isinstance(values, dict):
            for key, value in values.items():
                table.add_row(f"{section}.{key}", str(value))
        else:
            table.add_row(section, str(values))
    table.add_row("hosting.access_token", "set" if config.hosting.access_token else "not set")
    console.print(table)
