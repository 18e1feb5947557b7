"""Helpers shared by CLI commands."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Any, TypeVar

import click
import httpx
import structlog
from rich.console import Console

from hosting_tools.core.errors import HostingError

logger = structlog.get_logger()

T = TypeVar("T")


def run_async(console: Console, coro: Coroutine[Any, Any, T], action: str) -> T:
    """Run a coroutine, reporting hosting and transport errors to the user."""
    try:
        return asyncio.run(coro)
    except (HostingError, httpx.HTTPError) as e:
        logger.debug("command_failed", action=action, error=str(e))
        console.print(f"[red]Error:[/red] {e}")
        raise click.ClickException(f"Failed to {action}: {e}") from e


def wants_json(ctx: click.Context) -> bool:
    return ctx.obj["config"].output_format == "json"


def echo_json(data: Any) -> None:
    # Plain print keeps JSON free of Rich markup
    click.echo(json.dumps(data, indent=2, default=str))
