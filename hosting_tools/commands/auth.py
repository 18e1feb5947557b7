"""Authorized-domain commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import click
from rich.console import Console

from hosting_tools.commands.common import echo_json, run_async, wants_json
from hosting_tools.core.config import AppConfig
from hosting_tools.core.identity import IdentityToolkitClient
from hosting_tools.hosting.api import HostingClient
from hosting_tools.hosting.auth_domains import AuthDomainReconciler

PROJECT_OPTION = click.option("--project", "-p", required=True, help="Project ID")


async def _with_reconciler(
    config: AppConfig, action: Callable[[AuthDomainReconciler], Awaitable[list[str]]]
) -> list[str]:
    hosting = HostingClient(config.hosting, poller_config=config.poller)
    identity = IdentityToolkitClient(config.identity, access_token=config.hosting.access_token)
    try:
        return await action(AuthDomainReconciler(hosting, identity))
    finally:
        await hosting.aclose()
        await identity.aclose()


def _print_domains(ctx: click.Context, domains: list[str]) -> None:
    console: Console = ctx.obj["console"]
    if wants_json(ctx):
        echo_json(domains)
        return
    console.print(f"[bold]Authorized domains ({len(domains)}):[/bold]")
    for domain in domains:
        console.print(f"  {domain}")


@click.group(name="auth")
@click.pass_context
def auth_group(ctx: click.Context) -> None:
    """Manage authorized domains for preview channels."""
    pass


@auth_group.command(name="add")
@click.argument("url")
@PROJECT_OPTION
@click.pass_context
def add_domain(ctx: click.Context, url: str, project: str) -> None:
    """Authorize the domain of a channel URL."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    domains = run_async(
        console,
        _with_reconciler(config, lambda r: r.add_auth_domain(project, url)),
        "add authorized domain",
    )
    _print_domains(ctx, domains)


@auth_group.command(name="remove")
@click.argument("url")
@PROJECT_OPTION
@click.pass_context
def remove_domain(ctx: click.Context, url: str, project: str) -> None:
    """Remove the domain of a channel URL from the authorized domains."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    domains = run_async(
        console,
        _with_reconciler(config, lambda r: r.remove_auth_domain(project, url)),
        "remove authorized domain",
    )
    _print_domains(ctx, domains)


@auth_group.command(name="clean")
@click.argument("site")
@PROJECT_OPTION
@click.option("--dry-run", is_flag=True, help="Show the cleaned list without saving it")
@click.pass_context
def clean_domains(ctx: click.Context, site: str, project: str, dry_run: bool) -> None:
    """Remove authorized domains of SITE's expired preview channels."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    if dry_run:
        domains = run_async(
            console,
            _with_reconciler(config, lambda r: r.get_clean_domains(project, site)),
            "compute authorized domains",
        )
    else:
        domains = run_async(
            console,
            _with_reconciler(config, lambda r: r.clean_auth_state(project, site)),
            "clean authorized domains",
        )
    _print_domains(ctx, domains)
