"""Main entry point for hosting-tools CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
import structlog
from rich.console import Console

from hosting_tools import __version__
from hosting_tools.commands.auth import auth_group
from hosting_tools.commands.cache import cache_group
from hosting_tools.commands.channel import channel_group
from hosting_tools.commands.config import config_group
from hosting_tools.commands.version import release_group, version_group
from hosting_tools.core.config import AppConfig


def configure_logging(colors: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger()


@click.group()
@click.version_option(version=__version__, prog_name="hosting-tools")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["rich", "json", "plain"], case_sensitive=False),
    default="rich",
    help="Output format",
)
@click.option(
    "--token",
    envvar="HOSTING_TOKEN",
    help="OAuth2 access token for the hosting and identity APIs",
)
@click.pass_context
def main(
    ctx: click.Context,
    config: Path | None,
    verbose: bool,
    debug: bool,
    output: str,
    token: str | None,
) -> None:
    """Deploy lifecycle tools for static hosting sites."""
    ctx.ensure_object(dict)

    # Load configuration
    try:
        app_config = AppConfig.load(config)
    except Exception as e:
        logger.error("Failed to load configuration", error=str(e))
        sys.exit(1)

    # Override config with CLI options
    if verbose or debug:
        app_config.log_level = "DEBUG" if debug else "INFO"
    if output:
        app_config.output_format = output.lower()
    if token:
        app_config.hosting.access_token = token

    if debug:
        configure_logging(colors=True)

    # Create console for rich output
    console = Console(
        force_terminal=output == "rich",
        no_color=output != "rich",
        width=None if output == "rich" else 120,
    )

    # Store config and console in context for subcommands
    ctx.obj["config"] = app_config
    ctx.obj["console"] = console
    ctx.obj["verbose"] = verbose or debug
    ctx.obj["debug"] = debug

    logger.debug(
        "CLI initialized",
        config=app_config.model_dump(exclude={"hosting": {"access_token"}}),
    )


# Register commands
main.add_command(auth_group)
main.add_command(cache_group)
main.add_command(channel_group)
main.add_command(config_group)
main.add_command(release_group)
main.add_command(version_group)


def handle_exception(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: Any) -> None:
    """Handle uncaught exceptions."""
    if issubclass(exc_type, KeyboardInterrupt):
        logger.info("Operation cancelled by user")
        sys.exit(1)

    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback),
    )
    sys.exit(1)


if __name__ == "__main__":
    # Install exception handler
    sys.excepthook = handle_exception

    try:
        main()
    except Exception as e:
        logger.error("CLI execution failed", error=str(e))
        sys.exit(1)
