"""Shared infrastructure for jiranav CLI commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from typer.core import TyperGroup

from jiranav.config import get_config_path, load_config

from ._json_state import echo_error

if TYPE_CHECKING:
    import click

    from jiranav.models import JiraConfig


class SortedGroup(TyperGroup):
    """Typer group that lists commands in alphabetical order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return commands sorted alphabetically."""
        return sorted(super().list_commands(ctx))


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich.

    Warnings and errors only by default; everything with *verbose*.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)


def require_config() -> JiraConfig:
    """Load the config or exit when setup has not been completed.

    Raises:
        typer.Exit: With status 1 when the config is missing or incomplete.
    """
    config = load_config()
    if config is None or not config.is_complete():
        echo_error(
            "Configuration was not found or is outdated.",
            f"Run `jnav setup` first (looked in {get_config_path()}).",
        )
        raise typer.Exit(1)
    return config
