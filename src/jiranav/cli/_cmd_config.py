"""Configuration management commands for jiranav CLI."""

from __future__ import annotations

from typing import Any

import typer

from jiranav.config import get_config_path, load_raw_config, save_raw_config
from jiranav.jql import normalize_jql, resolve_view_mode

from ._helpers import SortedGroup
from ._json_state import echo_error, echo_json, is_json_output

# Sub-app for 'jnav config' subcommands
config_app = typer.Typer(
    help="Manage jiranav configuration.",
    no_args_is_help=True,
    cls=SortedGroup,
)

# Keys that hold credentials; never printed in full
_SECRET_KEYS = frozenset({"client_secret", "access_token", "refresh_token"})

# Keys filled in by `jnav setup` rather than by hand
_READ_ONLY_KEYS = frozenset(
    {
        "client_id",
        "client_secret",
        "cloud_id",
        "cloud_name",
        "cloud_url",
        "access_token",
        "refresh_token",
        "expires_at",
    },
)

# Preference keys: type, description, default, and allowed values
_KNOWN_KEYS: dict[str, dict[str, Any]] = {
    "default_jql": {
        "type": "str",
        "description": "Base JQL for `jnav browse`",
        "default": "ORDER BY updated DESC",
    },
    "issue_view_mode": {
        "type": "str",
        "description": "Filter preset layered onto the base JQL",
        "default": "assigned",
        "values": "assigned, incomplete, all",
    },
    "last_used_prefix": {
        "type": "str",
        "description": "Branch prefix highlighted in the prefix menu",
        "default": "(none)",
    },
}


def _coerce_value(key: str, value: str) -> str:
    """Validate and normalize a value for a known key."""
    if key == "issue_view_mode":
        try:
            return resolve_view_mode(value).value
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
    if key == "default_jql":
        return normalize_jql(value)
    if key == "last_used_prefix":
        if not value.strip():
            msg = "Prefix cannot be empty."
            raise typer.BadParameter(msg)
        return value.strip()
    return value


def _mask(key: str, value: Any) -> Any:
    if key in _SECRET_KEYS and value:
        return "********"
    return value


def register(app: typer.Typer) -> None:
    """Register config commands."""
    app.add_typer(config_app, name="config")

    @config_app.command("set")
    def config_set(
        key: str = typer.Argument(..., help="Configuration key to set"),
        value: str = typer.Argument(..., help="Value to set"),
    ) -> None:
        """Set a preference value."""
        if key in _READ_ONLY_KEYS:
            echo_error(f"Key '{key}' is managed by `jnav setup`.")
            raise typer.Exit(1)
        if key not in _KNOWN_KEYS:
            echo_error(f"Unknown key '{key}'.", "Run `jnav config keys` to list keys.")
            raise typer.Exit(1)

        coerced = _coerce_value(key, value)
        config = load_raw_config()
        config[key] = coerced
        save_raw_config(config)
        typer.echo(f"Set {key} = {coerced}")

    @config_app.command("unset")
    def config_unset(
        key: str = typer.Argument(..., help="Configuration key to remove"),
    ) -> None:
        """Remove a preference so its default applies."""
        if key not in _KNOWN_KEYS:
            echo_error(f"Unknown key '{key}'.", "Run `jnav config keys` to list keys.")
            raise typer.Exit(1)
        config = load_raw_config()
        if config.pop(key, None) is None:
            typer.echo(f"{key} was not set.")
            return
        save_raw_config(config)
        typer.echo(f"Unset {key}")

    @config_app.command("get")
    def config_get(
        key: str = typer.Argument(..., help="Configuration key to read"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Get a configuration value."""
        is_json_output(json_output)  # sync local flag for echo_error
        config = load_raw_config()
        if key not in config:
            echo_error(f"Key '{key}' not found in config.")
            raise typer.Exit(1)
        val = _mask(key, config[key])
        if is_json_output(json_output):
            echo_json({key: val})
        else:
            typer.echo(val)

    @config_app.command("list")
    def config_list(
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """List all configuration values (credentials masked)."""
        config = {k: _mask(k, v) for k, v in load_raw_config().items()}
        if is_json_output(json_output):
            echo_json(config)
        elif not config:
            typer.echo("No configuration values set.")
        else:
            for k, v in sorted(config.items()):
                typer.echo(f"{k} = {v}")

    @config_app.command("path")
    def config_path() -> None:
        """Print the location of the config file."""
        typer.echo(str(get_config_path()))

    @config_app.command("keys")
    def config_keys(
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """List the preference keys and their descriptions."""
        if is_json_output(json_output):
            echo_json(_KNOWN_KEYS)
            return

        from rich import box
        from rich.console import Console
        from rich.table import Table

        table = Table(
            show_header=True,
            header_style="bold",
            box=box.ROUNDED,
            pad_edge=False,
            show_edge=False,
        )
        table.add_column("Key", no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("Default", no_wrap=True)
        table.add_column("Description", overflow="fold")
        table.add_column("Values", overflow="fold")

        for key, info in _KNOWN_KEYS.items():
            table.add_row(
                key,
                info["type"],
                str(info["default"]),
                info["description"],
                info.get("values", ""),
            )

        Console().print(table)
