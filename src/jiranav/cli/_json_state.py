"""Output mode (plain or JSON) shared by jiranav commands."""

from __future__ import annotations

import sys
from typing import Any

import orjson
import typer

_json_mode: bool = False


def set_json_flag(value: bool) -> None:
    """Switch JSON output on or off for the rest of the process."""
    global _json_mode  # noqa: PLW0603
    _json_mode = value


def is_json_output(local_flag: bool = False) -> bool:
    """Check if JSON output is enabled by the global or per-command flag.

    A per-command ``--json`` also switches the global mode so that
    ``echo_error`` follows it.
    """
    if local_flag:
        set_json_flag(True)
    return _json_mode


def echo_json(data: Any) -> None:
    """Print *data* as indented JSON on stdout."""
    typer.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def echo_error(operation: str, detail: str | None = None) -> None:
    """Report a failure: what was being done first, then the diagnostic.

    Plain mode prints ``Error: <operation> <detail>`` on stderr; JSON mode
    prints ``{"error": <operation>, "detail": <detail>}``.
    """
    if _json_mode:
        payload: dict[str, str] = {"error": operation}
        if detail:
            payload["detail"] = detail
        sys.stderr.write(orjson.dumps(payload).decode() + "\n")
        return
    message = f"{operation} {detail}" if detail else operation
    typer.echo(f"Error: {message}", err=True)
