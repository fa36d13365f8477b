"""jiranav CLI commands for browsing Jira and branching from issues."""

from __future__ import annotations

import typer

from ._helpers import SortedGroup

app = typer.Typer(
    help="jiranav - browse Jira issues and create prefixed Git branches "
    "from the terminal",
    cls=SortedGroup,
)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output errors and config values as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to stderr",
    ),
) -> None:
    from ._helpers import configure_logging
    from ._json_state import set_json_flag

    set_json_flag(json_output)
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        from ._cmd_browse import run_browse

        run_browse()


from . import (  # noqa: E402
    _cmd_browse,
    _cmd_config,
    _cmd_settings,
    _cmd_setup,
)

for _mod in (
    _cmd_browse,
    _cmd_config,
    _cmd_settings,
    _cmd_setup,
):
    _mod.register(app)


def main() -> None:
    """Run the jiranav CLI application."""
    app()
