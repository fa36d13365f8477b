"""Interactive preference editing for jiranav CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from jiranav.config import update_config
from jiranav.constants import DEFAULT_JQL
from jiranav.jql import mode_label, normalize_jql, resolve_view_mode
from jiranav.models import MenuOption, ViewMode
from jiranav.prompts import ConsolePrompter

from ._helpers import require_config

if TYPE_CHECKING:
    from jiranav.prompts import Prompter

_KEEP = "__back"


def prompt_view_mode(
    prompter: Prompter,
    current: ViewMode,
    allow_back: bool = False,
) -> ViewMode | None:
    """Ask for a view mode with *current* highlighted.

    Returns:
        The chosen mode, or None when the operator backed out.
    """
    options = [MenuOption(mode_label(mode), mode) for mode in ViewMode]
    if allow_back:
        options.insert(0, MenuOption("↩ Back without changes", _KEEP))
    default = next(i for i, option in enumerate(options) if option.value is current)

    selection = prompter.select("Choose a filter preset", options, default=default)
    if selection is None or selection == _KEEP:
        return None
    return selection


def run_settings(prompter: Prompter | None = None) -> None:
    """Change the view-mode preset and, optionally, the default JQL."""
    prompter = prompter or ConsolePrompter()
    config = require_config()

    mode = prompt_view_mode(
        prompter,
        resolve_view_mode(config.issue_view_mode),
        allow_back=True,
    )
    if mode is None:
        prompter.notify("Settings unchanged.")
        return

    default_jql = config.default_jql or DEFAULT_JQL
    if prompter.confirm("Update the default JQL as well?", default=False):
        new_jql = prompter.text("New default JQL", default=default_jql)
        default_jql = normalize_jql(new_jql)

    update_config(
        config,
        issue_view_mode=mode,
        default_jql=default_jql.strip() or config.default_jql,
    )
    prompter.notify("Settings updated.")


def register(app: typer.Typer) -> None:
    """Register the settings command."""

    @app.command("settings")
    def settings() -> None:
        """Change the filter preset or default JQL."""
        run_settings()
