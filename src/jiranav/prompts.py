"""Operator prompts: the interface the core uses and its console implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import typer
from rich.console import Console

from jiranav.errors import InputValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from jiranav.models import MenuOption


class Prompter(Protocol):
    """Everything the interactive flows need from the terminal."""

    def select(
        self,
        message: str,
        options: Sequence[MenuOption],
        default: int | None = None,
    ) -> Any:
        """Return the value of the chosen option, or None if cancelled."""
        ...

    def text(
        self,
        message: str,
        default: str | None = None,
        validate: Callable[[str], str] | None = None,
    ) -> str:
        """Read a line of text, re-prompting while *validate* rejects it."""
        ...

    def secret(self, message: str) -> str:
        """Read a line of text without echoing it."""
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""
        ...

    def notify(self, message: str) -> None:
        """Show an informational message."""
        ...

    def error(self, message: str) -> None:
        """Show an error message."""
        ...


def require_non_empty(value: str) -> str:
    """Validator for required free-text entries; returns the trimmed value.

    Raises:
        InputValidationError: If *value* is blank.
    """
    trimmed = value.strip()
    if not trimmed:
        msg = "Please enter a value."
        raise InputValidationError(msg)
    return trimmed


class ConsolePrompter:
    """Prompter backed by a Textual picker, typer prompts and a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def select(
        self,
        message: str,
        options: Sequence[MenuOption],
        default: int | None = None,
    ) -> Any:
        from jiranav.tui.picker import pick

        index = pick(message, [option.label for option in options], default)
        if index is None:
            return None
        return options[index].value

    def text(
        self,
        message: str,
        default: str | None = None,
        validate: Callable[[str], str] | None = None,
    ) -> str:
        while True:
            value: str = typer.prompt(
                message,
                default=default or "",
                show_default=bool(default),
            )
            if validate is None:
                return value
            try:
                return validate(value)
            except InputValidationError as e:
                self.error(str(e))

    def secret(self, message: str) -> str:
        return typer.prompt(message, hide_input=True)

    def confirm(self, message: str, default: bool = True) -> bool:
        return typer.confirm(message, default=default)

    def notify(self, message: str) -> None:
        self.console.print(message, markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="red", markup=False)
