"""Textual-based menu picker for interactive selection."""

from __future__ import annotations

from typing import Any, ClassVar

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Input, OptionList
from textual.widgets.option_list import Option


class MenuPickerApp(App[int | None]):
    """Textual app for choosing one entry from a searchable list.

    Exits with the index of the chosen label in the unfiltered list, or None
    when cancelled.
    """

    BINDINGS: ClassVar = [
        Binding("escape", "cancel", "Cancel", priority=True),
    ]

    CSS = """
    #picker-search {
        margin: 1 2 0 2;
    }

    #picker-list {
        margin: 0 2 1 2;
    }
    """

    def __init__(
        self,
        title: str,
        labels: list[str],
        default: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.title = title
        self._labels = labels
        self._default = default
        self.selected_index: int | None = None

    def compose(self) -> ComposeResult:
        """Compose the picker UI."""
        yield Input(placeholder="Search...", id="picker-search")
        yield OptionList(*self._options(""), id="picker-list")
        yield Footer()

    def _options(self, query: str) -> list[Option]:
        needle = query.lower()
        return [
            Option(Text(label), id=str(index))
            for index, label in enumerate(self._labels)
            if needle in label.lower()
        ]

    def on_mount(self) -> None:
        """Highlight the default entry and focus the list."""
        option_list = self.query_one("#picker-list", OptionList)
        if option_list.option_count > 0:
            default = self._default
            if default is None or not 0 <= default < option_list.option_count:
                default = 0
            option_list.highlighted = default
        option_list.focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Filter the option list based on search input."""
        option_list = self.query_one("#picker-list", OptionList)
        option_list.clear_options()
        option_list.add_options(self._options(event.value))
        if option_list.option_count > 0:
            option_list.highlighted = 0

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Handle selection."""
        if event.option.id is None:
            return
        self.selected_index = int(event.option.id)
        self.exit(self.selected_index)

    def action_cancel(self) -> None:
        """Leave without a selection."""
        self.exit(None)


def pick(title: str, labels: list[str], default: int | None = None) -> int | None:
    """Open a Textual picker over *labels*.

    Args:
        title: Heading shown in the app header.
        labels: Entries in display order.
        default: Index to highlight initially.

    Returns:
        Index of the chosen entry, or None if cancelled.
    """
    if not labels:
        return None
    picker = MenuPickerApp(title, labels, default)
    picker.run()
    return picker.selected_index
