"""Textual TUI components for jiranav."""

from jiranav.tui.picker import MenuPickerApp, pick

__all__ = [
    "MenuPickerApp",
    "pick",
]
