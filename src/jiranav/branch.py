"""Branch prefix selection and issue branch creation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from jiranav.constants import RAW_BRANCH_PREFIXES
from jiranav.errors import RepositoryStateError
from jiranav.models import BranchOutcome, BranchPrefix, MenuOption
from jiranav.prompts import require_non_empty

if TYPE_CHECKING:
    from jiranav.git import GitResult
    from jiranav.prompts import Prompter

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "__custom"

BRANCH_PREFIXES: tuple[BranchPrefix, ...] = tuple(
    BranchPrefix(value=value, description=description)
    for label, description in RAW_BRANCH_PREFIXES
    for value in label.split("/")
)


class BranchBackend(Protocol):
    """Version-control operations needed to materialize a branch."""

    def is_inside_repository(self) -> bool: ...

    def branch_exists(self, name: str) -> bool: ...

    def create_and_switch(self, name: str) -> GitResult: ...

    def switch_to(self, name: str) -> GitResult: ...


def branch_name(prefix: str, issue_key: str) -> str:
    """Compose the branch name for an issue."""
    return f"{prefix}/{issue_key}"


def prefix_options() -> list[MenuOption]:
    """Menu entries for the prefix catalog followed by the custom entry."""
    options = [
        MenuOption(f"{prefix.value.ljust(10)} {prefix.description}", prefix.value)
        for prefix in BRANCH_PREFIXES
    ]
    options.append(MenuOption("Custom prefix…", CUSTOM_PREFIX))
    return options


def choose_prefix(prompter: Prompter, last_used: str | None = None) -> str | None:
    """Ask the operator for a branch prefix.

    The catalog entry matching *last_used* is highlighted. Choosing the
    custom entry asks for free text until a non-blank value is given.

    Returns:
        The chosen prefix, or None if the operator cancelled.
    """
    options = prefix_options()
    default = next(
        (i for i, option in enumerate(options) if option.value == last_used),
        None,
    )
    selection = prompter.select("Select a branch prefix", options, default=default)
    if selection is None:
        return None
    if selection == CUSTOM_PREFIX:
        return prompter.text("Enter a custom prefix", validate=require_non_empty)
    return selection


def materialize(backend: BranchBackend, issue_key: str, prefix: str) -> BranchOutcome:
    """Create ``<prefix>/<issue_key>`` or switch to it if it already exists.

    Raises:
        RepositoryStateError: If the working directory is not a git work
            tree, or git fails to create or check out the branch.
    """
    name = branch_name(prefix, issue_key)

    if not backend.is_inside_repository():
        msg = "The current directory is not a git repository."
        raise RepositoryStateError(msg)

    if backend.branch_exists(name):
        result = backend.switch_to(name)
        if not result.success:
            msg = result.stderr or "Failed to check out the existing branch."
            raise RepositoryStateError(msg)
        logger.info("Switched to existing branch %s", name)
        return BranchOutcome(name=name, created=False)

    result = backend.create_and_switch(name)
    if not result.success:
        msg = result.stderr or "Failed to create a new branch."
        raise RepositoryStateError(msg)
    logger.info("Created branch %s", name)
    return BranchOutcome(name=name, created=True)
