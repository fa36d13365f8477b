"""Interactive issue browsing and branch creation for jiranav CLI."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

import typer

from jiranav.branch import choose_prefix, materialize
from jiranav.client import JiraClient
from jiranav.config import save_config
from jiranav.errors import RepositoryStateError
from jiranav.git import GitBackend
from jiranav.jql import normalize_jql, resolve_view_mode
from jiranav.navigator import Navigator
from jiranav.oauth import TokenProvider
from jiranav.prompts import ConsolePrompter

from ._helpers import require_config
from ._json_state import echo_error

if TYPE_CHECKING:
    from jiranav.branch import BranchBackend
    from jiranav.models import IssueSummary, JiraConfig
    from jiranav.navigator import IssueSource
    from jiranav.prompts import Prompter

logger = logging.getLogger(__name__)


class BrowseSession:
    """Holds the live config for one browse run and persists its changes."""

    def __init__(
        self,
        config: JiraConfig,
        prompter: Prompter,
        backend: BranchBackend | None = None,
    ) -> None:
        self.config = config
        self.prompter = prompter
        self.backend = backend or GitBackend()

    def persist(self, config: JiraConfig) -> None:
        """Adopt *config* as current and write it to disk."""
        self.config = config
        save_config(config)

    def token_provider(self) -> TokenProvider:
        """Token provider reading and refreshing this session's config."""
        return TokenProvider(lambda: self.config, self.persist)

    def create_branch(self, issue: IssueSummary) -> bool:
        """Ask for a prefix and create or switch to the issue branch.

        Returns:
            False when no prefix was chosen, True once the branch is checked out.

        Raises:
            typer.Exit: With status 1 when git refuses or the prefix
                cannot be saved.
        """
        prefix = choose_prefix(self.prompter, self.config.last_used_prefix)
        if not prefix:
            self.prompter.notify("No prefix selected. Aborting branch creation.")
            return False

        try:
            outcome = materialize(self.backend, issue.key, prefix)
        except RepositoryStateError as e:
            echo_error("Failed to create or switch branches.", str(e))
            raise typer.Exit(1) from e

        self.prompter.notify(outcome.message)
        try:
            self.persist(dataclasses.replace(self.config, last_used_prefix=prefix))
        except RuntimeError as e:
            echo_error("Failed to save preferences.", str(e))
            raise typer.Exit(1) from e
        return True


def run_browse(
    jql: str | None = None,
    mode: str | None = None,
    *,
    prompter: Prompter | None = None,
    source: IssueSource | None = None,
    backend: BranchBackend | None = None,
) -> None:
    """Browse issues until the operator exits or picks a branch."""
    config = require_config()
    try:
        view_mode = resolve_view_mode(mode or config.issue_view_mode)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--mode") from e

    session = BrowseSession(config, prompter or ConsolePrompter(), backend)
    if source is None:
        source = JiraClient(config.cloud_id, session.token_provider())

    base_jql = normalize_jql(jql if jql is not None else config.base_jql)
    logger.debug("Browsing %r in %s mode", base_jql, view_mode.value)

    navigator = Navigator(source, session.prompter, session.create_branch)
    if not navigator.initialize(base_jql, view_mode):
        return
    navigator.run()


def register(app: typer.Typer) -> None:
    """Register the browse command."""

    @app.command("browse")
    def browse(
        jql: str | None = typer.Option(
            None,
            "--jql",
            help="Override the configured JQL for this run",
        ),
        mode: str | None = typer.Option(
            None,
            "--mode",
            "-m",
            help="View mode for this run: assigned, incomplete or all",
        ),
    ) -> None:
        """Browse issues and create prefixed Git branches."""
        run_browse(jql, mode)
