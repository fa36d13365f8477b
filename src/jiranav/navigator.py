"""Stack-based issue browsing session.

The navigator owns a list of :class:`BrowsingContext` objects: index 0 is
the root query, the last entry is the level currently shown. Drilling into
an issue's children pushes a context, "back" pops one, "refresh" empties the
top one so it is fetched again. All remote calls go through an
:class:`IssueSource`; all operator interaction goes through a
:class:`~jiranav.prompts.Prompter`.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from jiranav.constants import CHILDREN_MARKER, MAX_RESULTS
from jiranav.errors import IssueNotFoundError, TransportError
from jiranav.jql import apply_view_mode, fallback_order, mode_label
from jiranav.models import (
    BrowsingContext,
    Control,
    IssueAction,
    IssueChoice,
    MenuOption,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from jiranav.models import (
        ChildPage,
        IssueSummary,
        SearchPage,
        Selection,
        ViewMode,
    )
    from jiranav.prompts import Prompter

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class IssueSource(Protocol):
    """Paginated issue search and child lookup."""

    def search_issues(
        self,
        jql: str,
        start_at: int = 0,
        max_results: int = MAX_RESULTS,
    ) -> SearchPage: ...

    def fetch_child_issues(self, issue_key: str) -> ChildPage | None: ...


def format_issue(issue: IssueSummary) -> str:
    """Format an issue as a single menu line."""
    summary = _WHITESPACE.sub(" ", issue.summary)
    marker = CHILDREN_MARKER if issue.has_children else " "
    return f"[{issue.key}] {issue.issue_type} | {issue.status} {marker} {summary}"


class Navigator:
    """Interactive drill-down/back/refresh/load-more browsing session."""

    def __init__(
        self,
        source: IssueSource,
        prompter: Prompter,
        on_branch: Callable[[IssueSummary], bool],
        page_size: int = MAX_RESULTS,
    ) -> None:
        """Initialize the navigator.

        Args:
            source: Where issues come from.
            prompter: Operator interaction.
            on_branch: Invoked when the operator asks for a branch; returns
                True when the branch was created or switched to, which ends
                the session.
            page_size: Issues requested per page.
        """
        self.source = source
        self.prompter = prompter
        self.on_branch = on_branch
        self.page_size = page_size
        self.stack: list[BrowsingContext] = []

    @property
    def current(self) -> BrowsingContext:
        """The context on top of the stack."""
        return self.stack[-1]

    @property
    def depth(self) -> int:
        """Number of contexts on the stack."""
        return len(self.stack)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _retrying(self, operation: Callable[[], None]) -> bool:
        """Run *operation*, asking the operator to retry on fetch failures.

        Returns:
            True once *operation* succeeded, False if the operator aborted.
        """
        while True:
            try:
                operation()
            except TransportError as e:
                logger.debug("Fetch failed", exc_info=True)
                self.prompter.error(f"Failed to fetch data from Jira. {e}")
                if not self.prompter.confirm("Retry?", default=True):
                    return False
            else:
                return True

    def initialize(self, base_jql: str, mode: ViewMode) -> bool:
        """Build the root context, falling back across view modes.

        Each mode from :func:`fallback_order` is tried until one returns at
        least one issue. If none do, the last-tried query is kept as an
        empty root.

        Returns:
            False if the operator aborted after a fetch failure.
        """
        self.stack = []
        return self._retrying(lambda: self._initialize_once(base_jql, mode))

    def _initialize_once(self, base_jql: str, requested: ViewMode) -> None:
        context: BrowsingContext | None = None
        for mode in fallback_order(requested):
            jql = apply_view_mode(base_jql, mode)
            page = self.source.search_issues(jql, 0, self.page_size)
            context = BrowsingContext(
                jql=jql,
                issues=list(page.issues),
                total=page.total,
                loaded=True,
            )
            if context.issues:
                if mode is not requested:
                    notice = (
                        f'No issues for "{mode_label(requested)}"; '
                        f'switched to "{mode_label(mode)}".'
                    )
                    logger.info(notice)
                    self.prompter.notify(notice)
                break
        if context is not None:
            self.stack = [context]

    def load_more(self) -> None:
        """Fetch the next page of the current context and append it.

        Raises:
            TransportError: If the fetch fails; the context is left as it was.
        """
        context = self.current
        page = self.source.search_issues(
            context.jql,
            len(context.issues),
            self.page_size,
        )
        context.issues.extend(page.issues)
        context.total = page.total
        context.loaded = True
        logger.debug(
            "Loaded %d issues (%d/%d) for %s",
            len(page.issues),
            len(context.issues),
            context.total,
            context.jql,
        )

    def ensure_loaded(self) -> bool:
        """Fetch the first page of the current context if never fetched.

        Returns:
            False if the operator aborted after a fetch failure.
        """
        if self.current.loaded:
            return True
        return self._retrying(self.load_more)

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def menu_title(self) -> str:
        """Heading for the issue list of the current context."""
        context = self.current
        progress = f"({len(context.issues)}/{context.total or '?'})"
        if context.parent_key:
            return f"Choose a task under {context.parent_key} {progress}"
        return f"Choose a task to work on {progress}"

    def issue_menu(self) -> list[MenuOption]:
        """Entries for the current context.

        Order: fetched issues, load more (if anything remains), back (below
        the root only), refresh, exit.
        """
        context = self.current
        options = [
            MenuOption(format_issue(issue), IssueChoice(issue.key))
            for issue in context.issues
        ]
        if len(context.issues) < context.total:
            options.append(
                MenuOption(
                    f"📥 Load more ({context.remaining} remaining)",
                    Control.LOAD_MORE,
                ),
            )
        if self.depth > 1:
            options.append(MenuOption("⬅ Back to parent list", Control.BACK))
        options.append(MenuOption("🔄 Refresh", Control.REFRESH))
        options.append(MenuOption("⏻ Exit", Control.EXIT))
        return options

    @staticmethod
    def action_menu(
        issue: IssueSummary,
        children: ChildPage | None,
    ) -> list[MenuOption]:
        """Entries offered after picking *issue*."""
        options: list[MenuOption] = []
        if children is not None and children.issues:
            options.append(
                MenuOption(
                    f"📂 View child issues ({children.total})",
                    IssueAction.CHILDREN,
                ),
            )
        options.append(
            MenuOption(f"🌱 Create branch ({issue.key})", IssueAction.BRANCH),
        )
        options.append(MenuOption("↩ Back to list", IssueAction.BACK))
        options.append(MenuOption("⏻ Exit", IssueAction.EXIT))
        return options

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, selection: Selection | None) -> bool:
        """Apply an issue-list selection.

        A cancelled menu (None) counts as exit.

        Returns:
            False when the session should end.
        """
        if selection is None or selection is Control.EXIT:
            return False
        if selection is Control.BACK:
            if self.depth > 1:
                self.stack.pop()
            return True
        if selection is Control.REFRESH:
            self.current.reset()
            return True
        if selection is Control.LOAD_MORE:
            return self._retrying(self.load_more)
        if isinstance(selection, IssueChoice):
            issue = self.current.find(selection.key)
            if issue is None:
                self.prompter.error(str(IssueNotFoundError(selection.key)))
                return True
            return self.handle_issue(issue)
        msg = f"Unknown selection: {selection!r}"
        raise TypeError(msg)

    def handle_issue(self, issue: IssueSummary) -> bool:
        """Show the action menu for *issue* and carry out the choice.

        Returns:
            False when the session should end.
        """
        self.prompter.notify(f"\n[{issue.key}] {issue.summary}")
        self.prompter.notify(f"Type: {issue.issue_type} / Status: {issue.status}")

        children: ChildPage | None = None
        try:
            children = self.source.fetch_child_issues(issue.key)
        except TransportError as e:
            logger.debug("Child lookup failed for %s", issue.key, exc_info=True)
            self.prompter.error(f"Failed to fetch child issues. {e}")

        has_children = children is not None and bool(children.issues)
        message = (
            f"Choose an action for {issue.key}"
            if has_children
            else f"Create a branch for {issue.key}?"
        )
        action = self.prompter.select(message, self.action_menu(issue, children))

        if action is None or action is IssueAction.EXIT:
            return False
        if action is IssueAction.BACK:
            return True
        if action is IssueAction.CHILDREN and children is not None:
            self.stack.append(
                BrowsingContext(
                    jql=children.jql,
                    parent_key=issue.key,
                    issues=list(children.issues),
                    total=children.total,
                    loaded=True,
                ),
            )
            return True
        if action is IssueAction.BRANCH:
            return not self.on_branch(issue)
        return True

    def run(self) -> None:
        """Loop over list prompts until the operator exits or the stack empties."""
        while self.stack:
            if not self.ensure_loaded():
                return
            selection = self.prompter.select(self.menu_title(), self.issue_menu())
            if not self.dispatch(selection):
                return
