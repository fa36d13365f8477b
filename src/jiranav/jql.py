"""JQL composition and view-mode fallback rules."""

from __future__ import annotations

import re

from jiranav.constants import (
    ASSIGNED_CLAUSE,
    DEFAULT_ORDERING,
    FALLBACK_FILTER_CLAUSE,
    NOT_DONE_CLAUSE,
)
from jiranav.models import ViewMode

_LEADING_ORDER_BY = re.compile(r"^order\s+by", re.IGNORECASE)
_ORDER_BY_KEYWORD = re.compile(r"\sorder\s+by\s", re.IGNORECASE)

_MODE_LABELS = {
    ViewMode.ASSIGNED: "Assigned to me & not done",
    ViewMode.INCOMPLETE: "Any assignee, not done only",
    ViewMode.ALL: "All issues",
}

_FALLBACK_ORDER = {
    ViewMode.ASSIGNED: (ViewMode.ASSIGNED, ViewMode.INCOMPLETE, ViewMode.ALL),
    ViewMode.INCOMPLETE: (ViewMode.INCOMPLETE, ViewMode.ASSIGNED, ViewMode.ALL),
    ViewMode.ALL: (ViewMode.ALL, ViewMode.INCOMPLETE, ViewMode.ASSIGNED),
}


def normalize_jql(raw: str) -> str:
    """Turn a raw filter string into a query with at least one predicate.

    Examples:
        ""                       -> "issueType IS NOT EMPTY ORDER BY updated DESC"
        "ORDER BY priority DESC" -> "issueType IS NOT EMPTY ORDER BY priority DESC"
        "status = Open"          -> "status = Open"
    """
    trimmed = raw.strip()
    if not trimmed:
        return f"{FALLBACK_FILTER_CLAUSE} {DEFAULT_ORDERING}"
    if _LEADING_ORDER_BY.match(trimmed):
        return f"{FALLBACK_FILTER_CLAUSE} {trimmed}"
    return trimmed


def split_jql(jql: str) -> tuple[str, str | None]:
    """Split a query into its predicate part and optional ORDER BY part.

    The first whitespace-delimited ``order by`` (any case) marks the
    boundary; the ordering part keeps the keyword.
    """
    match = _ORDER_BY_KEYWORD.search(jql)
    if match is None:
        return jql.strip(), None
    return jql[: match.start()].strip(), jql[match.start() :].strip()


def apply_view_mode(jql: str, mode: ViewMode) -> str:
    """AND the predicates for *mode* onto *jql*, keeping its ordering last."""
    if mode is ViewMode.ALL:
        return jql

    query_part, order_part = split_jql(jql)
    filters = [NOT_DONE_CLAUSE]
    if mode is ViewMode.ASSIGNED:
        filters.append(ASSIGNED_CLAUSE)

    combined = " AND ".join([f"({query_part})", *(f"({f})" for f in filters)])
    return f"{combined} {order_part}" if order_part else combined


def fallback_order(mode: ViewMode) -> tuple[ViewMode, ...]:
    """Return the modes to try, in order, when *mode* yields no issues."""
    return _FALLBACK_ORDER[mode]


def mode_label(mode: ViewMode) -> str:
    """Return the display label for a view mode."""
    return _MODE_LABELS[mode]


def resolve_view_mode(value: str | ViewMode | None) -> ViewMode:
    """Parse a stored or user-supplied view mode, defaulting to ``assigned``.

    Raises:
        ValueError: If *value* names no known mode.
    """
    if value is None or value == "":
        return ViewMode.ASSIGNED
    if isinstance(value, ViewMode):
        return value
    try:
        return ViewMode(value.strip().lower())
    except ValueError:
        names = ", ".join(m.value for m in ViewMode)
        msg = f"Invalid view mode '{value}'. Use one of: {names}."
        raise ValueError(msg) from None
