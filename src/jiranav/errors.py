"""Exception hierarchy for jiranav."""

from __future__ import annotations


class JiranavError(Exception):
    """Base class for all jiranav errors."""


class TransportError(JiranavError):
    """A remote call failed (network error or non-success status)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with a diagnostic and the HTTP status, if any."""
        super().__init__(message)
        self.status = status


class AuthError(TransportError):
    """The access token is invalid, expired, or cannot be refreshed."""


class IssueNotFoundError(JiranavError):
    """A selected issue is no longer present in the fetched list."""

    def __init__(self, key: str) -> None:
        """Initialize with the missing issue key."""
        super().__init__(f"Selected issue ({key}) was not found in the current list.")
        self.key = key


class RepositoryStateError(JiranavError):
    """Not inside a git work tree, or a branch create/checkout failed."""


class InputValidationError(JiranavError):
    """A required free-text entry was empty."""
