"""Data models for jiranav using dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jiranav.constants import DEFAULT_JQL, HIERARCHY_TOP_TYPES


class ViewMode(str, Enum):
    """Named filter preset layered onto the base query."""

    ASSIGNED = "assigned"
    INCOMPLETE = "incomplete"
    ALL = "all"


class Control(str, Enum):
    """Navigation actions offered below the issue list."""

    LOAD_MORE = "load_more"
    BACK = "back"
    REFRESH = "refresh"
    EXIT = "exit"


@dataclass(frozen=True)
class IssueChoice:
    """Selection of a listed issue, identified by its key."""

    key: str


# Everything the issue list menu can return
Selection = Control | IssueChoice


class IssueAction(str, Enum):
    """Actions offered after an issue has been picked."""

    CHILDREN = "children"
    BRANCH = "branch"
    BACK = "back"
    EXIT = "exit"


@dataclass(frozen=True)
class IssueSummary:
    """Minimal projection of a remote Jira issue."""

    key: str
    summary: str = "(No summary)"
    issue_type: str = "Unknown"
    status: str = "Unspecified"
    has_children: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "IssueSummary":
        """Build a summary from a Jira REST issue payload."""
        fields: dict[str, Any] = data.get("fields") or {}
        issue_type = (fields.get("issuetype") or {}).get("name") or "Unknown"
        status = (fields.get("status") or {}).get("name") or "Unspecified"
        subtasks = fields.get("subtasks") or []
        has_children = bool(subtasks) or issue_type.lower() in HIERARCHY_TOP_TYPES
        return cls(
            key=data["key"],
            summary=fields.get("summary") or "(No summary)",
            issue_type=issue_type,
            status=status,
            has_children=has_children,
        )


@dataclass
class SearchPage:
    """One page of search results plus the server-reported total."""

    issues: list[IssueSummary] = field(default_factory=list[IssueSummary])
    total: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any], start_at: int = 0) -> "SearchPage":
        """Build a page from a Jira search response.

        Responses without a ``total`` get one derived from the page position:
        one more than what has been seen unless ``isLast`` says otherwise.
        """
        issues = [IssueSummary.from_api(raw) for raw in data.get("issues") or []]
        if "total" in data:
            total = int(data["total"])
        else:
            seen = start_at + len(issues)
            total = seen if data.get("isLast", True) else seen + 1
        return cls(issues=issues, total=total)


@dataclass
class ChildPage(SearchPage):
    """Search page for an issue's children, with the query that produced it."""

    jql: str = ""


@dataclass
class BrowsingContext:
    """One level of the navigation stack."""

    jql: str
    parent_key: str | None = None
    issues: list[IssueSummary] = field(default_factory=list[IssueSummary])
    total: int = 0
    loaded: bool = False  # False until the first page has been fetched

    @property
    def remaining(self) -> int:
        """Number of matches not yet fetched."""
        return max(self.total - len(self.issues), 0)

    def find(self, key: str) -> IssueSummary | None:
        """Return the fetched issue with *key*, if present."""
        for issue in self.issues:
            if issue.key == key:
                return issue
        return None

    def reset(self) -> None:
        """Forget fetched results so the next load starts from offset zero."""
        self.issues = []
        self.total = 0
        self.loaded = False


@dataclass(frozen=True)
class MenuOption:
    """A labelled entry in a selection menu."""

    label: str
    value: Any


@dataclass(frozen=True)
class BranchPrefix:
    """A branch category token and what it is for."""

    value: str
    description: str


@dataclass(frozen=True)
class BranchOutcome:
    """Result of creating or switching to an issue branch."""

    name: str
    created: bool

    @property
    def message(self) -> str:
        """Human-readable report of what happened."""
        if self.created:
            return f"Created branch {self.name}."
        return f"Branch {self.name} already existed. Switched to it."


@dataclass
class JiraConfig:
    """Persisted OAuth credentials, Jira site and preferences."""

    client_id: str = ""
    client_secret: str = ""
    cloud_id: str = ""
    cloud_name: str = ""
    cloud_url: str = ""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0  # epoch milliseconds
    default_jql: str | None = None
    last_used_prefix: str | None = None
    issue_view_mode: ViewMode | None = None

    def is_complete(self) -> bool:
        """Check if the config has what browsing needs."""
        return bool(self.client_id and self.cloud_id)

    @property
    def base_jql(self) -> str:
        """Configured default query, or the built-in one."""
        return self.default_jql or DEFAULT_JQL


def config_to_dict(config: JiraConfig) -> dict[str, Any]:
    """Convert a JiraConfig to a TOML-safe dictionary, dropping unset values."""
    data: dict[str, Any] = {
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "cloud_id": config.cloud_id,
        "cloud_name": config.cloud_name,
        "cloud_url": config.cloud_url,
        "access_token": config.access_token,
        "refresh_token": config.refresh_token,
        "expires_at": config.expires_at,
        "default_jql": config.default_jql,
        "last_used_prefix": config.last_used_prefix,
        "issue_view_mode": (
            config.issue_view_mode.value if config.issue_view_mode else None
        ),
    }
    return {key: value for key, value in data.items() if value is not None}


def dict_to_config(data: dict[str, Any]) -> JiraConfig:
    """Convert a dictionary to a JiraConfig.

    Unknown keys are ignored and an unrecognised view mode is dropped, so a
    hand-edited file never prevents the CLI from starting.
    """
    raw_mode = data.get("issue_view_mode")
    try:
        mode = ViewMode(raw_mode) if raw_mode else None
    except ValueError:
        mode = None

    return JiraConfig(
        client_id=str(data.get("client_id", "")),
        client_secret=str(data.get("client_secret", "")),
        cloud_id=str(data.get("cloud_id", "")),
        cloud_name=str(data.get("cloud_name", "")),
        cloud_url=str(data.get("cloud_url", "")),
        access_token=str(data.get("access_token", "")),
        refresh_token=str(data.get("refresh_token", "")),
        expires_at=int(data.get("expires_at", 0)),
        default_jql=data.get("default_jql") or None,
        last_used_prefix=data.get("last_used_prefix") or None,
        issue_view_mode=mode,
    )
