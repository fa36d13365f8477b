"""Constants for jiranav."""

from __future__ import annotations

# Page size for issue searches
MAX_RESULTS = 50

# Predicate used when a query has no predicate of its own
FALLBACK_FILTER_CLAUSE = "issueType IS NOT EMPTY"
DEFAULT_ORDERING = "ORDER BY updated DESC"
DEFAULT_JQL = DEFAULT_ORDERING

# View-mode predicates
NOT_DONE_CLAUSE = "statusCategory != Done"
ASSIGNED_CLAUSE = "assignee = currentUser()"

# Fields requested for every issue search
DEFAULT_FIELDS = "summary,issuetype,status,subtasks,parent,priority"

# Optional link fields probed for child-issue lookup
CHILD_LINK_FIELDS = ("Epic Link", "Parent Link")

# Configuration location
CONFIG_DIR_NAME = ".jira-pbi-cli"
CONFIG_FILENAME = "config.toml"
CONFIG_DIR_ENV = "JIRANAV_CONFIG_DIR"

# OAuth
AUTH_BASE = "https://auth.atlassian.com"
API_BASE = "https://api.atlassian.com"
CALLBACK_HOST = "127.0.0.1"
CALLBACK_PORT = 8765
CALLBACK_PATH = "/callback"
REDIRECT_URI = f"http://{CALLBACK_HOST}:{CALLBACK_PORT}{CALLBACK_PATH}"
TOKEN_REFRESH_BUFFER_MS = 60_000
CALLBACK_TIMEOUT_SECONDS = 300
HTTP_TIMEOUT_SECONDS = 30

DEFAULT_SCOPES = (
    "read:me",
    "read:account",
    "read:issue:jira",
    "read:project:jira",
    "read:field:jira",
    "read:user:jira",
    "read:jira-work",
    "read:jira-user",
)

# Issue types that always get the "has children" marker
HIERARCHY_TOP_TYPES = frozenset({"epic"})

# Menu glyphs
CHILDREN_MARKER = "📂"

# Raw prefix catalog; compound labels expand to one entry per alternative
RAW_BRANCH_PREFIXES: tuple[tuple[str, str], ...] = (
    ("fix", "Fix issues found in existing features."),
    ("hotfix", "Apply an urgent change that cannot wait."),
    ("add", "Add a brand-new file or capability."),
    ("feat", "Introduce a new feature or file."),
    ("update", "Tweak an existing feature where no bug existed."),
    ("change", "Adjust functionality due to a requirement change."),
    ("clean/refactor", "Refactor or clean up code without altering behavior."),
    ("improve", "Improve code quality or structure."),
    ("disable", "Temporarily turn off a feature or flag."),
    ("remove/delete", "Remove a file or retire an existing feature."),
    ("rename", "Rename files, symbols, or resources."),
    ("move", "Move files or folders around."),
    ("upgrade", "Upgrade dependencies or runtime versions."),
    ("revert", "Revert to a previous commit or behavior."),
    ("docs", "Edit or add project documentation."),
    ("style", "Make formatting or stylistic changes only."),
    ("perf", "Optimize performance or resource usage."),
    ("test", "Add or update tests and supporting fixtures."),
    ("chore", "Miscellaneous tasks, tooling, or generated updates."),
)
