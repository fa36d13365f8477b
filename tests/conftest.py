"""Pytest configuration and shared fixtures."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest

from jiranav.cli._json_state import set_json_flag
from jiranav.models import JiraConfig, ViewMode

# Environment variables that eliminate per-repo git config calls and skip
# system/global config lookups.
_GIT_TEST_ENV = {
    **os.environ,
    "GIT_CONFIG_NOSYSTEM": "1",
    "HOME": "/dev/null",
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@test.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@test.com",
    "GIT_TERMINAL_PROMPT": "0",
}


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config location at a per-test directory."""
    path = tmp_path / "jiranav-config"
    monkeypatch.setenv("JIRANAV_CONFIG_DIR", str(path))
    return path


@pytest.fixture(autouse=True)
def _reset_json_flag() -> None:
    """JSON mode is process-global; start every test in plain mode."""
    set_json_flag(False)


@pytest.fixture
def jira_config() -> JiraConfig:
    """A complete configuration with a token that is still valid."""
    return JiraConfig(
        client_id="client-123",
        client_secret="secret-456",
        cloud_id="cloud-789",
        cloud_name="acme",
        cloud_url="https://acme.atlassian.net",
        access_token="access-abc",
        refresh_token="refresh-def",
        expires_at=32_503_680_000_000,  # year 3000
        default_jql="project = PROJ ORDER BY updated DESC",
        issue_view_mode=ViewMode.ASSIGNED,
    )


@dataclass
class GitRepo:
    """A temporary git repository with one commit on ``main``."""

    path: Path

    def git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command in this repo."""
        return subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=check,
            env=_GIT_TEST_ENV,
        )

    def current_branch(self) -> str:
        """Name of the checked-out branch."""
        return self.git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

    def create_branch(self, name: str) -> None:
        """Create and switch to a new branch from current HEAD."""
        self.git("checkout", "-b", name)

    def switch_branch(self, name: str) -> None:
        """Switch to an existing branch."""
        self.git("checkout", name)


@pytest.fixture(scope="session")
def _git_template_dir(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Empty template dir to skip copying sample hooks during git init."""
    return str(tmp_path_factory.mktemp("git-tpl"))


@pytest.fixture
def git_repo(
    tmp_path: Path,
    _git_template_dir: str,
    monkeypatch: pytest.MonkeyPatch,
) -> GitRepo:
    """Create a temporary git repository with an initial commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    (repo_path / "README.md").write_text("# test\n")

    # No git config needed thanks to _GIT_TEST_ENV; --template skips hooks
    subprocess.run(
        ["git", "init", "-b", "main", "--template", _git_template_dir, str(repo_path)],
        check=True,
        capture_output=True,
        env=_GIT_TEST_ENV,
    )
    subprocess.run(
        ["git", "add", "-A"],
        cwd=repo_path,
        check=True,
        capture_output=True,
        env=_GIT_TEST_ENV,
    )
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_path,
        check=True,
        capture_output=True,
        env=_GIT_TEST_ENV,
    )

    # GitBackend runs git with the inherited environment
    for key in ("GIT_CONFIG_NOSYSTEM", "GIT_TERMINAL_PROMPT"):
        monkeypatch.setenv(key, _GIT_TEST_ENV[key])

    return GitRepo(path=repo_path)
