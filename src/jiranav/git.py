"""Local git operations used for issue branches."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitResult:
    """Outcome of one git invocation."""

    success: bool
    stdout: str = ""
    stderr: str = ""


class GitBackend:
    """Runs git in a working directory (the current one by default)."""

    def __init__(self, cwd: str | Path | None = None) -> None:
        """Initialize the backend.

        Args:
            cwd: Directory to run git in; None means the process cwd.
        """
        self.cwd = Path(cwd) if cwd is not None else None

    def run_git(self, *args: str) -> GitResult:
        """Run ``git <args>`` and capture its output.

        A missing git executable is reported as a failed result rather
        than raised.
        """
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except (FileNotFoundError, OSError) as e:
            return GitResult(success=False, stderr=str(e))
        return GitResult(
            success=result.returncode == 0,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
        )

    def is_inside_repository(self) -> bool:
        """Check whether the working directory is inside a git work tree."""
        result = self.run_git("rev-parse", "--is-inside-work-tree")
        return result.success and result.stdout == "true"

    def branch_exists(self, name: str) -> bool:
        """Check whether a local branch named *name* exists (tags don't count)."""
        ref = f"refs/heads/{name}"
        return self.run_git("rev-parse", "--verify", "--quiet", ref).success

    def create_and_switch(self, name: str) -> GitResult:
        """Create branch *name* from HEAD and check it out."""
        return self.run_git("checkout", "-b", name)

    def switch_to(self, name: str) -> GitResult:
        """Check out the existing branch *name*."""
        return self.run_git("checkout", name)
