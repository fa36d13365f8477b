"""Tests for branch prefix selection and branch materialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from cli_test_helpers import FakeBranchBackend, ScriptedPrompter

from jiranav.branch import (
    BRANCH_PREFIXES,
    CUSTOM_PREFIX,
    branch_name,
    choose_prefix,
    materialize,
    prefix_options,
)
from jiranav.errors import RepositoryStateError
from jiranav.git import GitBackend

if TYPE_CHECKING:
    from pathlib import Path

    from conftest import GitRepo


class TestPrefixCatalog:
    """Test the prefix catalog and its menu."""

    def test_compound_labels_are_split(self) -> None:
        """Labels with alternatives become one entry each."""
        values = [prefix.value for prefix in BRANCH_PREFIXES]
        assert "clean" in values
        assert "refactor" in values
        assert "remove" in values
        assert "delete" in values
        assert not any("/" in value for value in values)

    def test_split_entries_share_description(self) -> None:
        """Both halves of a compound label keep its description."""
        by_value = {prefix.value: prefix.description for prefix in BRANCH_PREFIXES}
        assert by_value["clean"] == by_value["refactor"]

    def test_menu_ends_with_custom_entry(self) -> None:
        """The custom entry follows the catalog."""
        options = prefix_options()
        assert len(options) == len(BRANCH_PREFIXES) + 1
        assert options[-1].value == CUSTOM_PREFIX
        assert options[0].value == BRANCH_PREFIXES[0].value
        assert options[0].label.startswith(BRANCH_PREFIXES[0].value)

    def test_branch_name(self) -> None:
        """Branch names are prefix, slash, issue key."""
        assert branch_name("feat", "PROJ-12") == "feat/PROJ-12"


class TestChoosePrefix:
    """Test choose_prefix."""

    def test_catalog_choice(self) -> None:
        """A catalog entry is returned as-is."""
        prompter = ScriptedPrompter(selects=["fix"])
        assert choose_prefix(prompter) == "fix"
        assert prompter.select_calls[0][2] is None

    def test_last_used_is_highlighted(self) -> None:
        """The previously used prefix is the default entry."""
        prompter = ScriptedPrompter(selects=["feat"])
        choose_prefix(prompter, last_used="feat")

        _, options, default = prompter.select_calls[0]
        assert default is not None
        assert options[default].value == "feat"

    def test_unknown_last_used_has_no_default(self) -> None:
        """A custom last-used prefix highlights nothing."""
        prompter = ScriptedPrompter(selects=["fix"])
        choose_prefix(prompter, last_used="spike")
        assert prompter.select_calls[0][2] is None

    def test_cancel_returns_none(self) -> None:
        """A cancelled menu means no prefix."""
        prompter = ScriptedPrompter(selects=[None])
        assert choose_prefix(prompter) is None

    def test_custom_prefix_is_trimmed(self) -> None:
        """A custom prefix is read as free text."""
        prompter = ScriptedPrompter(selects=[CUSTOM_PREFIX], texts=["  spike "])
        assert choose_prefix(prompter) == "spike"

    def test_custom_prefix_reprompts_on_blank(self) -> None:
        """Blank custom input is rejected until a value is given."""
        prompter = ScriptedPrompter(
            selects=[CUSTOM_PREFIX],
            texts=["", "   ", "spike"],
        )
        assert choose_prefix(prompter) == "spike"
        assert prompter.errors == ["Please enter a value.", "Please enter a value."]


class TestMaterialize:
    """Test materialize against a fake backend."""

    def test_creates_missing_branch(self) -> None:
        """A missing branch is created and checked out."""
        backend = FakeBranchBackend()
        outcome = materialize(backend, "PROJ-12", "feat")

        assert outcome.name == "feat/PROJ-12"
        assert outcome.created
        assert backend.calls == [("create", "feat/PROJ-12")]

    def test_switches_to_existing_branch(self) -> None:
        """An existing branch is checked out, not recreated."""
        backend = FakeBranchBackend(branches={"main", "feat/PROJ-12"})
        outcome = materialize(backend, "PROJ-12", "feat")

        assert not outcome.created
        assert backend.calls == [("switch", "feat/PROJ-12")]

    def test_outside_repository(self) -> None:
        """Nothing is attempted outside a work tree."""
        backend = FakeBranchBackend(inside=False)
        with pytest.raises(RepositoryStateError, match="not a git repository"):
            materialize(backend, "PROJ-12", "feat")
        assert backend.calls == []

    def test_create_failure_carries_stderr(self) -> None:
        """Git's diagnostic is surfaced when creation fails."""
        backend = FakeBranchBackend(fail_with="fatal: cannot lock ref")
        with pytest.raises(RepositoryStateError, match="cannot lock ref"):
            materialize(backend, "PROJ-12", "feat")

    def test_switch_failure_without_stderr(self) -> None:
        """A silent checkout failure still gets a message."""
        backend = FakeBranchBackend(branches={"feat/PROJ-12"}, fail_with="")
        with pytest.raises(RepositoryStateError, match="existing branch"):
            materialize(backend, "PROJ-12", "feat")


class TestMaterializeWithGit:
    """Test materialize against a real repository."""

    def test_create_then_switch(self, git_repo: GitRepo) -> None:
        """First call creates the branch; a later call switches back to it."""
        backend = GitBackend(git_repo.path)

        outcome = materialize(backend, "PROJ-12", "feat")
        assert outcome.created
        assert git_repo.current_branch() == "feat/PROJ-12"

        git_repo.switch_branch("main")
        outcome = materialize(backend, "PROJ-12", "feat")
        assert not outcome.created
        assert git_repo.current_branch() == "feat/PROJ-12"

    def test_not_a_repository(self, tmp_path: Path) -> None:
        """A plain directory is rejected."""
        backend = GitBackend(tmp_path)
        with pytest.raises(RepositoryStateError):
            materialize(backend, "PROJ-12", "feat")

    def test_same_named_tag_is_not_a_branch(self, git_repo: GitRepo) -> None:
        """A tag called like the branch does not count; a real branch is created."""
        git_repo.git("tag", "feat/PROJ-12")
        backend = GitBackend(git_repo.path)

        outcome = materialize(backend, "PROJ-12", "feat")

        assert outcome.created
        head = git_repo.git("symbolic-ref", "HEAD").stdout.strip()
        assert head == "refs/heads/feat/PROJ-12"
