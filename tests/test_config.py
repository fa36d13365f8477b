"""Tests for config file handling."""

from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING

import pytest
import tomli_w

from jiranav.config import (
    get_config_dir,
    get_config_path,
    load_config,
    load_raw_config,
    save_config,
    save_raw_config,
    update_config,
)
from jiranav.models import JiraConfig, ViewMode

if TYPE_CHECKING:
    from pathlib import Path


class TestConfigLocation:
    """Test where the config file lives."""

    def test_env_override(self, config_dir: Path) -> None:
        """JIRANAV_CONFIG_DIR points at the config directory."""
        assert get_config_dir() == config_dir
        assert get_config_path() == config_dir / "config.toml"

    def test_default_is_under_home(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Without the override the directory lives in the home directory."""
        monkeypatch.delenv("JIRANAV_CONFIG_DIR")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / ".jira-pbi-cli"


class TestLoadSave:
    """Test reading and writing the config file."""

    def test_missing_file(self) -> None:
        """No file means no config."""
        assert load_raw_config() == {}
        assert load_config() is None

    def test_round_trip(self, jira_config: JiraConfig) -> None:
        """A saved config loads back equal."""
        save_config(jira_config)
        assert load_config() == jira_config

    def test_file_is_owner_only(self, jira_config: JiraConfig) -> None:
        """The file holding tokens is readable by its owner only."""
        save_config(jira_config)
        mode = stat.S_IMODE(os.stat(get_config_path()).st_mode)
        assert mode == 0o600

    def test_creates_directory(self, config_dir: Path) -> None:
        """The config directory is created on first save."""
        assert not config_dir.exists()
        save_raw_config({"default_jql": "project = A"})
        assert config_dir.is_dir()

    def test_no_temp_files_left(
        self,
        config_dir: Path,
        jira_config: JiraConfig,
    ) -> None:
        """The atomic write leaves only the config file behind."""
        save_config(jira_config)
        save_config(jira_config)
        assert [p.name for p in config_dir.iterdir()] == ["config.toml"]

    def test_failed_write_keeps_previous_file(
        self,
        config_dir: Path,
        jira_config: JiraConfig,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """An error while writing leaves the old content in place."""
        save_config(jira_config)
        before = get_config_path().read_bytes()

        def explode(*_args: object, **_kwargs: object) -> None:
            msg = "disk full"
            raise OSError(msg)

        monkeypatch.setattr("jiranav.config.tomli_w.dump", explode)
        with pytest.raises(RuntimeError, match="disk full"):
            save_raw_config({"default_jql": "x"})

        assert get_config_path().read_bytes() == before
        assert [p.name for p in config_dir.iterdir()] == ["config.toml"]

    def test_corrupt_file_is_ignored(self, config_dir: Path) -> None:
        """An unparseable file reads as empty instead of crashing."""
        config_dir.mkdir(parents=True)
        get_config_path().write_text("this is = = not toml")
        assert load_raw_config() == {}
        assert load_config() is None

    def test_extra_keys_survive_save(self, jira_config: JiraConfig) -> None:
        """Keys the model does not know about are kept."""
        save_raw_config({"editor_hint": "vim"})
        save_config(jira_config)
        assert load_raw_config()["editor_hint"] == "vim"

    def test_cleared_preference_is_removed(self, jira_config: JiraConfig) -> None:
        """Saving a config with a preference unset drops it from the file."""
        save_config(jira_config)
        jira_config.default_jql = None
        save_config(jira_config)
        assert "default_jql" not in load_raw_config()

    def test_update_config(self, jira_config: JiraConfig) -> None:
        """update_config applies changes and persists them."""
        save_config(jira_config)
        updated = update_config(
            jira_config,
            last_used_prefix="fix",
            issue_view_mode=ViewMode.ALL,
        )

        assert updated.last_used_prefix == "fix"
        assert jira_config.last_used_prefix is None
        loaded = load_config()
        assert loaded is not None
        assert loaded.last_used_prefix == "fix"
        assert loaded.issue_view_mode is ViewMode.ALL

    def test_hand_written_file(self, config_dir: Path) -> None:
        """A file written by hand with a subset of keys loads."""
        config_dir.mkdir(parents=True)
        get_config_path().write_text(
            tomli_w.dumps({"client_id": "c", "cloud_id": "x", "expires_at": 5}),
        )
        config = load_config()
        assert config is not None
        assert config.is_complete()
        assert config.expires_at == 5
        assert config.issue_view_mode is None
