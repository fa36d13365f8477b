"""Configuration file handling for jiranav."""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from jiranav.constants import CONFIG_DIR_ENV, CONFIG_DIR_NAME, CONFIG_FILENAME
from jiranav.models import JiraConfig, config_to_dict, dict_to_config

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the directory holding the config file.

    ``$JIRANAV_CONFIG_DIR`` wins when set; otherwise ``~/.jira-pbi-cli``.

    Raises:
        RuntimeError: If the home directory cannot be determined.
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    try:
        home = Path.home()
    except RuntimeError as e:
        msg = (
            "Could not determine the user's home directory. "
            "Check your environment variables."
        )
        raise RuntimeError(msg) from e
    return home / CONFIG_DIR_NAME


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / CONFIG_FILENAME


def load_raw_config() -> dict[str, Any]:
    """Load the config file as a plain dictionary.

    Returns:
        Configuration dictionary, or empty dict if no readable config exists
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
        return {}


def save_raw_config(data: dict[str, Any]) -> None:
    """Write *data* to the config file atomically with owner-only permissions.

    The new content is written to a temporary file in the same directory,
    flushed to disk, and renamed over the target, so an interrupted write
    leaves the previous file intact.
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        dir=config_path.parent,
        delete=False,
        suffix=".toml",
    ) as tmp_file:
        tmp_path = Path(tmp_file.name)
        try:
            tomli_w.dump(data, tmp_file)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        except Exception as e:
            tmp_path.unlink(missing_ok=True)
            msg = f"Failed to write to temporary file: {e}"
            raise RuntimeError(msg) from e

    try:
        tmp_path.chmod(0o600)
        tmp_path.replace(config_path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        msg = f"Failed to write config file: {e}"
        raise RuntimeError(msg) from e
    logger.debug("Saved config to %s", config_path)


def load_config() -> JiraConfig | None:
    """Load the persisted configuration.

    Returns:
        The configuration, or None when no config file exists yet
    """
    data = load_raw_config()
    if not data:
        return None
    return dict_to_config(data)


def save_config(config: JiraConfig) -> None:
    """Persist *config*, keeping any extra keys already in the file."""
    data = load_raw_config()
    known = {f.name for f in dataclasses.fields(JiraConfig)}
    for key in known:
        data.pop(key, None)
    data.update(config_to_dict(config))
    save_raw_config(data)


def update_config(config: JiraConfig, **changes: Any) -> JiraConfig:
    """Return a copy of *config* with *changes* applied, and persist it."""
    updated = dataclasses.replace(config, **changes)
    save_config(updated)
    return updated
