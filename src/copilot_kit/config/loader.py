"""
Configuration loader for copilot_kit.

Settings are read from up to two JSON files, each optional:

1. ``~/.copilot_kit/config.json`` (user level)
2. ``<project_root>/.copilot/config.json`` (project level, wins over user)

Keys that are not set anywhere take their value from
:data:`DEFAULT_CONFIG`. A file that exists but is malformed, or that
contains a value of the wrong type, raises :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from copilot_kit.pm.package_manager import SUPPORTED_PMS


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_DIR = ".copilot"

DEFAULT_CONFIG: Dict[str, Any] = {
    "skills_dir": ".copilot/skills",
    "default_range": "HEAD",
    "max_commits": 10,
    "package_manager": None,
    "budget": 1.0,
}


class ConfigError(Exception):
    """Raised when a configuration file is malformed or invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the user-level configuration directory (``~/.copilot_kit``)."""
    return Path.home() / ".copilot_kit"


def _config_paths(project_root: Optional[Path]) -> List[Path]:
    """Return candidate config files, lowest precedence first."""
    paths = [_get_config_directory() / CONFIG_FILENAME]
    if project_root is not None:
        paths.append(Path(project_root) / PROJECT_CONFIG_DIR / CONFIG_FILENAME)
    return paths


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")
    return data


def _validate(data: Dict[str, Any], source: Path) -> None:
    """Check the types of the recognised keys present in ``data``."""
    for key in ("skills_dir", "default_range"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string ({source})")

    pm = data.get("package_manager")
    if pm is not None and pm not in SUPPORTED_PMS:
        raise ConfigError(
            f"'package_manager' must be one of {', '.join(SUPPORTED_PMS)} ({source})"
        )

    if "budget" in data:
        budget = data["budget"]
        # bool is an int subclass; reject it explicitly
        if isinstance(budget, bool) or not isinstance(budget, (int, float)) or budget <= 0:
            raise ConfigError(f"'budget' must be a positive number ({source})")

    if "max_commits" in data:
        max_commits = data["max_commits"]
        if isinstance(max_commits, bool) or not isinstance(max_commits, int) or max_commits <= 0:
            raise ConfigError(f"'max_commits' must be a positive integer ({source})")


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load and merge the user and project configuration files.

    Args:
        project_root: Project directory whose ``.copilot/config.json`` is
            merged over the user-level file. If None, only the user-level
            file is consulted.

    Returns:
        A dictionary with every key of :data:`DEFAULT_CONFIG`:
        - skills_dir (str): Output base directory for new skills
        - default_range (str): Commit range used when none is given
        - max_commits (int): Cap on commits read from ``default_range``
        - package_manager (str|None): Forced package manager, if any
        - budget (int|float): USD budget for token estimates

    Raises:
        ConfigError: If a configuration file exists but is invalid.
    """
    config: Dict[str, Any] = dict(DEFAULT_CONFIG)

    for config_path in _config_paths(project_root):
        if not config_path.exists():
            logger.debug("No configuration file at: %s", config_path)
            continue
        data = _read_config_file(config_path)
        _validate(data, config_path)
        unknown = sorted(set(data) - set(DEFAULT_CONFIG))
        if unknown:
            logger.warning("Ignoring unknown configuration keys in %s: %s", config_path, unknown)
        config.update({key: value for key, value in data.items() if key in DEFAULT_CONFIG})
        logger.debug("Loaded configuration from: %s", config_path)

    logger.debug("Configuration data: %s", config)
    return config
