"""
Centralized path management for Skillbox.

Provides functions to get the standard locations of the config root,
canonical skill store, and the JSON state files. The root can be
overridden via environment variables.
"""

import os
from pathlib import Path


def _resolve_path(env_var: str, default: Path) -> Path:
    """Resolve a path from an environment variable or fall back to a default.

    If the environment variable is set, its value is expanded
    (``~`` and ``$VAR`` substitution) and returned. Otherwise the
    *default* path is returned.

    Args:
        env_var: Name of the environment variable to check.
        default: Default path when the environment variable is unset.

    Returns:
        Resolved path.
    """
    env_path = os.environ.get(env_var)
    if env_path:
        return Path(os.path.expanduser(os.path.expandvars(env_path)))
    return default


def get_skillbox_root() -> Path:
    """Get the Skillbox config root.

    Override with SKILLBOX_HOME. Otherwise honours XDG_CONFIG_HOME and
    falls back to ~/.config/skillbox.
    """
    xdg = _resolve_path("XDG_CONFIG_HOME", Path.home() / ".config")
    return _resolve_path("SKILLBOX_HOME", xdg / "skillbox")


def get_skills_dir() -> Path:
    """Get the canonical skill store directory."""
    return get_skillbox_root() / "skills"


def get_index_path() -> Path:
    return get_skillbox_root() / "index.json"


def get_projects_path() -> Path:
    return get_skillbox_root() / "projects.json"


def get_config_path() -> Path:
    return get_skillbox_root() / "config.json"


def get_tmp_dir() -> Path:
    """Get the scratch directory used to spool ingest payloads."""
    return get_skillbox_root() / "tmp"


def get_log_dir() -> Path:
    return get_skillbox_root() / "logs"
