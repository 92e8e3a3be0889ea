"""
Skillbox Configuration

Loads and saves the process-wide settings stored in ``config.json``
under the Skillbox root. The loaded ``SkillboxConfig`` is an explicit
value: command handlers load it once and pass it on to the target
resolver and install engine.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from skillbox.errors import SkillboxError
from skillbox.paths import get_config_path, get_tmp_dir
from skillbox.utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1

VALID_SCOPES = ("project", "user")
VALID_INSTALL_MODES = ("symlink", "copy")


def default_install_mode() -> str:
    """Symlinks need extra privileges on Windows, so copy there."""
    return "copy" if sys.platform == "win32" else "symlink"


@dataclass
class SkillboxConfig:
    """Skillbox settings container."""

    default_agents: list[str] = field(default_factory=list)
    default_scope: str = "user"
    install_mode: str = field(default_factory=default_install_mode)
    version: int = CONFIG_VERSION

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillboxConfig:
        """Build a config from its JSON form, default-filling bad fields."""
        config = cls()

        agents = data.get("defaultAgents", [])
        if isinstance(agents, list):
            config.default_agents = [a for a in agents if isinstance(a, str)]
        else:
            logger.warning("Config defaultAgents is not a list, using []")

        scope = data.get("defaultScope", config.default_scope)
        if scope in VALID_SCOPES:
            config.default_scope = scope
        else:
            logger.warning(f"Config defaultScope '{scope}' is invalid, using 'user'")

        mode = data.get("installMode", config.install_mode)
        if mode in VALID_INSTALL_MODES:
            config.install_mode = mode
        else:
            logger.warning(
                f"Config installMode '{mode}' is invalid, using '{config.install_mode}'"
            )

        return config

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "defaultAgents": list(self.default_agents),
            "defaultScope": self.default_scope,
            "installMode": self.install_mode,
        }


def load_config(path: Path | None = None) -> SkillboxConfig:
    """Load config.json, returning defaults when it does not exist.

    Raises:
        SkillboxError: If the file is not valid JSON or not an object.
    """
    path = path or get_config_path()
    data = read_json_file(path)
    if data is None:
        return SkillboxConfig()
    if not isinstance(data, dict):
        raise SkillboxError(f"Invalid config file: {path}")
    return SkillboxConfig.from_dict(data)


def save_config(config: SkillboxConfig, path: Path | None = None) -> None:
    path = path or get_config_path()
    get_tmp_dir().mkdir(parents=True, exist_ok=True)
    write_json_file(path, config.to_dict())
    logger.info(f"Saved config to {path}")


def update_config(
    config: SkillboxConfig,
    default_agents: list[str] | None = None,
    add_agents: list[str] | None = None,
    default_scope: str | None = None,
    install_mode: str | None = None,
) -> SkillboxConfig:
    """Return a new config with the given changes applied.

    ``default_agents`` replaces the agent list, ``add_agents`` appends to it;
    the result is de-duplicated preserving first-seen order.

    Raises:
        SkillboxError: If the scope or install mode is not a valid value.
    """
    next_scope = default_scope if default_scope is not None else config.default_scope
    if next_scope not in VALID_SCOPES:
        raise SkillboxError("defaultScope must be 'project' or 'user'.")

    next_mode = install_mode if install_mode is not None else config.install_mode
    if next_mode not in VALID_INSTALL_MODES:
        raise SkillboxError("installMode must be 'symlink' or 'copy'.")

    base_agents = default_agents if default_agents is not None else config.default_agents
    merged: list[str] = []
    for agent in [*base_agents, *(add_agents or [])]:
        if agent and agent not in merged:
            merged.append(agent)

    return SkillboxConfig(
        default_agents=merged,
        default_scope=next_scope,
        install_mode=next_mode,
        version=config.version,
    )
