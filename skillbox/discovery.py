"""Skill discovery on the local filesystem.

Finds skill directories (``<root>/<name>/SKILL.md``) in agent skill
directories, including ones Skillbox does not track yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from skillbox.agents import agent_paths, owning_agent
from skillbox.index import InstallRecord
from skillbox.store import SKILL_FILE

logger = logging.getLogger(__name__)


@dataclass
class DiscoveredSkill:
    """A skill directory found on disk (named after the directory)."""

    name: str
    skill_dir: Path
    skill_file: Path


@dataclass
class GlobalSkill:
    """A skill found in user-scope agent directories."""

    name: str
    installs: list[InstallRecord] = field(default_factory=list)


def discover_skills(roots: list[Path]) -> list[DiscoveredSkill]:
    """Scan each root for ``<name>/SKILL.md``; missing roots are skipped."""
    found: list[DiscoveredSkill] = []
    for root in roots:
        root = Path(root)
        if not root.is_dir():
            continue

        for skill_dir in sorted(root.iterdir()):
            if not skill_dir.is_dir():
                continue

            skill_file = skill_dir / SKILL_FILE
            if not skill_file.is_file():
                continue

            found.append(
                DiscoveredSkill(name=skill_dir.name, skill_dir=skill_dir, skill_file=skill_file)
            )
    return found


def discover_global_skills(
    agents: list[str],
    project_root: Path,
    home: Path | None = None,
) -> list[GlobalSkill]:
    """Discover skills in the user-scope directories of ``agents``.

    A skill present in several directories is returned once, with one
    user-scope install per distinct directory, attributed to the agent
    that owns the directory.
    """
    paths = agent_paths(project_root, home=home)
    by_name: dict[str, GlobalSkill] = {}

    for agent in agents:
        if agent not in paths:
            continue
        for skill in discover_skills(paths[agent].user):
            entry = by_name.setdefault(skill.name, GlobalSkill(name=skill.name))
            if any(install.path == str(skill.skill_dir) for install in entry.installs):
                continue
            owner = owning_agent(paths, "user", skill.skill_dir.parent) or agent
            entry.installs.append(
                InstallRecord(scope="user", agent=owner, path=str(skill.skill_dir))
            )

    logger.debug(f"Discovered {len(by_name)} user-scope skills")
    return list(by_name.values())
