"""Project registry.

``projects.json`` lists the project roots Skillbox knows about, each with
optional per-agent overrides of the project-scope skill directories.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from skillbox.agents import is_agent_id
from skillbox.errors import SkillboxError
from skillbox.paths import get_projects_path
from skillbox.utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

PROJECTS_VERSION = 1


@dataclass
class ProjectEntry:
    """A registered project root and its agent path overrides."""

    root: str
    agent_paths: dict[str, list[str]] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectEntry:
        raw_paths = data.get("agentPaths")
        agent_paths: dict[str, list[str]] | None = None
        if isinstance(raw_paths, dict):
            agent_paths = {
                agent: [p for p in paths if isinstance(p, str)]
                for agent, paths in raw_paths.items()
                if isinstance(paths, list)
            }
        return cls(root=data["root"], agent_paths=agent_paths)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"root": self.root}
        if self.agent_paths is not None:
            result["agentPaths"] = {k: list(v) for k, v in self.agent_paths.items()}
        return result


@dataclass
class ProjectIndex:
    """In-memory form of projects.json."""

    projects: list[ProjectEntry] = field(default_factory=list)
    version: int = PROJECTS_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "projects": [project.to_dict() for project in self.projects],
        }


def load_projects(path: Path | None = None) -> ProjectIndex:
    """Load projects.json, returning an empty registry when missing.

    Entries without a string ``root`` are dropped with a warning.
    """
    path = path or get_projects_path()
    data = read_json_file(path)
    if data is None:
        return ProjectIndex()
    if not isinstance(data, dict):
        raise SkillboxError(f"Invalid projects file: {path}")

    projects: list[ProjectEntry] = []
    raw_projects = data.get("projects")
    for raw in raw_projects if isinstance(raw_projects, list) else []:
        if not isinstance(raw, dict) or not isinstance(raw.get("root"), str):
            logger.warning(f"Dropping malformed project entry: {raw!r}")
            continue
        if any(p.root == raw["root"] for p in projects):
            continue
        projects.append(ProjectEntry.from_dict(raw))

    return ProjectIndex(projects=projects)


def save_projects(index: ProjectIndex, path: Path | None = None) -> None:
    path = path or get_projects_path()
    write_json_file(path, index.to_dict())
    logger.debug(f"Saved {len(index.projects)} projects")


def find_project(index: ProjectIndex, root: str) -> ProjectEntry | None:
    for project in index.projects:
        if project.root == root:
            return project
    return None


def upsert_project(index: ProjectIndex, root: str) -> ProjectIndex:
    """Register a root; an already-registered root is left unchanged."""
    if find_project(index, root) is not None:
        return index
    return ProjectIndex(
        projects=[*index.projects, ProjectEntry(root=root)],
        version=index.version,
    )


def set_agent_paths(
    index: ProjectIndex, root: str, overrides: dict[str, list[str]]
) -> ProjectIndex:
    """Apply agent path overrides to a registered project.

    Each overridden agent's list is replaced; other agents keep theirs.
    """
    projects: list[ProjectEntry] = []
    for project in index.projects:
        if project.root == root:
            merged = dict(project.agent_paths or {})
            merged.update(overrides)
            project = ProjectEntry(root=project.root, agent_paths=merged)
        projects.append(project)
    return ProjectIndex(projects=projects, version=index.version)


def parse_agent_path_overrides(entries: list[str], project_root: str) -> dict[str, list[str]]:
    """Parse ``agent=path`` pairs from ``--agent-path``.

    Relative paths are resolved against the project root. Malformed
    entries and unknown agents are ignored with a warning; repeating an
    agent appends to its list.
    """
    overrides: dict[str, list[str]] = {}
    for entry in entries:
        agent, sep, value = entry.partition("=")
        agent, value = agent.strip(), value.strip()
        if not sep or not agent or not value:
            logger.warning(f"Ignoring malformed agent path '{entry}' (expected agent=path)")
            continue
        if not is_agent_id(agent):
            logger.warning(f"Ignoring agent path for unknown agent '{agent}'")
            continue
        resolved = os.path.normpath(os.path.join(project_root, os.path.expanduser(value)))
        overrides.setdefault(agent, []).append(resolved)
    return overrides


def find_project_root(start: Path) -> Path:
    """Return the nearest ancestor of ``start`` containing ``.git``.

    Falls back to ``start`` itself when no repository is found.
    """
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return start
