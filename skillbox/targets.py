"""Install target resolution.

Turns (project root, scope, agents, project overrides) into the ordered
list of base directories a skill should be installed into. Directories
shared by several agents appear only once.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from skillbox.agents import AgentPathMap, agent_paths
from skillbox.projects import ProjectEntry


@dataclass(frozen=True)
class AgentTarget:
    """A base directory and the first agent that claimed it."""

    agent: str
    path: Path


def build_project_agent_paths(
    project_root: Path,
    project: ProjectEntry | None = None,
    home: Path | None = None,
) -> dict[str, AgentPathMap]:
    """Catalog paths with the project's overrides applied.

    Overrides replace the project-scope list of an agent only; user-scope
    directories always come from the catalog.
    """
    paths = agent_paths(project_root, home=home)
    if project is None or not project.agent_paths:
        return paths

    for agent, overrides in project.agent_paths.items():
        if agent not in paths or not overrides:
            continue
        paths[agent] = AgentPathMap(
            user=paths[agent].user,
            project=[Path(p) for p in overrides],
        )
    return paths


def resolve_agent_targets(
    paths: dict[str, AgentPathMap],
    scope: str,
    agents: list[str],
) -> list[AgentTarget]:
    """Collect each agent's directories for ``scope``, first-seen wins.

    Agents are visited in the given order and their directories in catalog
    order. Unknown agents and agents without directories for the scope
    contribute nothing.
    """
    seen: set[Path] = set()
    targets: list[AgentTarget] = []
    for agent in agents:
        path_map = paths.get(agent)
        if path_map is None:
            continue
        for path in path_map.for_scope(scope):
            if path in seen:
                continue
            seen.add(path)
            targets.append(AgentTarget(agent=agent, path=path))
    return targets


def resolve_targets(
    project_root: Path,
    scope: str,
    agents: list[str],
    project: ProjectEntry | None = None,
    home: Path | None = None,
) -> list[Path]:
    """Return the de-duplicated base directories for an install."""
    paths = build_project_agent_paths(project_root, project, home=home)
    return [target.path for target in resolve_agent_targets(paths, scope, agents)]
