"""Agent path catalog.

Maps every supported agent to the directories it reads skills from, for
both the user scope (under the home directory) and the project scope
(under a project root). Several agents fall back to a ``.claude/skills``
directory, so one physical directory can be shared by multiple agents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

ALL_AGENTS: list[str] = ["opencode", "claude", "cursor", "codex", "amp", "antigravity"]

_AGENT_SET = frozenset(ALL_AGENTS)

# Agent → (user-scope dirs relative to home, project-scope dirs relative to root)
_CATALOG: dict[str, tuple[list[str], list[str]]] = {
    "opencode": (
        [".config/opencode/skills", ".claude/skills"],
        [".opencode/skills", ".claude/skills"],
    ),
    "claude": ([".claude/skills"], [".claude/skills"]),
    "cursor": (
        [".cursor/skills", ".claude/skills"],
        [".cursor/skills", ".claude/skills"],
    ),
    "codex": ([".codex/skills"], [".codex/skills"]),
    "amp": (
        [".config/agents/skills", ".claude/skills"],
        [".agents/skills", ".claude/skills"],
    ),
    "antigravity": ([".gemini/antigravity/skills"], [".agent/skills"]),
}

# Agent → config roots whose presence means the agent is installed
_AGENT_ROOTS: dict[str, list[str]] = {
    "opencode": [".config/opencode"],
    "claude": [".claude"],
    "cursor": [".cursor"],
    "codex": [".codex"],
    "amp": [".config/agents"],
    "antigravity": [".gemini/antigravity"],
}


@dataclass
class AgentPathMap:
    """Candidate skill directories of one agent, per scope."""

    user: list[Path] = field(default_factory=list)
    project: list[Path] = field(default_factory=list)

    def for_scope(self, scope: str) -> list[Path]:
        return self.user if scope == "user" else self.project


def agent_paths(project_root: Path, home: Path | None = None) -> dict[str, AgentPathMap]:
    """Build the default path catalog for a project root.

    Args:
        project_root: Root used for project-scope directories.
        home: Home directory for user-scope directories. Defaults to Path.home().

    Returns:
        Dict mapping agent id → AgentPathMap, in ALL_AGENTS order.
    """
    home = home or Path.home()
    return {
        agent: AgentPathMap(
            user=[home / rel for rel in user_rel],
            project=[project_root / rel for rel in project_rel],
        )
        for agent, (user_rel, project_rel) in _CATALOG.items()
    }


def owning_agent(
    paths: dict[str, AgentPathMap], scope: str, directory: Path
) -> str | None:
    """The first agent whose primary directory for ``scope`` is ``directory``.

    Fallback directories are shared, so an agent only owns the directory
    listed first for it.
    """
    for agent in ALL_AGENTS:
        path_map = paths.get(agent)
        if path_map is not None and path_map.for_scope(scope)[:1] == [directory]:
            return agent
    return None

def is_agent_id(value: str) -> bool:
    return value in _AGENT_SET


def parse_agent_list(value: str | None) -> list[str]:
    """Parse a comma-separated agent list, dropping blanks and unknown ids."""
    if not value:
        return []

    agents: list[str] = []
    for raw in value.split(","):
        agent = raw.strip()
        if not agent:
            continue
        if not is_agent_id(agent):
            logger.warning(f"Ignoring unknown agent '{agent}'")
            continue
        agents.append(agent)
    return agents


def resolve_agent_list(override: str | None, default_agents: list[str]) -> list[str]:
    """Pick the agents for a command.

    An explicit ``--agents`` override wins, then the configured default
    agents, then every known agent.
    """
    parsed = parse_agent_list(override)
    if parsed:
        return parsed

    configured = [agent for agent in default_agents if is_agent_id(agent)]
    if configured:
        return configured

    return list(ALL_AGENTS)


def detect_agents(home: Path | None = None) -> list[str]:
    """Return agents whose config root exists under the home directory."""
    home = home or Path.home()
    return [
        agent
        for agent in ALL_AGENTS
        if any((home / root).exists() for root in _AGENT_ROOTS[agent])
    ]
