"""Per-invocation install context.

Resolves where a command installs (project root, scope, agents) and runs
the install for one skill, producing the install records to merge into
the index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from skillbox.agents import resolve_agent_list
from skillbox.config import SkillboxConfig
from skillbox.index import InstallRecord
from skillbox.install import (
    build_symlink_warnings,
    install_skill_to_targets,
    is_managed_install,
)
from skillbox.projects import (
    ProjectEntry,
    find_project,
    find_project_root,
    load_projects,
    save_projects,
    upsert_project,
)
from skillbox.targets import build_project_agent_paths, resolve_agent_targets

logger = logging.getLogger(__name__)


@dataclass
class ResolvedRuntime:
    project_root: Path
    scope: str
    agents: list[str]


@dataclass
class RuntimeInstallResult:
    installs: list[InstallRecord] = field(default_factory=list)
    scope: str = "user"
    warnings: list[str] = field(default_factory=list)


def resolve_runtime(
    config: SkillboxConfig,
    global_: bool = False,
    agents: str | None = None,
    cwd: Path | None = None,
) -> ResolvedRuntime:
    """Work out project root, scope and agents for the current command.

    ``--global`` forces the user scope; otherwise the configured default
    scope applies.
    """
    project_root = find_project_root(cwd or Path.cwd())
    scope = "user" if global_ else config.default_scope
    return ResolvedRuntime(
        project_root=project_root,
        scope=scope,
        agents=resolve_agent_list(agents, config.default_agents),
    )


def ensure_project_registered(project_root: Path, scope: str) -> ProjectEntry | None:
    """Register the project on first project-scope install.

    Returns:
        The project entry, or None for the user scope.
    """
    if scope != "project":
        return None

    root = str(project_root)
    projects = load_projects()
    entry = find_project(projects, root)
    if entry is None:
        projects = upsert_project(projects, root)
        save_projects(projects)
        logger.info(f"Registered project {root}")
        entry = find_project(projects, root)
    return entry


def install_skill_to_runtime(
    skill_name: str,
    runtime: ResolvedRuntime,
    config: SkillboxConfig,
    project: ProjectEntry | None = None,
) -> RuntimeInstallResult:
    """Install a canonical skill for every requested agent.

    Each directory is attempted once even if several agents share it. One
    install record is produced per agent that has directories in the
    scope, pointing at the agent's first directory. Records are kept for
    skipped attempts too; the warnings report what went wrong.
    """
    scope = runtime.scope
    paths = build_project_agent_paths(runtime.project_root, project)
    targets = resolve_agent_targets(paths, scope, runtime.agents)

    bases = [target.path for target in targets]
    results = install_skill_to_targets(skill_name, bases, config.install_mode)

    result = RuntimeInstallResult(scope=scope)
    for target, outcome in zip(targets, results):
        result.warnings.extend(build_symlink_warnings(target.agent, [outcome]))

    project_root = str(runtime.project_root) if scope == "project" else None
    for agent in runtime.agents:
        path_map = paths.get(agent)
        if path_map is None or not path_map.for_scope(scope):
            continue
        if any(install.agent == agent for install in result.installs):
            continue
        first = path_map.for_scope(scope)[0]
        result.installs.append(
            InstallRecord(
                scope=scope,
                agent=agent,
                path=str(first / skill_name),
                project_root=project_root,
            )
        )

    return result


def expand_install_paths(
    skill_name: str,
    installs: list[InstallRecord],
    home: Path | None = None,
) -> list[Path]:
    """Every directory a set of install records stands for.

    A record names the agent's first directory, but the install also
    landed in the agent's other directories for that scope. Those are
    re-resolved here and kept when they link into the store or hold a
    copy of the skill, so a fallback install is refreshed and removed
    together with the recorded one.
    """
    projects = None
    paths: list[Path] = []
    for install in installs:
        recorded = Path(install.path)
        if recorded not in paths:
            paths.append(recorded)

        if install.scope == "project":
            if not install.project_root:
                continue
            if projects is None:
                projects = load_projects()
            root = Path(install.project_root)
            project = find_project(projects, install.project_root)
        else:
            # user-scope directories do not depend on the root
            root = recorded.parent
            project = None

        path_map = build_project_agent_paths(root, project, home=home).get(install.agent)
        if path_map is None:
            continue
        for base in path_map.for_scope(install.scope):
            candidate = base / skill_name
            if candidate not in paths and is_managed_install(candidate, skill_name):
                paths.append(candidate)
    return paths
