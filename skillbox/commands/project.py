"""`skillbox project` - manage registered projects."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from skillbox.agents import ALL_AGENTS, agent_paths, owning_agent
from skillbox.discovery import discover_skills
from skillbox.errors import SkillboxError
from skillbox.index import (
    InstallRecord,
    SkillRecord,
    SkillSource,
    collect_project_skills,
    get_project_skills,
    load_index,
    save_index,
    select_installs,
    sort_index,
    upsert_skill,
)
from skillbox.install import copy_skill_to_install_paths
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.projects import (
    find_project,
    load_projects,
    parse_agent_path_overrides,
    save_projects,
    set_agent_paths,
    upsert_project,
)
from skillbox.runtime import expand_install_paths
from skillbox.store import import_skill_from_dir

logger = logging.getLogger(__name__)

# Agent recorded for skills in <root>/skills, a directory no agent owns
IMPORT_AGENT = "claude"


def project_skill_dirs(project_root: str) -> list[Path]:
    """``<root>/skills`` followed by every agent's project directories."""
    dirs = [Path(project_root) / "skills"]
    paths = agent_paths(Path(project_root))
    for agent in ALL_AGENTS:
        for path in paths[agent].project:
            if path not in dirs:
                dirs.append(path)
    return dirs


def import_project_skills(project_root: str) -> list[str]:
    """Adopt the skills found in a project as ``local`` project installs."""
    discovered = discover_skills(project_skill_dirs(project_root))
    if not discovered:
        return []

    paths = agent_paths(Path(project_root))

    index = load_index()
    imported: list[str] = []
    for found in discovered:
        metadata = import_skill_from_dir(found.skill_dir)
        if metadata is None:
            continue

        index = upsert_skill(
            index,
            SkillRecord(
                name=metadata["name"],
                source=SkillSource(type="local"),
                checksum=metadata["checksum"],
                updated_at=metadata["updatedAt"],
                installs=[
                    InstallRecord(
                        scope="project",
                        agent=owning_agent(paths, "project", found.skill_dir.parent)
                        or IMPORT_AGENT,
                        path=str(found.skill_dir),
                        project_root=project_root,
                    )
                ],
            ),
        )
        if metadata["name"] not in imported:
            imported.append(metadata["name"])

    if imported:
        save_index(sort_index(index))
    return imported


# ──────────────────────────────────────────────────────────
# Subcommands
# ──────────────────────────────────────────────────────────


def cmd_project_add(args: Any) -> int:
    """Register a project and import the skills it already has."""
    root = os.path.abspath(args.path)
    try:
        projects = upsert_project(load_projects(), root)
        overrides = parse_agent_path_overrides(args.agent_path or [], root)
        if overrides:
            projects = set_agent_paths(projects, root, overrides)
        save_projects(projects)
        skills = import_project_skills(root)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "project add", e)

    entry = find_project(projects, root)
    configured = (entry.agent_paths if entry else None) or {}

    if args.json:
        print_json(
            json_result(
                "project add",
                {"path": root, "agentPaths": configured, "skills": skills},
            )
        )
        return 0

    print_info(f"Project registered: {root}")
    if skills:
        print_info(f"Discovered {len(skills)} skill(s): {', '.join(skills)}")
    return 0


def cmd_project_list(args: Any) -> int:
    """List registered projects with their skills."""
    try:
        projects = load_projects()
        by_root = collect_project_skills(load_index().skills)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "project list", e)

    entries = [
        {**project.to_dict(), "skills": by_root.get(project.root, [])}
        for project in projects.projects
    ]

    if args.json:
        print_json(json_result("project list", {"projects": entries}))
        return 0

    print_info(f"Projects: {len(entries)}")
    for entry in entries:
        skills = entry["skills"]
        label = f" ({len(skills)} skills)" if skills else ""
        print_info(f"- {entry['root']}{label}")
        for name in skills:
            print_info(f"  - {name}")
    return 0


def cmd_project_inspect(args: Any) -> int:
    """Show one project's agent paths and skills."""
    root = os.path.abspath(args.path)
    try:
        project = find_project(load_projects(), root)
        if project is None:
            raise SkillboxError(f"Project not registered: {root}")
        skills = get_project_skills(load_index().skills, root)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "project inspect", e)

    configured = project.agent_paths or {}
    if args.json:
        print_json(
            json_result(
                "project inspect",
                {"root": project.root, "agentPaths": configured, "skills": skills},
            )
        )
        return 0

    print_info(f"Project: {project.root}")
    if configured:
        print_info("Agent paths:")
        for agent, paths in configured.items():
            print_info(f"- {agent}: {', '.join(paths)}")
    else:
        print_info("Agent paths: default")
    if skills:
        print_info("Skills:")
        for name in skills:
            print_info(f"- {name}")
    else:
        print_info("Skills: none")
    return 0


def cmd_project_sync(args: Any) -> int:
    """Re-copy the canonical skills into a project's recorded installs."""
    root = os.path.abspath(args.path)
    try:
        synced: list[str] = []
        for skill in load_index().skills:
            installs = select_installs(skill, root)
            if not installs:
                continue
            paths = expand_install_paths(skill.name, installs)
            copy_skill_to_install_paths(skill.name, paths)
            synced.append(skill.name)
        if not synced:
            raise SkillboxError(f"No skills recorded for project: {root}")
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "project sync", e)

    if args.json:
        print_json(
            json_result("project sync", {"root": root, "skills": sorted(synced)})
        )
        return 0

    print_info(f"Synced {len(synced)} skill(s) for {root}")
    return 0
