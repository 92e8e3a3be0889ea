"""`skillbox remove` - delete a skill or one project's installs of it."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from skillbox.errors import SkillboxError, SkillNotFoundError
from skillbox.index import (
    InstallRecord,
    SkillIndex,
    load_index,
    save_index,
    select_installs,
    sort_index,
)
from skillbox.install import remove_install_path
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.runtime import expand_install_paths
from skillbox.store import remove_skill

logger = logging.getLogger(__name__)


def _in_project(install: InstallRecord, project_root: str) -> bool:
    return install.scope == "project" and install.project_root == project_root


def remove_skill_installs(
    index: SkillIndex, name: str, project_root: str | None = None
) -> tuple[SkillIndex, list[str], bool]:
    """Remove a skill's installs and, without a project, the skill itself.

    Returns:
        The new index, the removed install paths, and whether the
        canonical directory was removed.

    Raises:
        SkillNotFoundError: If the skill is not indexed.
        SkillboxError: If ``project_root`` has no installs of the skill.
    """
    skill = index.find(name)
    if skill is None:
        raise SkillNotFoundError(name)

    installs = skill.installs or []
    to_remove = select_installs(skill, project_root)
    if project_root is not None and not to_remove:
        raise SkillboxError(f"No installs found for {name} in {project_root}.")

    paths = expand_install_paths(name, to_remove)
    for path in paths:
        remove_install_path(path)
    removed = [str(path) for path in paths]

    if project_root is not None:
        remaining = [i for i in installs if not _in_project(i, project_root)]
        skills = [
            dataclasses.replace(entry, installs=remaining or None)
            if entry.name == name
            else entry
            for entry in index.skills
        ]
        return SkillIndex(skills=skills, version=index.version), removed, False

    skills = [entry for entry in index.skills if entry.name != name]
    remove_skill(name)
    return SkillIndex(skills=skills, version=index.version), removed, True


def cmd_remove(args: Any) -> int:
    """Remove a skill."""
    project_root = os.path.abspath(args.project) if args.project else None
    try:
        index, removed, removed_canonical = remove_skill_installs(
            load_index(), args.name, project_root
        )
        save_index(sort_index(index))
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "remove", e)

    if args.json:
        print_json(
            json_result(
                "remove",
                {
                    "name": args.name,
                    "project": project_root,
                    "removed": removed,
                    "removedCanonical": removed_canonical,
                },
            )
        )
        return 0

    if project_root:
        print_info(f"Removed {len(removed)} install(s) for {args.name} in {project_root}.")
    else:
        print_info(f"Removed {args.name} and {len(removed)} install(s).")
    return 0
