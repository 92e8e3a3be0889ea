"""`skillbox list` - show indexed and discovered skills."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

from skillbox.config import load_config
from skillbox.discovery import discover_global_skills
from skillbox.errors import SkillboxError
from skillbox.grouping import LIST_SOURCE_ORDER, group_and_sort
from skillbox.index import SkillRecord, SkillSource, load_index
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.runtime import resolve_runtime
from skillbox.store import list_subcommands

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ListedSkill:
    """A skill as shown by ``list``, with its detected subcommands."""

    record: SkillRecord
    subcommands: list[str]

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def source_type(self) -> str:
        return self.record.source.type if self.record.source else "local"

    def to_dict(self) -> dict[str, Any]:
        return {**self.record.to_dict(), "subcommands": self.subcommands}


def _with_subcommands(skill: SkillRecord) -> ListedSkill:
    installs = skill.installs or []
    subcommands = list_subcommands(Path(installs[0].path)) if installs else []
    return ListedSkill(record=skill, subcommands=subcommands)


def filter_by_agents(skills: list[SkillRecord], agents: list[str]) -> list[SkillRecord]:
    wanted = set(agents)
    return [
        skill
        for skill in skills
        if any(install.agent in wanted for install in skill.installs or [])
    ]


def limit_to_user_scope(skills: list[SkillRecord]) -> list[SkillRecord]:
    """Keep skills installed in the user scope, with only those installs."""
    limited = []
    for skill in skills:
        user_installs = [i for i in skill.installs or [] if i.scope == "user"]
        if user_installs:
            limited.append(dataclasses.replace(skill, installs=user_installs))
    return limited


def collect_skills(
    indexed: list[SkillRecord],
    agents: list[str],
    project_root: Path,
    filter_agents: bool = False,
    global_only: bool = False,
) -> list[ListedSkill]:
    """Indexed skills plus untracked skills found in user agent directories."""
    known = {skill.name for skill in indexed}
    untracked = [
        SkillRecord(name=found.name, source=SkillSource(type="local"), installs=found.installs)
        for found in discover_global_skills(agents, project_root)
        if found.name not in known
    ]

    skills = filter_by_agents(indexed, agents) if filter_agents else list(indexed)
    skills.extend(untracked)
    if global_only:
        skills = limit_to_user_scope(skills)
    return [_with_subcommands(skill) for skill in skills]


# ──────────────────────────────────────────────────────────
# Human output
# ──────────────────────────────────────────────────────────


def _by_source(skills: list[ListedSkill]) -> list[tuple[str, list[ListedSkill]]]:
    return group_and_sort(
        skills, lambda s: s.source_type, LIST_SOURCE_ORDER, lambda s: s.name
    )


def _print_skill(skill: ListedSkill, indent: str) -> None:
    print_info(f"{indent}{skill.name}")
    if skill.subcommands:
        print_info(f"{indent}  → {', '.join(skill.subcommands)}")


def print_grouped(skills: list[ListedSkill]) -> None:
    """Print skills grouped by scope, project root and source type.

    A skill with both user and project installs appears in both groups;
    a skill without installs counts as global.
    """
    global_skills: list[ListedSkill] = []
    by_project: dict[str, list[ListedSkill]] = {}
    project_count = 0

    for skill in skills:
        installs = skill.record.installs or []
        roots = []
        for install in installs:
            if install.scope == "project" and install.project_root:
                if install.project_root not in roots:
                    roots.append(install.project_root)
        has_project = any(i.scope == "project" for i in installs)
        has_user = any(i.scope == "user" for i in installs)

        if has_project:
            project_count += 1
            for root in roots:
                by_project.setdefault(root, []).append(skill)
        if has_user or not installs:
            global_skills.append(skill)

    printed = False
    if global_skills:
        print_info(f"Global Skills ({len(global_skills)})")
        for source, items in _by_source(global_skills):
            print_info()
            print_info(source)
            for skill in items:
                _print_skill(skill, "  ")
        printed = True

    if project_count:
        if printed:
            print_info()
        print_info(f"Project Skills ({project_count})")
        for root in sorted(by_project):
            print_info()
            print_info(root)
            for source, items in _by_source(by_project[root]):
                print_info(f"  {source}")
                for skill in items:
                    _print_skill(skill, "    ")


def cmd_list(args: Any) -> int:
    """List skills."""
    try:
        runtime = resolve_runtime(load_config(), global_=args.global_, agents=args.agents)
        skills = collect_skills(
            load_index().skills,
            runtime.agents,
            runtime.project_root,
            filter_agents=bool(args.agents),
            global_only=args.global_,
        )
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "list", e)

    if args.json:
        print_json(json_result("list", {"skills": [skill.to_dict() for skill in skills]}))
        return 0

    if not skills:
        if args.agents:
            print_info(f"No skills found for agent(s): {', '.join(runtime.agents)}")
        else:
            print_info("No skills installed.")
        return 0

    print_grouped(skills)
    return 0
