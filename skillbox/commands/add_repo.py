"""`skillbox add <repo>` - batch install of the skills in a GitHub repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from skillbox.commands.shared import install_and_record, load_command_config, plural
from skillbox.errors import RepoRefError, SkillboxError
from skillbox.frontmatter import build_metadata, parse_skill_markdown
from skillbox.github import parse_repo_ref
from skillbox.index import SkillSource, load_index, save_index, sort_index
from skillbox.output import (
    json_result,
    print_info,
    print_json,
    print_progress_result,
    print_warning,
    spinner,
)
from skillbox.repo_skills import RepoSkill, fetch_repo_file, list_repo_skills, write_repo_skill_directory
from skillbox.store import write_skill_metadata

logger = logging.getLogger(__name__)


@dataclass
class RepoInstallSummary:
    installed: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "installed": self.installed,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def select_skills(skills: list[RepoSkill], selections: list[str] | None) -> list[RepoSkill]:
    """Keep the skills named by ``--skill`` (all when none given)."""
    if not selections:
        return sorted(skills, key=lambda s: s.name)
    wanted = set(selections)
    return sorted((s for s in skills if s.name in wanted), key=lambda s: s.name)


def handle_repo_install(args: Any) -> int:
    ref = parse_repo_ref(args.input)
    if ref is None:
        raise RepoRefError("Unsupported repo URL or shorthand.")

    ref, skills = list_repo_skills(ref)
    names = sorted(skill.name for skill in skills)

    if args.list:
        if args.json:
            print_json(json_result("add", {"repo": ref.slug, "skills": names}))
            return 0
        print_info(f"Repo Skills: {ref.slug}")
        print_info()
        print_info(f"Found {plural(len(names), 'skill')}:")
        for name in names:
            print_info(f"  - {name}")
        return 0

    selected = select_skills(skills, args.skill)
    if not selected:
        raise SkillboxError("No matching skills found. Use --list to see available skills.")

    config = load_command_config(args.json)
    show_progress = not args.json
    index = load_index()
    summary = RepoInstallSummary()
    total = len(selected)

    if show_progress:
        print_info(f"Adding {plural(total, 'skill')} from {ref.slug}...")
        print_info()

    for position, skill in enumerate(selected, start=1):
        already_indexed = index.find(skill.name) is not None
        try:
            with spinner(f"{skill.name} ({position}/{total})", enabled=show_progress):
                markdown = fetch_repo_file(ref, skill.skill_file)
                parsed = parse_skill_markdown(markdown)
                if not parsed.description:
                    summary.skipped.append(skill.name)
                    if show_progress:
                        print_progress_result(skill.name, "skipped", "missing description")
                    continue

                write_repo_skill_directory(ref, skill, skill.name)
                source = SkillSource(
                    type="git", repo=ref.slug, path=skill.path or None, ref=ref.ref
                )
                metadata = build_metadata(parsed, source, skill.name)
                write_skill_metadata(skill.name, metadata)

                index, result = install_and_record(
                    index, skill.name, source, metadata, args, config
                )
        except (SkillboxError, OSError) as e:
            logger.warning(f"Failed to add {skill.name}: {e}")
            summary.failed.append({"name": skill.name, "reason": str(e)})
            if show_progress:
                print_progress_result(skill.name, "failed", str(e))
            continue

        if already_indexed:
            summary.updated.append(skill.name)
        else:
            summary.installed.append(skill.name)
        if show_progress:
            print_progress_result(skill.name, "ok", "updated" if already_indexed else None)
            for warning in result.warnings:
                print_warning(warning)

    save_index(sort_index(index))

    if args.json:
        print_json(json_result("add", {"repo": ref.slug, **summary.to_dict()}))
        return 0

    added = len(summary.installed) + len(summary.updated)
    failed = len(summary.failed)
    skipped = len(summary.skipped)
    print_info()
    if added and not failed and not skipped:
        print_info(f"Added {plural(added, 'skill')} from {ref.slug}.")
    elif added:
        parts = []
        if failed:
            parts.append(f"{failed} failed")
        if skipped:
            parts.append(f"{skipped} skipped")
        print_info(f"Added {plural(added, 'skill')} ({', '.join(parts)}).")
    else:
        print_info("No skills were added.")
    return 0
