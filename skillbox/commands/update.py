"""`skillbox update` - refresh url and git skills from their source."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from skillbox.commands.shared import plural
from skillbox.config import SkillboxConfig, load_config
from skillbox.errors import SkillboxError, SkillNotFoundError
from skillbox.fetcher import fetch_text
from skillbox.frontmatter import build_metadata, parse_skill_markdown
from skillbox.grouping import group_and_sort
from skillbox.index import (
    SkillIndex,
    SkillRecord,
    SkillSource,
    load_index,
    save_index,
    select_installs,
    sort_index,
    upsert_skill,
)
from skillbox.install import install_skill_to_targets
from skillbox.output import (
    handle_command_error,
    json_result,
    print_info,
    print_json,
    print_progress_result,
    spinner,
)
from skillbox.repo_skills import (
    fetch_repo_file,
    normalize_repo_ref,
    skill_from_source,
    write_repo_skill_directory,
)
from skillbox.runtime import expand_install_paths
from skillbox.store import ensure_skills_dir, write_skill_files, write_skill_metadata
from skillbox.utils import utc_now_iso

logger = logging.getLogger(__name__)

# Trackable sources first
UPDATE_SOURCE_ORDER = ["url", "git", "local"]


@dataclass
class UpdateResult:
    name: str
    source: str
    status: str  # updated | failed | skipped
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "source": self.source,
            "status": self.status,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


def group_by_source(results: list[UpdateResult]) -> list[dict[str, Any]]:
    return [
        {
            "source": source,
            "results": [r.to_dict() for r in items],
            "updatedCount": sum(1 for r in items if r.status == "updated"),
            "failedCount": sum(1 for r in items if r.status == "failed"),
        }
        for source, items in group_and_sort(
            results, lambda r: r.source, UPDATE_SOURCE_ORDER, lambda r: r.name
        )
    ]


def _reinstall(
    skill: SkillRecord, project_root: str | None, config: SkillboxConfig
) -> None:
    paths = expand_install_paths(skill.name, select_installs(skill, project_root))
    bases = list(dict.fromkeys(path.parent for path in paths))
    if bases:
        install_skill_to_targets(skill.name, bases, config.install_mode)


def _record_sync(
    index: SkillIndex, skill: SkillRecord, source: SkillSource, metadata: dict[str, Any]
) -> SkillIndex:
    return upsert_skill(
        index,
        SkillRecord(
            name=skill.name,
            source=source,
            checksum=metadata["checksum"],
            updated_at=metadata["updatedAt"],
            last_sync=utc_now_iso(),
        ),
    )


def update_url_skill(
    index: SkillIndex,
    skill: SkillRecord,
    project_root: str | None,
    config: SkillboxConfig,
) -> SkillIndex:
    """Re-download a url skill, rewrite it and refresh its installs."""
    url = skill.source.url if skill.source else None
    if not url:
        raise SkillboxError(f"Skill {skill.name} has no source url.")

    markdown = fetch_text(url)
    parsed = parse_skill_markdown(markdown)
    if not parsed.description:
        raise SkillboxError(f"Skill {skill.name} is missing a description after update.")

    source = SkillSource(type="url", url=url)
    metadata = build_metadata(parsed, source, skill.name)
    write_skill_files(skill.name, markdown, metadata)
    _reinstall(skill, project_root, config)
    return _record_sync(index, skill, source, metadata)


def update_git_skill(
    index: SkillIndex,
    skill: SkillRecord,
    project_root: str | None,
    config: SkillboxConfig,
) -> SkillIndex:
    """Re-download a git skill directory and refresh its installs."""
    located = skill_from_source(skill.source) if skill.source else None
    if located is None:
        raise SkillboxError(f"Skill {skill.name} has no usable source repo.")

    ref, repo_skill = located
    ref = normalize_repo_ref(ref)
    markdown = fetch_repo_file(ref, repo_skill.skill_file)
    parsed = parse_skill_markdown(markdown)
    if not parsed.description:
        raise SkillboxError(f"Skill {skill.name} is missing a description after update.")

    write_repo_skill_directory(ref, repo_skill, skill.name)
    source = SkillSource(
        type="git",
        repo=skill.source.repo,
        path=repo_skill.path or None,
        ref=ref.ref,
    )
    metadata = build_metadata(parsed, source, skill.name)
    write_skill_metadata(skill.name, metadata)
    _reinstall(skill, project_root, config)
    return _record_sync(index, skill, source, metadata)


_UPDATERS = {
    "url": update_url_skill,
    "git": update_git_skill,
}


def cmd_update(args: Any) -> int:
    """Update one skill (or all) from its recorded source."""
    try:
        index = load_index()
        if args.name:
            targets = [skill for skill in index.skills if skill.name == args.name]
            if not targets:
                raise SkillNotFoundError(args.name)
        else:
            targets = list(index.skills)

        ensure_skills_dir()
        config = load_config()
        project_root = os.path.abspath(args.project) if args.project else None
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "update", e)

    show_progress = not args.json
    results: list[UpdateResult] = []
    total = len(targets)

    if show_progress and total:
        print_info(f"Updating {plural(total, 'skill')}...")
        print_info()

    for position, skill in enumerate(targets, start=1):
        source_type = skill.source.type if skill.source else "local"
        updater = _UPDATERS.get(source_type)
        if updater is None:
            results.append(UpdateResult(skill.name, source_type, "skipped"))
            if show_progress:
                print_progress_result(skill.name, "skipped")
            continue

        try:
            with spinner(f"{skill.name} ({position}/{total})", enabled=show_progress):
                index = updater(index, skill, project_root, config)
        except (SkillboxError, OSError) as e:
            logger.warning(f"Update of {skill.name} failed: {e}")
            results.append(UpdateResult(skill.name, source_type, "failed", str(e)))
            if show_progress:
                print_progress_result(skill.name, "failed", str(e))
            continue

        results.append(UpdateResult(skill.name, source_type, "updated"))
        if show_progress:
            print_progress_result(skill.name, "ok")

    try:
        save_index(sort_index(index))
    except OSError as e:
        return handle_command_error(args.json, "update", e)

    updated = sum(1 for r in results if r.status == "updated")
    failed = sum(1 for r in results if r.status == "failed")
    skipped = sum(1 for r in results if r.status == "skipped")
    trackable = sum(1 for r in results if r.source in _UPDATERS)

    if args.json:
        print_json(
            json_result(
                "update",
                {
                    "name": args.name,
                    "project": project_root,
                    "total": len(results),
                    "updated": updated,
                    "failed": failed,
                    "skipped": skipped,
                    "results": [r.to_dict() for r in results],
                    "bySource": group_by_source(results),
                },
            )
        )
        return 0

    if not results:
        print_info("No skills to update.")
        return 0

    print_info()
    if failed:
        print_info(
            f"Updated {updated} of {plural(trackable, 'trackable skill')} ({failed} failed)."
        )
    elif updated:
        print_info(f"Updated {updated} of {plural(trackable, 'trackable skill')}.")
    elif skipped and not trackable:
        print_info("No trackable skills to update.")
    return 0
