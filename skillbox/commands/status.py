"""`skillbox status` - compare indexed skills with their remote source."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from skillbox.commands.shared import plural
from skillbox.errors import SkillboxError
from skillbox.fetcher import fetch_text
from skillbox.frontmatter import hash_content
from skillbox.github import build_raw_url
from skillbox.grouping import STATUS_SOURCE_ORDER, group_and_sort
from skillbox.index import SkillIndex, SkillRecord, load_index, save_index
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.repo_skills import skill_from_source
from skillbox.utils import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class SkillStatus:
    name: str
    source: str
    trackable: bool
    outdated: bool = False
    local_checksum: str = ""
    remote_checksum: str | None = None
    error: str | None = None

    @property
    def up_to_date(self) -> bool:
        return self.trackable and not self.outdated and self.error is None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "source": self.source,
            "trackable": self.trackable,
            "outdated": self.outdated,
            "localChecksum": self.local_checksum,
        }
        if self.remote_checksum is not None:
            result["remoteChecksum"] = self.remote_checksum
        if self.error is not None:
            result["error"] = self.error
        return result


def remote_skill_url(skill: SkillRecord) -> str | None:
    """URL of the upstream SKILL.md of a url or git skill."""
    if skill.source is None:
        return None
    if skill.source.type == "url":
        return skill.source.url
    located = skill_from_source(skill.source)
    if located is None:
        return None
    ref, repo_skill = located
    return build_raw_url(ref, repo_skill.skill_file)


def check_skill_status(skill: SkillRecord) -> SkillStatus:
    """Fetch the upstream copy and compare checksums.

    Fetch failures are reported on the status instead of raised.
    """
    source_type = skill.source.type if skill.source else "local"
    trackable = bool(skill.source and skill.source.trackable)
    status = SkillStatus(
        name=skill.name,
        source=source_type,
        trackable=trackable,
        local_checksum=skill.checksum or "",
    )
    if not trackable:
        return status

    url = remote_skill_url(skill)
    if not url:
        status.error = "Missing source location"
        return status

    try:
        remote = hash_content(fetch_text(url))
    except SkillboxError as e:
        logger.info(f"Status check failed for {skill.name}: {e}")
        status.error = str(e)
        return status

    status.remote_checksum = remote
    status.outdated = remote != skill.checksum
    return status


def group_by_source(statuses: list[SkillStatus]) -> list[dict[str, Any]]:
    groups = []
    for source, items in group_and_sort(
        statuses, lambda s: s.source, STATUS_SOURCE_ORDER, lambda s: s.name
    ):
        groups.append(
            {
                "source": source,
                "skills": [s.to_dict() for s in items],
                "trackable": any(s.trackable for s in items),
                "outdatedCount": sum(1 for s in items if s.outdated),
                "upToDateCount": sum(1 for s in items if s.up_to_date),
            }
        )
    return groups


def _mark_checked(index: SkillIndex, statuses: list[SkillStatus]) -> SkillIndex:
    checked = {s.name for s in statuses if s.trackable and s.error is None}
    now = utc_now_iso()
    return SkillIndex(
        skills=[
            dataclasses.replace(skill, last_checked=now) if skill.name in checked else skill
            for skill in index.skills
        ],
        version=index.version,
    )


def _print_group(group: dict[str, Any]) -> None:
    count = len(group["skills"])
    header = f"{group['source']} ({plural(count, 'skill')}"
    if not group["trackable"]:
        header += " - not tracked)"
    elif group["outdatedCount"]:
        header += f", {group['outdatedCount']} outdated)"
    else:
        header += ")"
    print_info(header)

    for skill in group["skills"]:
        if not group["trackable"]:
            print_info(f"  {skill['name']}")
        elif "error" in skill:
            print_info(f"  ? {skill['name']} ({skill['error']})")
        elif skill["outdated"]:
            print_info(f"  ✗ {skill['name']} (outdated)")
        else:
            print_info(f"  ✓ {skill['name']}")


def cmd_status(args: Any) -> int:
    """Report which trackable skills have changed upstream."""
    try:
        index = load_index()
        statuses = [check_skill_status(skill) for skill in index.skills]
        save_index(_mark_checked(index, statuses))
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "status", e)

    groups = group_by_source(statuses)
    outdated = sum(1 for s in statuses if s.outdated)

    if args.json:
        print_json(
            json_result(
                "status",
                {
                    "total": len(statuses),
                    "outdated": outdated,
                    "upToDate": sum(1 for s in statuses if s.up_to_date),
                    "trackable": sum(1 for s in statuses if s.trackable),
                    "skills": [s.to_dict() for s in statuses],
                    "bySource": groups,
                },
            )
        )
        return 0

    print_info("Skill Status")
    for group in groups:
        print_info()
        _print_group(group)

    if outdated:
        print_info()
        print_info(f"Run 'skillbox update' to update {outdated} outdated skill(s).")
    return 0
