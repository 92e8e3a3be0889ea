"""`skillbox import` - adopt skills that already exist on disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from skillbox.config import load_config
from skillbox.discovery import discover_global_skills
from skillbox.errors import SkillboxError
from skillbox.frontmatter import build_metadata, parse_skill_markdown
from skillbox.index import (
    SkillIndex,
    SkillRecord,
    SkillSource,
    load_index,
    save_index,
    sort_index,
    upsert_skill,
)
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.runtime import resolve_runtime
from skillbox.store import SKILL_FILE, ensure_skills_dir, import_skill_from_dir, write_skill_files

logger = logging.getLogger(__name__)


def import_skill_path(path: Path) -> str:
    """Import one skill directory into the store and index.

    Raises:
        SkillboxError: If SKILL.md has no description.
    """
    try:
        markdown = (path / SKILL_FILE).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SkillboxError(f"No {SKILL_FILE} found in {path}") from e

    parsed = parse_skill_markdown(markdown)
    if not parsed.description:
        raise SkillboxError("Skill frontmatter missing description.")

    source = SkillSource(type="local")
    metadata = build_metadata(parsed, source, parsed.name or path.name)
    ensure_skills_dir()
    write_skill_files(metadata["name"], markdown, metadata)

    index = upsert_skill(
        load_index(),
        SkillRecord(
            name=metadata["name"],
            source=source,
            checksum=parsed.checksum,
            updated_at=metadata["updatedAt"],
        ),
    )
    save_index(sort_index(index))
    return metadata["name"]


def import_global_skills(
    index: SkillIndex, agents: list[str], project_root: Path
) -> tuple[SkillIndex, list[str], list[str]]:
    """Import untracked skills from the user-scope agent directories.

    Returns:
        The new index, the imported names and the skipped (already
        tracked or unusable) names.
    """
    imported: list[str] = []
    skipped: list[str] = []
    known = index.names()

    for found in discover_global_skills(agents, project_root):
        if found.name in known:
            skipped.append(found.name)
            continue

        metadata = import_skill_from_dir(Path(found.installs[0].path))
        if metadata is None:
            skipped.append(found.name)
            continue

        index = upsert_skill(
            index,
            SkillRecord(
                name=metadata["name"],
                source=SkillSource(type="local"),
                checksum=metadata["checksum"],
                updated_at=metadata["updatedAt"],
                installs=found.installs,
            ),
        )
        imported.append(metadata["name"])

    return index, imported, skipped


def cmd_import(args: Any) -> int:
    """Import a skill directory, or every untracked global skill."""
    if args.global_:
        return _import_global(args)

    if not args.path:
        return handle_command_error(
            args.json, "import", SkillboxError("Missing required argument: path.")
        )

    resolved = Path(os.path.abspath(args.path))
    try:
        name = import_skill_path(resolved)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "import", e)

    if args.json:
        print_json(json_result("import", {"name": name, "path": str(resolved)}))
    else:
        print_info(f"Imported skill: {name}")
    return 0


def _import_global(args: Any) -> int:
    try:
        runtime = resolve_runtime(load_config(), global_=True, agents=args.agents)
        index, imported, skipped = import_global_skills(
            load_index(), runtime.agents, runtime.project_root
        )
        if imported:
            save_index(sort_index(index))
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "import", e)

    if args.json:
        print_json(json_result("import", {"imported": imported, "skipped": skipped}))
        return 0

    if imported:
        print_info(f"Imported {len(imported)} skill(s): {', '.join(imported)}")
    else:
        print_info("No new skills to import.")
    if skipped:
        print_info(f"Skipped {len(skipped)} already tracked skill(s).")
    return 0
