"""Canonical skill store.

Every managed skill has one directory under ``<root>/skills/<name>/``
holding ``SKILL.md`` and the ``skill.json`` metadata sidecar. Installs
into agent directories are symlinks to (or copies of) this directory.
Writes are not transactional.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from skillbox.frontmatter import build_metadata, parse_skill_markdown
from skillbox.index import SkillSource
from skillbox.paths import get_skills_dir
from skillbox.utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
METADATA_FILE = "skill.json"


def skill_dir(name: str) -> Path:
    return get_skills_dir() / name


def ensure_skills_dir() -> Path:
    skills_dir = get_skills_dir()
    skills_dir.mkdir(parents=True, exist_ok=True)
    return skills_dir


def skill_exists(name: str) -> bool:
    return (skill_dir(name) / SKILL_FILE).exists()


def write_skill_files(name: str, markdown: str, metadata: dict[str, Any]) -> Path:
    """Write SKILL.md (with a trailing newline) and skill.json."""
    target = skill_dir(name)
    target.mkdir(parents=True, exist_ok=True)
    text = markdown if markdown.endswith("\n") else f"{markdown}\n"
    (target / SKILL_FILE).write_text(text, encoding="utf-8")
    write_json_file(target / METADATA_FILE, metadata)
    logger.info(f"Stored skill '{name}' in {target}")
    return target


def read_skill_metadata(name: str) -> dict[str, Any] | None:
    """Read skill.json, or None if the skill has no sidecar."""
    data = read_json_file(skill_dir(name) / METADATA_FILE)
    return data if isinstance(data, dict) else None


def write_skill_metadata(name: str, metadata: dict[str, Any]) -> None:
    write_json_file(skill_dir(name) / METADATA_FILE, metadata)


def remove_skill(name: str) -> bool:
    """Delete the canonical directory. Returns False if it did not exist."""
    target = skill_dir(name)
    if not target.exists() and not target.is_symlink():
        return False
    if target.is_symlink():
        target.unlink()
    else:
        shutil.rmtree(target)
    logger.info(f"Removed canonical skill '{name}'")
    return True


def list_subcommands(directory: Path) -> list[str]:
    """Names of the extra ``*.md`` documents beside SKILL.md."""
    if not directory.is_dir():
        return []
    return sorted(
        entry.stem
        for entry in directory.iterdir()
        if entry.is_file() and entry.suffix == ".md" and entry.name != SKILL_FILE
    )


def import_skill_from_dir(source_dir: Path) -> dict[str, Any] | None:
    """Adopt an existing skill directory into the canonical store.

    The skill is named by its frontmatter ``name`` (falling back to the
    directory name) and must have a description. The directory is copied
    into the store unless it already is the canonical directory, and a
    ``skill.json`` with a ``local`` source is written.

    Returns:
        The written metadata, or None if SKILL.md is missing or unusable.
    """
    source_dir = Path(source_dir)
    skill_file = source_dir / SKILL_FILE
    try:
        markdown = skill_file.read_text(encoding="utf-8")
    except OSError:
        logger.debug(f"No readable {SKILL_FILE} in {source_dir}")
        return None

    parsed = parse_skill_markdown(markdown)
    if not parsed.description:
        logger.debug(f"Skipping {source_dir}: no description")
        return None

    name = parsed.name or source_dir.name
    metadata = build_metadata(parsed, SkillSource(type="local"), name_override=name)

    target = skill_dir(name)
    if source_dir.resolve() != target.resolve():
        ensure_skills_dir()
        shutil.copytree(source_dir, target, dirs_exist_ok=True, symlinks=True)
        logger.info(f"Imported {source_dir} into {target}")

    write_skill_metadata(name, metadata)
    return metadata
