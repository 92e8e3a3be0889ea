"""Skills published in GitHub repositories.

A skill in a repository is a directory containing ``SKILL.md``. The
repository tree is read with the GitHub tree API and individual files
are downloaded from raw.githubusercontent.com.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skillbox.errors import FetchError, RepoRefError
from skillbox.fetcher import fetch_bytes, fetch_json, fetch_text
from skillbox.github import (
    DEFAULT_REF,
    FALLBACK_REF,
    RepoRef,
    build_raw_url,
    build_tree_url,
    parse_repo_ref,
)
from skillbox.index import SkillSource
from skillbox.store import SKILL_FILE, ensure_skills_dir, skill_dir

logger = logging.getLogger(__name__)

# Conventional locations of skills inside a repository
SKILL_ROOTS = (
    "skills",
    "skill",
    ".skills",
    ".skill",
    "agents/skills",
    ".claude/skills",
    ".codex/skills",
    ".cursor/skills",
    ".opencode/skills",
)


@dataclass(frozen=True)
class RepoSkill:
    """A skill found in a repository.

    ``path`` is the skill directory relative to the repository root
    (empty for a skill at the root); ``skill_file`` is its SKILL.md.
    """

    name: str
    path: str
    skill_file: str


def fetch_tree(ref: RepoRef) -> list[dict[str, Any]]:
    """Return the recursive tree entries of a repository at ``ref.ref``."""
    data = fetch_json(build_tree_url(ref))
    tree = data.get("tree") if isinstance(data, dict) else None
    if not isinstance(tree, list):
        raise FetchError(build_tree_url(ref), "unexpected tree response")
    if data.get("truncated"):
        logger.warning(f"Tree listing for {ref.slug} is truncated; some skills may be missing")
    return tree


def normalize_repo_ref(ref: RepoRef) -> RepoRef:
    """Check that the ref exists, retrying ``master`` when ``main`` fails.

    Raises:
        RepoRefError: If the ref (and the fallback) cannot be resolved.
    """
    try:
        fetch_tree(ref)
        return ref
    except FetchError as e:
        if ref.ref != DEFAULT_REF:
            raise RepoRefError(f"Unable to resolve repository ref: {e}") from e
        logger.debug(f"{ref.slug}@{DEFAULT_REF} not found, trying {FALLBACK_REF}")

    fallback = ref.with_ref(FALLBACK_REF)
    try:
        fetch_tree(fallback)
    except FetchError as e:
        raise RepoRefError(f"Unable to resolve repository ref: {e}") from e
    return fallback


def _blob_paths(tree: list[dict[str, Any]]) -> list[str]:
    return [
        entry["path"]
        for entry in tree
        if entry.get("type") == "blob" and isinstance(entry.get("path"), str)
    ]


def _skill_from_file(file_path: str, base_path: str | None) -> RepoSkill | None:
    if file_path != SKILL_FILE and not file_path.endswith(f"/{SKILL_FILE}"):
        return None

    directory = posixpath.dirname(file_path)
    if directory == (base_path or ""):
        name = base_path.rstrip("/").split("/")[-1] if base_path else "root"
    else:
        name = posixpath.basename(directory)
    return RepoSkill(name=name, path=directory, skill_file=file_path)


def find_skills(
    tree: list[dict[str, Any]],
    base_path: str | None = None,
    include_all: bool = False,
) -> list[RepoSkill]:
    """Pick the skills out of a tree listing.

    With a base path only skills at or below it are returned. Without one,
    skills are limited to the repository root and ``SKILL_ROOTS`` unless
    ``include_all`` is set.
    """
    skills: list[RepoSkill] = []
    for file_path in _blob_paths(tree):
        if base_path and not (
            file_path.startswith(f"{base_path}/") or file_path == base_path
        ):
            continue
        skill = _skill_from_file(file_path, base_path)
        if skill is not None:
            skills.append(skill)

    if base_path or include_all:
        return skills

    return [
        skill
        for skill in skills
        if skill.path == ""
        or any(skill.path == root or skill.path.startswith(f"{root}/") for root in SKILL_ROOTS)
    ]


def list_repo_skills(ref: RepoRef) -> tuple[RepoRef, list[RepoSkill]]:
    """List the skills of a repository.

    Returns:
        The resolved ref (possibly switched to ``master``) and its skills.

    Raises:
        RepoRefError: If the ref cannot be resolved or no skill is found.
    """
    resolved = normalize_repo_ref(ref)
    tree = fetch_tree(resolved)
    include_all = resolved.repo.lower() == "skills" and not resolved.path
    skills = find_skills(tree, resolved.path, include_all)
    if not skills:
        raise RepoRefError(f"No skills found in repository {resolved.slug}.")
    return resolved, skills


def list_repo_files(ref: RepoRef, skill: RepoSkill) -> list[str]:
    """Repository paths of every file inside a skill directory."""
    files = [
        file_path
        for file_path in _blob_paths(fetch_tree(ref))
        if not skill.path or file_path.startswith(f"{skill.path}/")
    ]
    return files or [skill.skill_file]


def fetch_repo_file(ref: RepoRef, file_path: str) -> str:
    return fetch_text(build_raw_url(ref, file_path))


def fetch_repo_bytes(ref: RepoRef, file_path: str) -> bytes:
    return fetch_bytes(build_raw_url(ref, file_path))


def write_repo_skill_directory(ref: RepoRef, skill: RepoSkill, name: str) -> Path:
    """Download a skill directory into the canonical store.

    Relative sub paths below the skill directory are preserved and files
    are written byte for byte, so images and archives survive intact.
    """
    ensure_skills_dir()
    target_dir = skill_dir(name)
    target_dir.mkdir(parents=True, exist_ok=True)

    for file_path in list_repo_files(ref, skill):
        relative = posixpath.relpath(file_path, skill.path) if skill.path else file_path
        destination = target_dir / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(fetch_repo_bytes(ref, file_path))
        logger.debug(f"Wrote {destination}")

    return target_dir


def skill_from_source(source: SkillSource) -> tuple[RepoRef, RepoSkill] | None:
    """Rebuild the repository location of an indexed ``git`` skill.

    Returns:
        The ref and skill, or None if the recorded repo is unusable.
    """
    if source.type != "git" or not source.repo:
        return None
    parsed = parse_repo_ref(source.repo)
    if parsed is None:
        return None

    ref = RepoRef(owner=parsed.owner, repo=parsed.repo, ref=source.ref or DEFAULT_REF)
    skill_path = (source.path or "").strip("/")
    skill_file = f"{skill_path}/{SKILL_FILE}" if skill_path else SKILL_FILE
    name = posixpath.basename(skill_path) if skill_path else "root"
    return ref, RepoSkill(name=name, path=skill_path, skill_file=skill_file)
