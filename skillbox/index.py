"""Skill index - the persistent record of every managed skill.

``index.json`` maps skill names to their source, checksum, timestamps,
classification and install records. The on-disk document is versioned
(``{"version": 1, "skills": [...]}``); ``load_index`` upgrades older
shapes and validates every record instead of trusting the file blindly.

``upsert_skill`` is the only way records are combined. It merges the
install list by the (scope, agent, projectRoot) key, so installing a
skill for one agent never drops installs previously recorded for other
agents or projects.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from skillbox.errors import SkillboxError
from skillbox.paths import get_index_path
from skillbox.utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

INDEX_VERSION = 1

SOURCE_TYPES = ("url", "git", "local", "convert")
INSTALL_SCOPES = ("user", "project")

# Scalar fields merged by upsert_skill (patch wins when it provides a value)
_MERGED_FIELDS = (
    "source",
    "checksum",
    "updated_at",
    "last_checked",
    "last_sync",
    "namespace",
    "categories",
    "tags",
)


@dataclass(frozen=True)
class SkillSource:
    """Where a skill came from: url, git, local or convert."""

    type: str
    url: str | None = None
    repo: str | None = None
    path: str | None = None
    ref: str | None = None
    value: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillSource:
        return cls(
            type=data["type"],
            url=data.get("url"),
            repo=data.get("repo"),
            path=data.get("path"),
            ref=data.get("ref"),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        for key in ("url", "repo", "path", "ref", "value"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    @property
    def trackable(self) -> bool:
        """Only remote sources can be checked for updates."""
        return self.type in ("url", "git")


@dataclass(frozen=True)
class InstallRecord:
    """One materialized install of a skill.

    ``path`` is the install directory itself (it ends with the skill name).
    ``project_root`` is set exactly when ``scope`` is ``project``.
    """

    scope: str
    agent: str
    path: str
    project_root: str | None = None

    @property
    def key(self) -> tuple[str, str, str | None]:
        """Identity of the install within one skill's install list."""
        return (self.scope, self.agent, self.project_root)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallRecord:
        return cls(
            scope=data["scope"],
            agent=data["agent"],
            path=data["path"],
            project_root=data.get("projectRoot"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "scope": self.scope,
            "agent": self.agent,
            "path": self.path,
        }
        if self.project_root is not None:
            result["projectRoot"] = self.project_root
        return result


@dataclass
class SkillRecord:
    """Index entry for one skill.

    When used as a patch for ``upsert_skill``, fields left as None mean
    "not provided" and keep the existing value.
    """

    name: str
    source: SkillSource | None = None
    checksum: str | None = None
    updated_at: str | None = None
    last_checked: str | None = None
    last_sync: str | None = None
    namespace: str | None = None
    categories: list[str] | None = None
    tags: list[str] | None = None
    installs: list[InstallRecord] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillRecord:
        installs = data.get("installs")
        return cls(
            name=data["name"],
            source=SkillSource.from_dict(data["source"]) if data.get("source") else None,
            checksum=data.get("checksum"),
            updated_at=data.get("updatedAt"),
            last_checked=data.get("lastChecked"),
            last_sync=data.get("lastSync"),
            namespace=data.get("namespace"),
            categories=data.get("categories"),
            tags=data.get("tags"),
            installs=[InstallRecord.from_dict(i) for i in installs]
            if installs is not None
            else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "source": self.source.to_dict() if self.source else {"type": "local"},
            "checksum": self.checksum or "",
            "updatedAt": self.updated_at or "",
        }
        optional = {
            "lastChecked": self.last_checked,
            "lastSync": self.last_sync,
            "namespace": self.namespace,
            "categories": self.categories,
            "tags": self.tags,
        }
        for key, value in optional.items():
            if value is not None:
                result[key] = value
        if self.installs:
            result["installs"] = [install.to_dict() for install in self.installs]
        return result


@dataclass
class SkillIndex:
    """In-memory form of index.json."""

    skills: list[SkillRecord] = field(default_factory=list)
    version: int = INDEX_VERSION

    def find(self, name: str) -> SkillRecord | None:
        for skill in self.skills:
            if skill.name == name:
                return skill
        return None

    def names(self) -> set[str]:
        return {skill.name for skill in self.skills}

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "skills": [skill.to_dict() for skill in self.skills],
        }


# ──────────────────────────────────────────────────────────
# Merge
# ──────────────────────────────────────────────────────────


def merge_installs(
    existing: list[InstallRecord] | None,
    incoming: list[InstallRecord],
) -> list[InstallRecord]:
    """Merge install lists keyed by (scope, agent, projectRoot).

    Existing installs keep their position; an incoming install with the
    same key replaces the existing one in place. Installs only present in
    ``existing`` are preserved; new keys are appended in incoming order.
    Within ``incoming`` the later entry for a key wins.
    """
    merged: list[InstallRecord] = list(existing or [])
    positions = {install.key: i for i, install in enumerate(merged)}

    for install in incoming:
        pos = positions.get(install.key)
        if pos is None:
            positions[install.key] = len(merged)
            merged.append(install)
        else:
            merged[pos] = install

    return merged


def upsert_skill(index: SkillIndex, patch: SkillRecord) -> SkillIndex:
    """Insert or merge a skill record, returning a new index.

    The input index and its records are not modified.

    - Unknown name: the patch is inserted (installs de-duplicated by key).
    - Known name: every scalar field the patch provides overrides the
      existing value; installs are merged with ``merge_installs``.
    """
    skills = list(index.skills)
    for i, current in enumerate(skills):
        if current.name != patch.name:
            continue

        changes: dict[str, Any] = {
            name: getattr(patch, name)
            for name in _MERGED_FIELDS
            if getattr(patch, name) is not None
        }
        if patch.installs is not None:
            changes["installs"] = merge_installs(current.installs, patch.installs)

        skills[i] = dataclasses.replace(current, **changes)
        return SkillIndex(skills=skills, version=index.version)

    installs = merge_installs(None, patch.installs) if patch.installs is not None else None
    skills.append(dataclasses.replace(patch, installs=installs))
    return SkillIndex(skills=skills, version=index.version)


def sort_index(index: SkillIndex) -> SkillIndex:
    return SkillIndex(
        skills=sorted(index.skills, key=lambda s: s.name),
        version=index.version,
    )


# ──────────────────────────────────────────────────────────
# Load / Save (with schema upgrade and validation)
# ──────────────────────────────────────────────────────────


def upgrade_index(data: dict[str, Any]) -> dict[str, Any]:
    """Bring a raw index document up to the current version.

    Raises:
        SkillboxError: If the document is from a newer, unknown version.
    """
    version = data.get("version")
    if not version:
        return {"version": INDEX_VERSION, "skills": data.get("skills") or []}
    if version != INDEX_VERSION:
        raise SkillboxError(f"Unsupported index version: {version}")
    return data


def _validate_install(raw: Any, skill_name: str) -> InstallRecord | None:
    if not isinstance(raw, dict):
        logger.warning(f"Dropping malformed install for '{skill_name}'")
        return None

    scope, agent, path = raw.get("scope"), raw.get("agent"), raw.get("path")
    project_root = raw.get("projectRoot")
    if scope not in INSTALL_SCOPES or not isinstance(agent, str) or not isinstance(path, str):
        logger.warning(f"Dropping malformed install for '{skill_name}': {raw}")
        return None
    if scope == "project" and not isinstance(project_root, str):
        logger.warning(f"Dropping project install without projectRoot for '{skill_name}'")
        return None

    return InstallRecord(
        scope=scope,
        agent=agent,
        path=path,
        project_root=project_root if scope == "project" else None,
    )


def _str_list(value: Any) -> list[str] | None:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return None


def _validate_skill(raw: Any) -> SkillRecord | None:
    """Validate one raw skill entry, default-filling missing fields."""
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str) or not raw["name"]:
        logger.warning(f"Dropping index entry without a name: {raw!r}")
        return None

    name = raw["name"]
    source_raw = raw.get("source")
    if isinstance(source_raw, dict) and source_raw.get("type") in SOURCE_TYPES:
        source = SkillSource.from_dict(source_raw)
    else:
        logger.warning(f"Skill '{name}' has an invalid source, treating as local")
        source = SkillSource(type="local")

    installs_raw = raw.get("installs")
    installs: list[InstallRecord] | None = None
    if isinstance(installs_raw, list):
        installs = [
            install
            for install in (_validate_install(item, name) for item in installs_raw)
            if install is not None
        ]

    def _opt_str(key: str) -> str | None:
        value = raw.get(key)
        return value if isinstance(value, str) else None

    return SkillRecord(
        name=name,
        source=source,
        checksum=_opt_str("checksum") or "",
        updated_at=_opt_str("updatedAt") or "",
        last_checked=_opt_str("lastChecked"),
        last_sync=_opt_str("lastSync"),
        namespace=_opt_str("namespace"),
        categories=_str_list(raw.get("categories")),
        tags=_str_list(raw.get("tags")),
        installs=installs,
    )


def parse_index(data: Any) -> SkillIndex:
    """Turn a raw JSON document into a validated SkillIndex."""
    if not isinstance(data, dict):
        raise SkillboxError("Invalid index file: expected a JSON object.")

    upgraded = upgrade_index(data)
    raw_skills = upgraded.get("skills")
    if not isinstance(raw_skills, list):
        logger.warning("Index skills field is not a list, using []")
        raw_skills = []

    index = SkillIndex()
    for raw in raw_skills:
        skill = _validate_skill(raw)
        if skill is not None:
            # Duplicate names collapse into one record
            index = upsert_skill(index, skill)
    return index


def load_index(path: Path | None = None) -> SkillIndex:
    """Load index.json, returning an empty index when it does not exist."""
    path = path or get_index_path()
    data = read_json_file(path)
    if data is None:
        return SkillIndex()
    return parse_index(data)


def save_index(index: SkillIndex, path: Path | None = None) -> None:
    path = path or get_index_path()
    write_json_file(path, index.to_dict())
    logger.debug(f"Saved index with {len(index.skills)} skills")


# ──────────────────────────────────────────────────────────
# Install queries
# ──────────────────────────────────────────────────────────


def _project_installs(skill: SkillRecord) -> list[InstallRecord]:
    return [
        install
        for install in skill.installs or []
        if install.scope == "project" and install.project_root
    ]


def collect_project_skills(skills: list[SkillRecord]) -> dict[str, list[str]]:
    """Map project root → names of skills installed there."""
    result: dict[str, list[str]] = {}
    for skill in skills:
        for install in _project_installs(skill):
            names = result.setdefault(install.project_root, [])
            if skill.name not in names:
                names.append(skill.name)
    return result


def get_project_skills(skills: list[SkillRecord], project_root: str) -> list[str]:
    return sorted(collect_project_skills(skills).get(project_root, []))


def select_installs(
    skill: SkillRecord, project_root: str | None = None
) -> list[InstallRecord]:
    """Install records of a skill, optionally limited to one project.

    When ``project_root`` is given, only project-scope installs recorded
    for that root are returned.
    """
    if project_root is None:
        return list(skill.installs or [])
    return [
        install
        for install in _project_installs(skill)
        if install.project_root == project_root
    ]
