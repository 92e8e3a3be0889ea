"""Ingest of agent-converted skills.

When a URL is not a usable SKILL.md, Skillbox prints a prompt asking an
AI agent to convert the source into a JSON payload. ``skillbox add
--ingest`` validates that payload against the models below and writes it
into the canonical store as a regular skill directory.
"""

from __future__ import annotations

import json
import logging
import posixpath
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from skillbox.errors import IngestError
from skillbox.frontmatter import build_metadata, parse_skill_markdown
from skillbox.index import SkillSource
from skillbox.store import METADATA_FILE, SKILL_FILE, ensure_skills_dir, skill_dir, skill_exists
from skillbox.utils import write_json_file

logger = logging.getLogger(__name__)

_KEBAB_RE = re.compile(r"^[a-z0-9-]+$")

# Claude frontmatter keys, in the order they are written
FRONTMATTER_ORDER = [
    "name",
    "description",
    "argument-hint",
    "disable-model-invocation",
    "user-invocable",
    "allowed-tools",
    "model",
    "context",
    "agent",
    "hooks",
]


# ============================================================
# Payload models
# ============================================================


class IngestFrontmatter(BaseModel):
    """Frontmatter keys an ingested skill may set"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    argument_hint: Optional[str] = Field(default=None, alias="argument-hint")
    disable_model_invocation: Optional[bool] = Field(
        default=None, alias="disable-model-invocation"
    )
    user_invocable: Optional[bool] = Field(default=None, alias="user-invocable")
    allowed_tools: Optional[list[str]] = Field(default=None, alias="allowed-tools")
    model: Optional[str] = None
    context: Optional[str] = None
    agent: Optional[str] = None
    hooks: Optional[Any] = None


class IngestSubcommand(BaseModel):
    """Extra document written beside SKILL.md"""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    body: str = Field(min_length=1)
    frontmatter: Optional[IngestFrontmatter] = None

    @field_validator("name")
    @classmethod
    def _kebab_name(cls, value: str) -> str:
        if not _KEBAB_RE.match(value):
            raise ValueError("Subcommand names must be kebab-case.")
        return value


class IngestSupportingFile(BaseModel):
    """Any other file of the skill (references, scripts, ...)"""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(min_length=1)
    contents: str


class IngestSource(BaseModel):
    """What the agent converted"""

    type: str = Field(min_length=1)
    value: str = Field(min_length=1)


class IngestSkill(BaseModel):
    """Top-level ingest payload"""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    body: str = Field(min_length=1)
    source: IngestSource
    frontmatter: Optional[IngestFrontmatter] = None
    namespace: Optional[str] = None
    categories: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    subcommands: Optional[list[IngestSubcommand]] = None
    supporting_files: Optional[list[IngestSupportingFile]] = None

    @field_validator("name")
    @classmethod
    def _kebab_name(cls, value: str) -> str:
        if not _KEBAB_RE.match(value):
            raise ValueError("Skill names must be kebab-case.")
        return value


# ============================================================
# Prompt
# ============================================================

INGEST_SCHEMA_TEXT = """Required JSON fields:
- name (kebab-case)
- description
- body (markdown)
- source { type, value }

Optional fields:
- frontmatter (Claude-allowed keys only)
- namespace
- categories, tags
- subcommands [{ name, body, frontmatter? }]
- supporting_files [{ path, contents }]

Rules:
- SKILL.md frontmatter must include name + description
- Subcommands are written as <name>.md in skill root
- supporting_files paths must be relative (no .. or absolute paths)
- Write JSON to ~/.config/skillbox/tmp/<name>.json or /tmp/skillbox-<name>.json
- Or pipe JSON into: cat <file> | skillbox add --ingest -
- Delete the JSON file after a successful ingest
- Return JSON only (no markdown fences)"""

INGEST_TEMPLATE = {
    "name": "algolia-docs",
    "description": (
        "Algolia docs guide for index management, search setup, and API usage. "
        "Use when working with Algolia indices, search configuration, ranking, or analytics."
    ),
    "source": {"type": "url", "value": "https://www.algolia.com/doc"},
    "body": "# Algolia\n\n## Quick start\n- ...",
    "namespace": "algolia",
    "categories": ["search", "docs"],
    "tags": ["algolia", "api"],
    "subcommands": [{"name": "algolia-index", "body": "# Algolia Indexing\n\n..."}],
    "supporting_files": [
        {"path": "references/api.md", "contents": "# API Reference\n..."}
    ],
}

AUTHORING_GUIDANCE = """Follow these skill authoring patterns:
- Keep SKILL.md concise (<500 lines); put deep detail in references/
- Use scripts/ only for deterministic repeated tasks
- Avoid README, changelog, installation guides
- Put "when to use" guidance in frontmatter description
- Use progressive disclosure: link to references from SKILL.md
- Body must not include YAML frontmatter (only use the frontmatter object)
- Include sections: Quick start, Core workflow, Key concepts, Examples, References
Reference: https://raw.githubusercontent.com/langgenius/dify/main/.agents/skills/skill-creator/SKILL.md"""


def build_ingest_prompt(source: str) -> str:
    """Instructions for an agent to convert ``source`` into an ingest payload."""
    return "\n".join(
        [
            "You are converting a source into a Skillbox skill.",
            f"Input: {source}",
            "",
            "Task:",
            "1) Fetch the page and follow relevant documentation links.",
            "2) Synthesize a high-quality skill following Claude skill best practices.",
            "3) Return strict JSON matching the schema below.",
            "4) Save the JSON to ~/.config/skillbox/tmp/<name>.json or /tmp/skillbox-<name>.json.",
            "5) Or pipe JSON into: cat <file> | skillbox add --ingest -",
            "6) After a successful ingest, delete the JSON file.",
            "",
            AUTHORING_GUIDANCE,
            "",
            "Schema:",
            INGEST_SCHEMA_TEXT,
            "",
            "Template:",
            json.dumps(INGEST_TEMPLATE, indent=2),
        ]
    )


# ============================================================
# Validation
# ============================================================


def _validate_supporting_files(files: list[IngestSupportingFile]) -> None:
    for file in files:
        if file.path.startswith("/") or re.match(r"^[A-Za-z]:[\\/]", file.path):
            raise IngestError(f"Supporting file path must be relative: {file.path}")
        normalized = posixpath.normpath(file.path.replace("\\", "/"))
        if normalized == ".." or normalized.startswith("../"):
            raise IngestError(f"Supporting file path cannot traverse directories: {file.path}")
        if posixpath.basename(normalized) in (SKILL_FILE, METADATA_FILE):
            raise IngestError(
                f"Supporting file cannot overwrite {SKILL_FILE} or {METADATA_FILE}: {file.path}"
            )


def parse_ingest(data: Any) -> IngestSkill:
    """Validate a decoded ingest payload.

    Raises:
        IngestError: With every schema issue joined into one message.
    """
    try:
        ingest = IngestSkill.model_validate(data)
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise IngestError(f"Invalid ingest JSON. {'; '.join(issues)}") from e

    _validate_supporting_files(ingest.supporting_files or [])
    if ingest.body.lstrip().startswith("---"):
        raise IngestError("Ingest body must not include YAML frontmatter.")
    return ingest


def read_ingest_file(path: Path) -> IngestSkill:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise IngestError(f"Ingest file not found: {path}") from e
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise IngestError("Ingest file is not valid JSON.") from e
    return parse_ingest(data)


# ============================================================
# Rendering
# ============================================================


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def build_frontmatter(values: dict[str, Any]) -> str:
    """Render frontmatter in ``FRONTMATTER_ORDER``.

    Scalars are JSON-quoted, lists become ``- item`` lines and nested
    mappings are emitted as YAML.
    """
    lines = ["---"]
    for key in FRONTMATTER_ORDER:
        value = values.get(key)
        if value is None:
            continue
        if isinstance(value, list):
            lines.append(f"{key}:")
            lines.extend(f"  - {_format_scalar(item)}" for item in value)
        elif isinstance(value, dict):
            lines.append(f"{key}:")
            dumped = yaml.safe_dump(value, default_flow_style=False, sort_keys=False)
            lines.extend(f"  {line}" for line in dumped.rstrip("\n").split("\n"))
        else:
            lines.append(f"{key}: {_format_scalar(value)}")
    lines.append("---")
    return "\n".join(lines)


def _frontmatter_values(frontmatter: IngestFrontmatter | None) -> dict[str, Any]:
    if frontmatter is None:
        return {}
    return frontmatter.model_dump(by_alias=True, exclude_none=True)


def build_skill_markdown(ingest: IngestSkill) -> str:
    values = _frontmatter_values(ingest.frontmatter)
    values.update(name=ingest.name, description=ingest.description)
    return f"{build_frontmatter(values)}\n\n{ingest.body.strip()}\n"


def build_subcommand_markdown(subcommand: IngestSubcommand) -> str:
    if subcommand.frontmatter is None:
        return f"{subcommand.body.strip()}\n"
    values = _frontmatter_values(subcommand.frontmatter)
    values["name"] = subcommand.name
    return f"{build_frontmatter(values)}\n\n{subcommand.body.strip()}\n"


def build_ingest_source(ingest: IngestSkill) -> SkillSource:
    return SkillSource(
        type="convert",
        value=ingest.source.value,
        url=ingest.source.value if ingest.source.type == "url" else None,
    )


def build_ingest_metadata(ingest: IngestSkill, markdown: str) -> dict[str, Any]:
    parsed = parse_skill_markdown(markdown)
    if not parsed.description:
        raise IngestError("Ingested skill is missing a description.")

    metadata = build_metadata(parsed, build_ingest_source(ingest), ingest.name)
    if ingest.namespace:
        metadata["namespace"] = ingest.namespace
    if ingest.categories:
        metadata["categories"] = ingest.categories
    if ingest.tags:
        metadata["tags"] = ingest.tags
    return metadata


def write_ingested_skill_files(
    ingest: IngestSkill, markdown: str, metadata: dict[str, Any]
) -> Path:
    """Write an ingested skill into a new canonical directory.

    Raises:
        IngestError: If a skill with the same name already exists.
    """
    ensure_skills_dir()
    target = skill_dir(ingest.name)
    if skill_exists(ingest.name):
        raise IngestError(f"Skill already exists: {ingest.name}. Use a different name.")

    target.mkdir(parents=True, exist_ok=True)
    (target / SKILL_FILE).write_text(markdown, encoding="utf-8")
    write_json_file(target / METADATA_FILE, metadata)

    for subcommand in ingest.subcommands or []:
        (target / f"{subcommand.name}.md").write_text(
            build_subcommand_markdown(subcommand), encoding="utf-8"
        )

    for file in ingest.supporting_files or []:
        file_path = target / file.path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(file.contents, encoding="utf-8")

    logger.info(f"Ingested skill '{ingest.name}' into {target}")
    return target
