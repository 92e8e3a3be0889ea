"""SKILL.md parsing.

Frontmatter is read with a small line-based parser rather than a YAML
library. The grammar is deliberately loose:

- the document must start with a ``---`` line and the frontmatter ends at
  the next line consisting of ``---``;
- each line is split at its first colon into key and value; lines
  without a colon are ignored;
- values are trimmed and one pair of matching surrounding quotes is
  removed.

Only ``name`` and ``description`` are extracted. The checksum covers the
whole raw document, so any byte change (including whitespace inside the
frontmatter) produces a different checksum.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from skillbox.errors import SkillboxError
from skillbox.index import SkillSource
from skillbox.utils import utc_now_iso

_FRONTMATTER_RE = re.compile(r"^---\n(.*?)\n---\n", re.DOTALL)

DEFAULT_VERSION = "0.1.0"


@dataclass
class ParsedSkill:
    """Result of parsing a SKILL.md document."""

    markdown: str
    checksum: str
    name: str | None = None
    description: str | None = None


def hash_content(content: str) -> str:
    """SHA-256 hex digest of the text (UTF-8)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_frontmatter(markdown: str) -> dict[str, str]:
    """Return the flat key/value pairs of the frontmatter block."""
    match = _FRONTMATTER_RE.match(markdown)
    if not match:
        return {}

    result: dict[str, str] = {}
    for line in match.group(1).split("\n"):
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        result[key] = _unquote(value.strip())
    return result


def parse_skill_markdown(markdown: str) -> ParsedSkill:
    fields = parse_frontmatter(markdown)
    return ParsedSkill(
        markdown=markdown,
        checksum=hash_content(markdown),
        name=fields.get("name") or None,
        description=fields.get("description") or None,
    )


def infer_name_from_url(url: str) -> str | None:
    """Guess a skill name from a URL.

    Uses the last path segment without ``.md``. When that segment is a
    generic file name (``SKILL.md``, ``skill``, ``skill.json``) the parent
    segment is used instead.
    """
    parts = [part for part in urlsplit(url).path.split("/") if part]
    if not parts:
        return None

    last = parts[-1]
    if last.lower() in ("skill.md", "skill", "skill.json"):
        return parts[-2] if len(parts) >= 2 else None
    return re.sub(r"\.md$", "", last)


def build_metadata(
    parsed: ParsedSkill,
    source: SkillSource,
    name_override: str | None = None,
) -> dict[str, Any]:
    """Build the skill.json sidecar for a parsed skill.

    Raises:
        SkillboxError: If neither the override nor the frontmatter gives a name.
    """
    name = name_override or parsed.name
    if not name:
        raise SkillboxError("Skill metadata requires a name.")

    metadata: dict[str, Any] = {
        "name": name,
        "version": DEFAULT_VERSION,
        "entry": "SKILL.md",
        "source": source.to_dict(),
        "checksum": parsed.checksum,
        "updatedAt": utc_now_iso(),
    }
    if parsed.description is not None:
        metadata["description"] = parsed.description
    return metadata
