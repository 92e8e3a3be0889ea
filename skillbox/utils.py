"""
Skillbox Utility Functions

This module provides common utility functions used across the codebase.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from skillbox.errors import SkillboxError

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def read_json_file(path: Path) -> Any | None:
    """Read a JSON document.

    Returns:
        The decoded document, or None if the file does not exist.

    Raises:
        SkillboxError: If the file exists but is not valid JSON.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        raise SkillboxError(f"Invalid JSON in {path}: {e}") from e


def write_json_file(path: Path, data: Any) -> None:
    """Write a JSON document (2-space indent, trailing newline).

    The payload is written to a sibling temp file first and then renamed
    over the target, so readers never observe a partially written file.
    Concurrent writers are not coordinated: the last rename wins.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        temp_path.replace(path)
        logger.debug(f"Wrote {path}")
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise
