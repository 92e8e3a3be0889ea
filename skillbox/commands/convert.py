"""`skillbox convert` - write a draft skill directory from any URL."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from skillbox.errors import SkillboxError
from skillbox.fetcher import fetch_text
from skillbox.frontmatter import DEFAULT_VERSION, infer_name_from_url
from skillbox.index import SkillSource
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.store import METADATA_FILE, SKILL_FILE
from skillbox.utils import utc_now_iso, write_json_file

logger = logging.getLogger(__name__)

DRAFT_DESCRIPTION = "Draft skill generated from source content."
SOURCE_FILE = "source.txt"
CONVERT_DIR = "skillbox-convert"


def build_draft_markdown(name: str) -> str:
    return (
        f"---\nname: {name}\ndescription: {DRAFT_DESCRIPTION}\n---\n\n"
        f"# {name}\n\n"
        f"## Source\n- See {SOURCE_FILE} for the raw content.\n\n"
        "## When to use\n- TODO\n\n"
        "## Instructions\n- TODO\n"
    )


def write_draft(url: str, name: str, source_text: str, output_dir: Path) -> None:
    """Write source.txt, a draft SKILL.md and skill.json into ``output_dir``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / SOURCE_FILE).write_text(source_text, encoding="utf-8")
    (output_dir / SKILL_FILE).write_text(build_draft_markdown(name), encoding="utf-8")
    write_json_file(
        output_dir / METADATA_FILE,
        {
            "name": name,
            "version": DEFAULT_VERSION,
            "description": DRAFT_DESCRIPTION,
            "entry": SKILL_FILE,
            "source": SkillSource(type="url", url=url).to_dict(),
            "checksum": "draft",
            "updatedAt": utc_now_iso(),
        },
    )
    logger.info(f"Wrote draft skill {name} to {output_dir}")


def cmd_convert(args: Any) -> int:
    """Fetch a URL and scaffold a skill for manual or agent refinement."""
    try:
        source_text = fetch_text(args.url)
        name = args.name or infer_name_from_url(args.url)
        if not name:
            raise SkillboxError("Unable to infer skill name. Use --name to specify it.")

        if args.output:
            output_dir = Path(os.path.abspath(args.output))
        else:
            output_dir = Path.cwd() / CONVERT_DIR / name
        write_draft(args.url, name, source_text, output_dir)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "convert", e)

    if args.json:
        print_json(
            json_result(
                "convert",
                {
                    "url": args.url,
                    "name": name,
                    "outputDir": str(output_dir),
                    "agent": bool(args.agent),
                    "sourceLength": len(source_text),
                },
            )
        )
        return 0

    print_info(f"Draft created: {output_dir}")
    if args.agent:
        print_info(f"Agent mode enabled. Use the {SOURCE_FILE} content to refine {SKILL_FILE}.")
    return 0
