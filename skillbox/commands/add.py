"""`skillbox add` - add a skill from a URL, a repository, or an ingest payload."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from skillbox.commands.add_repo import handle_repo_install
from skillbox.commands.shared import (
    install_and_record,
    load_command_config,
    print_install_summary,
)
from skillbox.errors import FetchError, IngestError, SkillboxError
from skillbox.fetcher import fetch_text
from skillbox.frontmatter import build_metadata, infer_name_from_url, parse_skill_markdown
from skillbox.github import is_repo_input
from skillbox.index import SkillSource, load_index, save_index, sort_index
from skillbox.ingest import (
    build_ingest_metadata,
    build_ingest_prompt,
    build_skill_markdown,
    read_ingest_file,
    write_ingested_skill_files,
)
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.paths import get_tmp_dir
from skillbox.store import ensure_skills_dir, write_skill_files

logger = logging.getLogger(__name__)

STDIN_SPOOL_NAME = "ingest-stdin.json"


def cmd_add(args: Any) -> int:
    """Add a skill and install it for the selected agents."""
    try:
        if args.ingest:
            return _handle_ingest(args)

        if not args.input:
            raise SkillboxError("Missing required argument: url or repo.")

        if args.list or args.skill or is_repo_input(args.input):
            return handle_repo_install(args)

        return _handle_url(args)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "add", e)


def _handle_url(args: Any) -> int:
    url = args.input
    try:
        markdown = fetch_text(url)
    except FetchError as e:
        logger.info(f"Fetch failed, offering ingest prompt: {e}")
        return _prompt_fallback(url, args.json)

    parsed = parse_skill_markdown(markdown)
    name = args.name or infer_name_from_url(url) or parsed.name
    if not name or not parsed.description or not (parsed.name or args.name):
        return _prompt_fallback(url, args.json)

    config = load_command_config(args.json)
    source = SkillSource(type="url", url=url)
    metadata = build_metadata(parsed, source, name)

    ensure_skills_dir()
    write_skill_files(name, markdown, metadata)

    index, result = install_and_record(load_index(), name, source, metadata, args, config)
    save_index(sort_index(index))

    if args.json:
        print_json(
            json_result(
                "add",
                {
                    "name": name,
                    "source": source.to_dict(),
                    "scope": result.scope,
                    "installs": [install.to_dict() for install in result.installs],
                    "warnings": result.warnings,
                },
            )
        )
        return 0

    print_install_summary(name, "url", url, result)
    return 0


def _prompt_fallback(source: str, use_json: bool) -> int:
    """Explain how to convert a non-skill URL with an agent."""
    prompt = build_ingest_prompt(source)
    if use_json:
        print_json(
            json_result(
                "add",
                {
                    "ingest": True,
                    "prompt": prompt,
                    "next": "skillbox add --ingest <json>",
                },
                error="Input does not appear to be a valid skill.",
            )
        )
        return 0

    print_info("This URL does not appear to be a valid skill.")
    print_info("Use an agent to extract and return JSON using the schema below.")
    print_info("Then run: skillbox add --ingest <json>")
    print_info()
    print_info(prompt)
    return 0


def resolve_ingest_path(value: str) -> Path:
    """Return the payload path, spooling stdin to the tmp dir for ``-``."""
    if value != "-":
        return Path(value)

    content = sys.stdin.read()
    if not content.strip():
        raise IngestError("Ingest stdin is empty.")

    tmp_dir = get_tmp_dir()
    tmp_dir.mkdir(parents=True, exist_ok=True)
    spool = tmp_dir / STDIN_SPOOL_NAME
    spool.write_text(content, encoding="utf-8")
    return spool


def _handle_ingest(args: Any) -> int:
    ingest = read_ingest_file(resolve_ingest_path(args.ingest))
    markdown = build_skill_markdown(ingest)
    metadata = build_ingest_metadata(ingest, markdown)
    config = load_command_config(args.json)

    write_ingested_skill_files(ingest, markdown, metadata)

    source = SkillSource.from_dict(metadata["source"])
    index, result = install_and_record(load_index(), ingest.name, source, metadata, args, config)
    save_index(sort_index(index))

    if args.json:
        print_json(
            json_result(
                "add",
                {
                    "name": ingest.name,
                    "source": source.to_dict(),
                    "scope": result.scope,
                    "installs": [install.to_dict() for install in result.installs],
                    "warnings": result.warnings,
                    "ingest": True,
                },
            )
        )
        return 0

    print_install_summary(ingest.name, "convert", source.value or "(unknown)", result)
    return 0
