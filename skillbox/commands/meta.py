"""`skillbox meta` - classify skills with categories, tags and a namespace."""

from __future__ import annotations

import logging
from typing import Any

from skillbox.errors import SkillboxError, SkillNotFoundError
from skillbox.index import SkillRecord, load_index, save_index, sort_index, upsert_skill
from skillbox.output import handle_command_error, json_result, print_info, print_json
from skillbox.store import read_skill_metadata, write_skill_metadata

logger = logging.getLogger(__name__)


def set_skill_meta(
    name: str,
    categories: list[str] | None = None,
    tags: list[str] | None = None,
    namespace: str | None = None,
) -> SkillRecord:
    """Persist classification fields into the index and skill.json.

    Only the fields given are replaced.

    Raises:
        SkillNotFoundError: If the skill is not indexed.
    """
    index = load_index()
    if index.find(name) is None:
        raise SkillNotFoundError(name)

    index = upsert_skill(
        index,
        SkillRecord(name=name, categories=categories, tags=tags, namespace=namespace),
    )
    save_index(sort_index(index))

    metadata = read_skill_metadata(name) or {"name": name}
    if categories is not None:
        metadata["categories"] = categories
    if tags is not None:
        metadata["tags"] = tags
    if namespace is not None:
        metadata["namespace"] = namespace
    write_skill_metadata(name, metadata)
    logger.info(f"Updated metadata of {name}")

    return next(skill for skill in index.skills if skill.name == name)


def cmd_meta_set(args: Any) -> int:
    try:
        record = set_skill_meta(args.name, args.category, args.tag, args.namespace)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "meta set", e)

    if args.json:
        print_json(
            json_result(
                "meta set",
                {
                    "name": record.name,
                    "categories": record.categories or [],
                    "tags": record.tags or [],
                    "namespace": record.namespace,
                },
            )
        )
        return 0

    print_info(f"Updated metadata for {record.name}")
    if record.namespace:
        print_info(f"Namespace: {record.namespace}")
    if record.categories:
        print_info(f"Categories: {', '.join(record.categories)}")
    if record.tags:
        print_info(f"Tags: {', '.join(record.tags)}")
    return 0
