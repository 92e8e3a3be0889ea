"""Grouping helpers for list and status output."""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")

# Source order for `list` and `status`; other source types follow alphabetically
LIST_SOURCE_ORDER = ["local", "git", "url"]
STATUS_SOURCE_ORDER = ["url", "git", "local", "convert"]


def sort_group_keys(keys: list[str], key_order: list[str]) -> list[str]:
    """Known keys in ``key_order`` first, unknown keys alphabetically after."""

    def rank(key: str) -> tuple[int, int, str]:
        if key in key_order:
            return (0, key_order.index(key), "")
        return (1, 0, key)

    return sorted(keys, key=rank)


def group_and_sort(
    items: list[T],
    key_of: Callable[[T], str],
    key_order: list[str],
    name_of: Callable[[T], str],
) -> list[tuple[str, list[T]]]:
    """Group items by key, order the groups, and sort items by name."""
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(key_of(item), []).append(item)

    return [
        (key, sorted(groups[key], key=name_of))
        for key in sort_group_keys(list(groups), key_order)
    ]
