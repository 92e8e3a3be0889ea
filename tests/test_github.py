"""Tests for skillbox.github module."""

import pytest

from skillbox.github import (
    RepoRef,
    build_raw_url,
    build_tree_url,
    is_repo_input,
    parse_repo_ref,
)


class TestParseRepoRef:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("owner/repo", RepoRef("owner", "repo")),
            ("https://github.com/owner/repo", RepoRef("owner", "repo")),
            ("https://github.com/owner/repo.git", RepoRef("owner", "repo")),
            ("https://github.com/owner/repo/tree/dev", RepoRef("owner", "repo", "dev")),
            (
                "https://github.com/owner/repo/tree/main/skills/demo",
                RepoRef("owner", "repo", "main", "skills/demo"),
            ),
        ],
    )
    def test_accepted_forms(self, value, expected):
        assert parse_repo_ref(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            "https://example.com/skills/demo.md",
            "https://raw.githubusercontent.com/o/r/main/SKILL.md",
            "just-a-name",
        ],
    )
    def test_rejected(self, value):
        assert parse_repo_ref(value) is None
        assert not is_repo_input(value)


class TestUrls:
    def test_raw_url(self):
        ref = RepoRef("o", "r", "dev")
        assert build_raw_url(ref, "skills/a/SKILL.md") == (
            "https://raw.githubusercontent.com/o/r/dev/skills/a/SKILL.md"
        )

    def test_tree_url(self):
        assert build_tree_url(RepoRef("o", "r")) == (
            "https://api.github.com/repos/o/r/git/trees/main?recursive=1"
        )

    def test_slug(self):
        assert RepoRef("o", "r").slug == "o/r"
