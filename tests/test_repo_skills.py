"""Tests for skillbox.repo_skills module."""

import pytest
import responses

from skillbox.errors import RepoRefError
from skillbox.github import RepoRef, build_raw_url, build_tree_url
from skillbox.index import SkillSource
from skillbox.repo_skills import (
    RepoSkill,
    find_skills,
    list_repo_skills,
    normalize_repo_ref,
    skill_from_source,
    write_repo_skill_directory,
)
from skillbox.store import skill_dir

TREE = [
    {"path": "README.md", "type": "blob"},
    {"path": "skills", "type": "tree"},
    {"path": "skills/alpha/SKILL.md", "type": "blob"},
    {"path": "skills/alpha/references/api.md", "type": "blob"},
    {"path": "skills/beta/SKILL.md", "type": "blob"},
    {"path": "docs/other/SKILL.md", "type": "blob"},
]


def _tree(entries):
    return [dict(entry) for entry in entries]


class TestFindSkills:
    """Test skill detection in a tree listing."""

    def test_only_well_known_roots(self):
        names = [s.name for s in find_skills(_tree(TREE))]
        assert names == ["alpha", "beta"]

    def test_include_all(self):
        names = sorted(s.name for s in find_skills(_tree(TREE), include_all=True))
        assert names == ["alpha", "beta", "other"]

    def test_base_path(self):
        skills = find_skills(_tree(TREE), base_path="docs/other")
        assert skills == [RepoSkill("other", "docs/other", "docs/other/SKILL.md")]

    def test_root_skill(self):
        skills = find_skills([{"path": "SKILL.md", "type": "blob"}])
        assert skills == [RepoSkill("root", "", "SKILL.md")]

    def test_hidden_agent_roots(self):
        tree = [{"path": ".claude/skills/gamma/SKILL.md", "type": "blob"}]
        assert [s.name for s in find_skills(tree)] == ["gamma"]


class TestListRepoSkills:
    @responses.activate
    def test_lists_skills(self):
        ref = RepoRef("o", "r")
        responses.add(responses.GET, build_tree_url(ref), json={"tree": TREE})
        resolved, skills = list_repo_skills(ref)
        assert resolved.ref == "main"
        assert [s.name for s in skills] == ["alpha", "beta"]

    @responses.activate
    def test_falls_back_to_master(self):
        ref = RepoRef("o", "r")
        responses.add(responses.GET, build_tree_url(ref), status=404)
        responses.add(responses.GET, build_tree_url(ref.with_ref("master")), json={"tree": TREE})
        assert normalize_repo_ref(ref).ref == "master"

    @responses.activate
    def test_unresolvable_ref(self):
        ref = RepoRef("o", "r", "dev")
        responses.add(responses.GET, build_tree_url(ref), status=404)
        with pytest.raises(RepoRefError):
            normalize_repo_ref(ref)

    @responses.activate
    def test_no_skills_raises(self):
        ref = RepoRef("o", "r")
        responses.add(
            responses.GET, build_tree_url(ref), json={"tree": [{"path": "a.md", "type": "blob"}]}
        )
        with pytest.raises(RepoRefError, match="No skills"):
            list_repo_skills(ref)


class TestWriteRepoSkillDirectory:
    @responses.activate
    def test_preserves_sub_paths(self):
        ref = RepoRef("o", "r")
        responses.add(responses.GET, build_tree_url(ref), json={"tree": TREE})
        responses.add(
            responses.GET, build_raw_url(ref, "skills/alpha/SKILL.md"), body="---\nname: alpha\n---\n"
        )
        responses.add(
            responses.GET, build_raw_url(ref, "skills/alpha/references/api.md"), body="api"
        )

        skill = RepoSkill("alpha", "skills/alpha", "skills/alpha/SKILL.md")
        target = write_repo_skill_directory(ref, skill, "alpha")

        assert target == skill_dir("alpha")
        assert (target / "SKILL.md").read_text().startswith("---")
        assert (target / "references" / "api.md").read_text() == "api"
        assert not (target / "skills").exists()


# ============================================================
# Binary assets
# ============================================================


class TestWriteBinaryAssets:
    """Files below a skill directory are stored byte for byte."""

    @responses.activate
    def test_image_bytes_preserved(self):
        ref = RepoRef("o", "r")
        image = b"\x89PNG\r\n\x1a\n\x00\xff\xfe\x80"
        tree = [
            {"path": "skills/alpha/SKILL.md", "type": "blob"},
            {"path": "skills/alpha/assets/logo.png", "type": "blob"},
        ]
        responses.add(responses.GET, build_tree_url(ref), json={"tree": tree})
        responses.add(
            responses.GET, build_raw_url(ref, "skills/alpha/SKILL.md"), body="---\nname: alpha\n---\n"
        )
        responses.add(
            responses.GET,
            build_raw_url(ref, "skills/alpha/assets/logo.png"),
            body=image,
            content_type="image/png",
        )

        skill = RepoSkill("alpha", "skills/alpha", "skills/alpha/SKILL.md")
        target = write_repo_skill_directory(ref, skill, "alpha")

        assert (target / "assets" / "logo.png").read_bytes() == image


class TestSkillFromSource:
    def test_git_source(self):
        ref, skill = skill_from_source(
            SkillSource(type="git", repo="o/r", path="skills/alpha/", ref="dev")
        )
        assert ref == RepoRef("o", "r", "dev")
        assert skill.skill_file == "skills/alpha/SKILL.md"

    def test_root_skill(self):
        _, skill = skill_from_source(SkillSource(type="git", repo="https://github.com/o/r"))
        assert skill.skill_file == "SKILL.md"

    def test_non_git_source(self):
        assert skill_from_source(SkillSource(type="url", url="https://x")) is None
