"""Tests for skillbox.index module."""

import json

import pytest

from skillbox.errors import SkillboxError
from skillbox.index import (
    InstallRecord,
    SkillIndex,
    SkillRecord,
    SkillSource,
    collect_project_skills,
    load_index,
    merge_installs,
    parse_index,
    save_index,
    select_installs,
    sort_index,
    upgrade_index,
    upsert_skill,
)
from skillbox.paths import get_index_path


def _user(agent: str, path: str = "/h/.claude/skills/demo") -> InstallRecord:
    return InstallRecord(scope="user", agent=agent, path=path)


def _project(agent: str, root: str, path: str | None = None) -> InstallRecord:
    return InstallRecord(
        scope="project",
        agent=agent,
        path=path or f"{root}/.claude/skills/demo",
        project_root=root,
    )


# ============================================================
# Merge semantics
# ============================================================


class TestUpsertSkill:
    """Test upsert_skill() merge rules."""

    def test_insert_new_skill(self):
        index = upsert_skill(SkillIndex(), SkillRecord(name="demo", checksum="abc"))
        assert index.names() == {"demo"}
        assert index.find("demo").checksum == "abc"

    def test_upsert_is_idempotent(self):
        record = SkillRecord(
            name="demo",
            source=SkillSource(type="url", url="https://x/demo.md"),
            checksum="abc",
            installs=[_user("claude")],
        )
        once = upsert_skill(SkillIndex(), record)
        twice = upsert_skill(once, record)
        assert twice.to_dict() == once.to_dict()

    def test_installs_for_other_agents_are_preserved(self):
        index = upsert_skill(SkillIndex(), SkillRecord(name="demo", installs=[_user("claude")]))
        index = upsert_skill(index, SkillRecord(name="demo", installs=[_user("codex", "/c")]))
        installs = index.find("demo").installs
        assert [i.agent for i in installs] == ["claude", "codex"]

    def test_same_key_replaces_in_place(self):
        index = upsert_skill(
            SkillIndex(),
            SkillRecord(name="demo", installs=[_user("claude", "/old"), _user("codex", "/c")]),
        )
        index = upsert_skill(index, SkillRecord(name="demo", installs=[_user("claude", "/new")]))
        installs = index.find("demo").installs
        assert [(i.agent, i.path) for i in installs] == [("claude", "/new"), ("codex", "/c")]

    def test_project_installs_keyed_by_root(self):
        index = upsert_skill(
            SkillIndex(), SkillRecord(name="demo", installs=[_project("claude", "/p1")])
        )
        index = upsert_skill(index, SkillRecord(name="demo", installs=[_project("claude", "/p2")]))
        roots = [i.project_root for i in index.find("demo").installs]
        assert roots == ["/p1", "/p2"]

    def test_scalar_fields_patch_wins(self):
        index = upsert_skill(
            SkillIndex(), SkillRecord(name="demo", checksum="a", namespace="ns", tags=["x"])
        )
        index = upsert_skill(index, SkillRecord(name="demo", checksum="b"))
        skill = index.find("demo")
        assert skill.checksum == "b"
        assert skill.namespace == "ns"
        assert skill.tags == ["x"]

    def test_patch_without_installs_keeps_installs(self):
        index = upsert_skill(SkillIndex(), SkillRecord(name="demo", installs=[_user("claude")]))
        index = upsert_skill(index, SkillRecord(name="demo", checksum="b"))
        assert len(index.find("demo").installs) == 1

    def test_input_index_not_modified(self):
        original = upsert_skill(SkillIndex(), SkillRecord(name="demo", checksum="a"))
        upsert_skill(original, SkillRecord(name="demo", checksum="b"))
        upsert_skill(original, SkillRecord(name="other"))
        assert original.find("demo").checksum == "a"
        assert original.names() == {"demo"}

    def test_insert_dedupes_installs(self):
        index = upsert_skill(
            SkillIndex(),
            SkillRecord(name="demo", installs=[_user("claude", "/a"), _user("claude", "/b")]),
        )
        installs = index.find("demo").installs
        assert len(installs) == 1
        assert installs[0].path == "/b"


class TestMergeInstalls:
    def test_no_duplicate_keys(self):
        merged = merge_installs(
            [_user("claude"), _project("claude", "/p")],
            [_user("claude"), _project("claude", "/p"), _user("codex")],
        )
        keys = [i.key for i in merged]
        assert len(keys) == len(set(keys)) == 3


class TestSortIndex:
    def test_sorted_by_name(self):
        index = SkillIndex(skills=[SkillRecord(name="b"), SkillRecord(name="a")])
        assert [s.name for s in sort_index(index).skills] == ["a", "b"]


# ============================================================
# Persistence, upgrade and validation
# ============================================================


class TestLoadSave:
    """Test load_index()/save_index()."""

    def test_missing_file_is_empty(self):
        assert load_index().skills == []

    def test_round_trip(self):
        index = upsert_skill(
            SkillIndex(),
            SkillRecord(
                name="demo",
                source=SkillSource(type="git", repo="o/r", path="skills/demo", ref="main"),
                checksum="abc",
                updated_at="2024-01-01T00:00:00.000Z",
                installs=[_project("claude", "/p")],
            ),
        )
        save_index(index)
        assert load_index().to_dict() == index.to_dict()

    def test_on_disk_shape(self):
        save_index(upsert_skill(SkillIndex(), SkillRecord(name="demo", installs=[_project("claude", "/p")])))
        data = json.loads(get_index_path().read_text())
        assert data["version"] == 1
        assert data["skills"][0]["installs"][0]["projectRoot"] == "/p"

    def test_concurrent_writers_last_save_wins(self):
        """Two invocations that load before either saves: the first update is lost."""
        save_index(upsert_skill(SkillIndex(), SkillRecord(name="base")))

        first = load_index()
        second = load_index()
        save_index(upsert_skill(first, SkillRecord(name="from-first", installs=[_user("claude")])))
        save_index(upsert_skill(second, SkillRecord(name="from-second", installs=[_user("codex")])))

        assert sorted(load_index().names()) == ["base", "from-second"]


class TestUpgradeAndValidation:
    def test_versionless_document_is_upgraded(self):
        data = upgrade_index({"skills": [{"name": "demo", "source": {"type": "local"}}]})
        assert data["version"] == 1

    def test_unknown_version_rejected(self):
        with pytest.raises(SkillboxError):
            upgrade_index({"version": 99, "skills": []})

    def test_missing_fields_default_filled(self):
        index = parse_index({"skills": [{"name": "demo"}]})
        skill = index.find("demo")
        assert skill.source.type == "local"
        assert skill.checksum == ""
        assert skill.updated_at == ""

    def test_malformed_entries_dropped(self):
        index = parse_index(
            {
                "version": 1,
                "skills": [
                    {"nope": True},
                    "junk",
                    {
                        "name": "demo",
                        "source": {"type": "url", "url": "u"},
                        "installs": [
                            {"scope": "user", "agent": "claude", "path": "/a"},
                            {"scope": "project", "agent": "claude", "path": "/b"},
                            {"scope": "weird", "agent": "claude", "path": "/c"},
                        ],
                    },
                ],
            }
        )
        assert index.names() == {"demo"}
        assert [i.path for i in index.find("demo").installs] == ["/a"]

    def test_non_object_rejected(self):
        with pytest.raises(SkillboxError):
            parse_index([])

    def test_duplicate_names_collapse(self):
        index = parse_index(
            {
                "skills": [
                    {"name": "demo", "installs": [{"scope": "user", "agent": "claude", "path": "/a"}]},
                    {"name": "demo", "installs": [{"scope": "user", "agent": "codex", "path": "/b"}]},
                ]
            }
        )
        assert len(index.skills) == 1
        assert len(index.find("demo").installs) == 2


# ============================================================
# Install queries
# ============================================================


class TestInstallQueries:
    def _skills(self):
        return [
            SkillRecord(
                name="a",
                installs=[
                    _project("claude", "/p1", "/p1/.claude/skills/a"),
                    _project("codex", "/p1", "/p1/.codex/skills/a"),
                    _user("claude", "/h/.claude/skills/a"),
                ],
            ),
            SkillRecord(name="b", installs=[_project("claude", "/p2", "/p2/.claude/skills/b")]),
        ]

    def test_collect_project_skills(self):
        assert collect_project_skills(self._skills()) == {"/p1": ["a"], "/p2": ["b"]}

    def test_select_installs_all(self):
        installs = select_installs(self._skills()[0])
        assert [i.path for i in installs] == [
            "/p1/.claude/skills/a",
            "/p1/.codex/skills/a",
            "/h/.claude/skills/a",
        ]

    def test_select_installs_for_project(self):
        installs = select_installs(self._skills()[0], "/p1")
        assert [i.agent for i in installs] == ["claude", "codex"]

    def test_select_installs_other_project(self):
        assert select_installs(self._skills()[0], "/p2") == []
