"""Tests for skillbox.projects module."""

import json
import os

import pytest

from skillbox.errors import SkillboxError
from skillbox.paths import get_projects_path
from skillbox.projects import (
    ProjectIndex,
    find_project,
    find_project_root,
    load_projects,
    parse_agent_path_overrides,
    save_projects,
    set_agent_paths,
    upsert_project,
)


class TestProjectRegistry:
    def test_empty_when_missing(self):
        assert load_projects().projects == []

    def test_upsert_is_idempotent(self):
        index = upsert_project(ProjectIndex(), "/p")
        assert upsert_project(index, "/p") is index
        assert [p.root for p in index.projects] == ["/p"]

    def test_round_trip(self):
        index = set_agent_paths(upsert_project(ProjectIndex(), "/p"), "/p", {"claude": ["/p/x"]})
        save_projects(index)
        loaded = load_projects()
        assert find_project(loaded, "/p").agent_paths == {"claude": ["/p/x"]}

    def test_set_agent_paths_replaces_per_agent(self):
        index = upsert_project(ProjectIndex(), "/p")
        index = set_agent_paths(index, "/p", {"claude": ["/a"], "codex": ["/b"]})
        index = set_agent_paths(index, "/p", {"claude": ["/c"]})
        assert find_project(index, "/p").agent_paths == {"claude": ["/c"], "codex": ["/b"]}

    def test_malformed_entries_dropped(self):
        path = get_projects_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"version": 1, "projects": [{"root": "/p"}, {"x": 1}, "bad"]}))
        assert [p.root for p in load_projects().projects] == ["/p"]

    def test_non_object_rejected(self):
        path = get_projects_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("[]")
        with pytest.raises(SkillboxError):
            load_projects()


class TestParseAgentPathOverrides:
    def test_relative_paths_resolved_against_root(self):
        overrides = parse_agent_path_overrides(["claude=custom/skills"], "/p")
        assert overrides == {"claude": [os.path.normpath("/p/custom/skills")]}

    def test_absolute_paths_kept(self):
        assert parse_agent_path_overrides(["codex=/abs"], "/p") == {"codex": ["/abs"]}

    def test_repeated_agent_appends(self):
        overrides = parse_agent_path_overrides(["claude=a", "claude=b"], "/p")
        assert overrides["claude"] == ["/p/a", "/p/b"]

    def test_malformed_and_unknown_ignored(self):
        assert parse_agent_path_overrides(["claude", "=x", "vim=x"], "/p") == {}


class TestFindProjectRoot:
    def test_nearest_git_ancestor(self, project_dir):
        nested = project_dir / "src" / "pkg"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == project_dir.resolve()

    def test_falls_back_to_start(self, tmp_path):
        start = tmp_path / "plain"
        start.mkdir()
        assert find_project_root(start) == start.resolve()
