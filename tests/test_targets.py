"""Tests for skillbox.targets module."""

from skillbox.projects import ProjectEntry
from skillbox.targets import (
    AgentTarget,
    build_project_agent_paths,
    resolve_agent_targets,
    resolve_targets,
)


class TestResolveTargets:
    """Test target de-duplication and ordering."""

    def test_shared_directory_listed_once(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        targets = resolve_targets(root, "user", ["claude", "cursor"], home=home)
        assert targets == [home / ".claude/skills", home / ".cursor/skills"]

    def test_first_agent_claims_shared_dir(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        paths = build_project_agent_paths(root, home=home)
        targets = resolve_agent_targets(paths, "user", ["opencode", "claude"])
        assert targets == [
            AgentTarget("opencode", home / ".config/opencode/skills"),
            AgentTarget("opencode", home / ".claude/skills"),
        ]

    def test_project_scope(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        targets = resolve_targets(root, "project", ["codex", "antigravity"], home=home)
        assert targets == [root / ".codex/skills", root / ".agent/skills"]

    def test_no_duplicates_for_all_agents(self, tmp_path):
        targets = resolve_targets(
            tmp_path / "p",
            "user",
            ["opencode", "claude", "cursor", "codex", "amp", "antigravity"],
            home=tmp_path / "h",
        )
        assert len(targets) == len(set(targets))

    def test_unknown_agent_ignored(self, tmp_path):
        assert resolve_targets(tmp_path, "user", ["vim"], home=tmp_path) == []


class TestProjectOverrides:
    """Project agent path overrides replace the project scope only."""

    def test_override_replaces_project_dirs(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        project = ProjectEntry(root=str(root), agent_paths={"claude": [str(root / "custom")]})
        targets = resolve_targets(root, "project", ["claude"], project=project, home=home)
        assert targets == [root / "custom"]

    def test_override_does_not_touch_user_scope(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        project = ProjectEntry(root=str(root), agent_paths={"claude": [str(root / "custom")]})
        targets = resolve_targets(root, "user", ["claude"], project=project, home=home)
        assert targets == [home / ".claude/skills"]

    def test_other_agents_keep_catalog(self, tmp_path):
        home, root = tmp_path / "h", tmp_path / "p"
        project = ProjectEntry(root=str(root), agent_paths={"claude": [str(root / "custom")]})
        paths = build_project_agent_paths(root, project, home=home)
        assert paths["codex"].project == [root / ".codex/skills"]
