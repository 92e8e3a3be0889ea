"""Tests for skillbox.install module."""

import os

from skillbox.install import (
    build_symlink_warnings,
    copy_skill_to_install_paths,
    install_skill_to_targets,
    is_managed_install,
    is_symlink_to,
    remove_install_path,
)
from skillbox.store import skill_dir, write_skill_files


def _store_skill(name="demo", extra=None):
    target = write_skill_files(name, f"---\nname: {name}\ndescription: d\n---\n", {"name": name})
    for rel, contents in (extra or {}).items():
        path = target / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents)
    return target


class TestSymlinkInstall:
    """Test symlink mode."""

    def test_creates_symlink(self, tmp_path):
        source = _store_skill()
        results = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        assert results[0].mode == "symlink"
        assert is_symlink_to(tmp_path / "a" / "demo", source)

    def test_reinstall_is_idempotent(self, tmp_path):
        _store_skill()
        first = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        second = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        assert first[0].mode == second[0].mode == "symlink"
        assert os.readlink(tmp_path / "a" / "demo") == str(skill_dir("demo"))

    def test_collision_is_skipped_not_overwritten(self, tmp_path):
        _store_skill()
        existing = tmp_path / "a" / "demo"
        existing.mkdir(parents=True)
        (existing / "mine.txt").write_text("keep")

        results = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")

        assert results[0].mode == "skipped"
        assert results[0].collision
        assert (existing / "mine.txt").read_text() == "keep"
        assert not existing.is_symlink()

    def test_one_result_per_target(self, tmp_path):
        _store_skill()
        (tmp_path / "b" / "demo").mkdir(parents=True)
        targets = [tmp_path / "a", tmp_path / "b", tmp_path / "c"]
        results = install_skill_to_targets("demo", targets, "symlink")
        assert [r.path for r in results] == [t / "demo" for t in targets]
        assert [r.mode for r in results] == ["symlink", "skipped", "symlink"]


class TestCopyInstall:
    """Test copy mode."""

    def test_copies_top_level_files_only(self, tmp_path):
        _store_skill(extra={"extra.md": "x", "references/api.md": "deep"})
        results = install_skill_to_targets("demo", [tmp_path / "a"], "copy")
        target = tmp_path / "a" / "demo"
        assert results[0].mode == "copy"
        assert (target / "SKILL.md").exists()
        assert (target / "extra.md").read_text() == "x"
        assert not (target / "references").exists()

    def test_copy_replaces_own_symlink(self, tmp_path):
        _store_skill()
        install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        results = install_skill_to_targets("demo", [tmp_path / "a"], "copy")
        target = tmp_path / "a" / "demo"
        assert results[0].mode == "copy"
        assert not target.is_symlink()
        assert (target / "SKILL.md").exists()


class TestCopySkillToInstallPaths:
    def test_refreshes_copies_and_skips_links(self, tmp_path):
        source = _store_skill()
        copy_dir = tmp_path / "copy" / "demo"
        link_dir = tmp_path / "link" / "demo"
        link_dir.parent.mkdir()
        os.symlink(source, link_dir, target_is_directory=True)

        copy_skill_to_install_paths("demo", [copy_dir, link_dir])

        assert (copy_dir / "SKILL.md").read_text() == (source / "SKILL.md").read_text()
        assert link_dir.is_symlink()


class TestWarningsAndRemoval:
    def test_collision_warning(self, tmp_path):
        _store_skill()
        (tmp_path / "a" / "demo").mkdir(parents=True)
        results = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        warnings = build_symlink_warnings("claude", results)
        assert len(warnings) == 1
        assert "demo (claude)" in warnings[0]
        assert "already exists" in warnings[0]

    def test_no_warning_for_success(self, tmp_path):
        _store_skill()
        results = install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        assert build_symlink_warnings("claude", results) == []

    def test_remove_install_path(self, tmp_path):
        _store_skill()
        install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        assert remove_install_path(tmp_path / "a" / "demo")
        assert not (tmp_path / "a" / "demo").exists()
        assert skill_dir("demo").exists()
        assert not remove_install_path(tmp_path / "a" / "demo")


# ============================================================
# Managed install detection
# ============================================================


class TestIsManagedInstall:
    """Test recognition of directories that hold an install of a skill."""

    def test_store_symlink(self, tmp_path):
        _store_skill()
        install_skill_to_targets("demo", [tmp_path / "a"], "symlink")
        assert is_managed_install(tmp_path / "a" / "demo", "demo")

    def test_copy_with_matching_metadata(self, tmp_path):
        _store_skill()
        install_skill_to_targets("demo", [tmp_path / "a"], "copy")
        assert is_managed_install(tmp_path / "a" / "demo", "demo")
        assert not is_managed_install(tmp_path / "a" / "demo", "other")

    def test_foreign_directory(self, tmp_path):
        _store_skill()
        foreign = tmp_path / "a" / "demo"
        foreign.mkdir(parents=True)
        (foreign / "SKILL.md").write_text("hand written")
        assert not is_managed_install(foreign, "demo")

    def test_broken_metadata_and_missing_path(self, tmp_path):
        broken = tmp_path / "a" / "demo"
        broken.mkdir(parents=True)
        (broken / "skill.json").write_text("{nope")
        assert not is_managed_install(broken, "demo")
        assert not is_managed_install(tmp_path / "missing", "demo")
