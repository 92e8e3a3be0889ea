"""Pytest configuration and shared fixtures."""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add skillbox to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def make_skill_markdown(name: str | None, description: str | None = "A test skill") -> str:
    lines = ["---"]
    if name is not None:
        lines.append(f"name: {name}")
    if description is not None:
        lines.append(f"description: {description}")
    lines.append("---")
    return "\n".join(lines) + f"\n\n# {name or 'Skill'}\n\nDo the thing.\n"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect every Skillbox location into a temporary directory.

    HOME, XDG_CONFIG_HOME and SKILLBOX_HOME all point below ``tmp_path``
    and the working directory is an empty ``work`` directory.

    Returns:
        The fake home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("SKILLBOX_HOME", str(tmp_path / "skillbox"))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("SKILLBOX_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SKILLBOX_LOG_FILE", raising=False)
    monkeypatch.chdir(work)
    return home


@pytest.fixture
def home(isolated_env: Path) -> Path:
    return isolated_env


@pytest.fixture
def skillbox_root(tmp_path: Path) -> Path:
    return tmp_path / "skillbox"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A git project root (contains ``.git``)."""
    root = tmp_path / "project"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture
def write_skill() -> Callable[..., Path]:
    """Create ``<parent>/<dir_name>/SKILL.md`` and return the directory."""

    def _write(
        parent: Path,
        dir_name: str,
        name: str | None = None,
        description: str | None = "A test skill",
        extra_files: dict[str, str] | None = None,
    ) -> Path:
        skill_dir = parent / dir_name
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(
            make_skill_markdown(name if name is not None else dir_name, description),
            encoding="utf-8",
        )
        for rel, contents in (extra_files or {}).items():
            path = skill_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(contents, encoding="utf-8")
        return skill_dir

    return _write


@pytest.fixture(autouse=True)
def reset_skillbox_logger():
    """Undo the handler/level changes ``main()`` makes to the skillbox logger."""
    yield
    logger = logging.getLogger("skillbox")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
