"""Install engine - materializes canonical skills into agent directories.

Each target base directory receives ``<base>/<skill name>`` either as a
directory symlink to the canonical store or as a copy of the skill's
top-level files. Failures are reported per target and never abort the
remaining targets.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from skillbox.errors import SkillboxError
from skillbox.store import METADATA_FILE, skill_dir
from skillbox.utils import read_json_file

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Outcome of installing into one target.

    ``mode`` is ``symlink``, ``copy`` or ``skipped``. A skipped result
    carries the error message; ``collision`` marks a pre-existing path
    that is not the expected symlink.
    """

    path: Path
    mode: str
    error: str | None = None
    collision: bool = False

    @property
    def ok(self) -> bool:
        return self.mode != "skipped"


# ──────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────


def is_symlink_to(link_path: Path, source: Path) -> bool:
    """True if ``link_path`` is a symlink whose target is ``source``."""
    if not link_path.is_symlink():
        return False
    try:
        return Path(os.readlink(link_path)) == source
    except OSError:
        return False


def is_managed_install(path: Path, skill_name: str) -> bool:
    """True if ``path`` links into the store or holds a copy of the skill.

    Copies are recognized by the ``skill.json`` copied along with them.
    """
    path = Path(path)
    if is_symlink_to(path, skill_dir(skill_name)):
        return True
    if path.is_symlink() or not path.is_dir():
        return False
    try:
        metadata = read_json_file(path / METADATA_FILE)
    except SkillboxError:
        return False
    return isinstance(metadata, dict) and metadata.get("name") == skill_name


def _copy_files(source_dir: Path, target_dir: Path) -> None:
    """Copy the regular files directly inside ``source_dir``.

    Subdirectories are not copied.
    """
    for entry in sorted(source_dir.iterdir()):
        if entry.is_dir():
            continue
        shutil.copyfile(entry, target_dir / entry.name)


def _install_symlink(source: Path, target: Path) -> InstallResult:
    if is_symlink_to(target, source):
        logger.debug(f"Symlink already in place: {target}")
        return InstallResult(path=target, mode="symlink")

    try:
        os.symlink(source, target, target_is_directory=True)
    except FileExistsError as e:
        logger.warning(f"Cannot link {target}: path already exists")
        return InstallResult(path=target, mode="skipped", error=str(e), collision=True)
    except OSError as e:
        logger.warning(f"Cannot link {target}: {e}")
        return InstallResult(path=target, mode="skipped", error=str(e))

    logger.info(f"Linked {target} -> {source}")
    return InstallResult(path=target, mode="symlink")


def _install_copy(source: Path, target: Path) -> InstallResult:
    try:
        # Switching from symlink to copy mode: drop our own link first
        if is_symlink_to(target, source):
            target.unlink()
        target.mkdir(parents=True, exist_ok=True)
        _copy_files(source, target)
    except OSError as e:
        logger.warning(f"Cannot copy into {target}: {e}")
        return InstallResult(path=target, mode="skipped", error=str(e))

    logger.info(f"Copied {source} -> {target}")
    return InstallResult(path=target, mode="copy")


# ──────────────────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────────────────


def install_skill_to_targets(
    skill_name: str,
    targets: list[Path],
    install_mode: str,
) -> list[InstallResult]:
    """Install a canonical skill into every target base directory.

    Args:
        skill_name: Name of the skill in the canonical store.
        targets: Base directories; the skill lands in ``<base>/<skill_name>``.
        install_mode: ``symlink`` or ``copy``.

    Returns:
        Exactly one InstallResult per target, in input order.
    """
    source = skill_dir(skill_name)
    results: list[InstallResult] = []

    for base in targets:
        target = Path(base) / skill_name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create {target.parent}: {e}")
            results.append(InstallResult(path=target, mode="skipped", error=str(e)))
            continue

        if install_mode == "symlink":
            results.append(_install_symlink(source, target))
        else:
            results.append(_install_copy(source, target))

    return results


def copy_skill_to_install_paths(skill_name: str, install_paths: list[Path]) -> None:
    """Refresh existing install directories from the canonical store.

    Paths that are symlinks into the store already reflect the new
    content and are left alone.
    """
    source = skill_dir(skill_name)
    for install_path in install_paths:
        install_path = Path(install_path)
        if is_symlink_to(install_path, source):
            continue
        install_path.mkdir(parents=True, exist_ok=True)
        _copy_files(source, install_path)
        logger.info(f"Synced {skill_name} into {install_path}")


def build_symlink_warnings(agent: str, results: list[InstallResult]) -> list[str]:
    """Human-readable warnings for the skipped results of one agent."""
    warnings: list[str] = []
    for result in results:
        if result.ok:
            continue
        name = result.path.name
        if result.collision:
            warnings.append(
                f"{name} ({agent}): already exists at {result.path}, "
                "remove it manually or use --install-mode copy"
            )
        else:
            warnings.append(f"{name} ({agent}): {result.error or 'unknown error'}")
    return warnings


def remove_install_path(path: Path) -> bool:
    """Delete one install (symlink, file or directory).

    Returns:
        True if something was removed.
    """
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    else:
        return False
    logger.info(f"Removed {path}")
    return True
