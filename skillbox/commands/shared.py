"""Helpers shared by the command handlers."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from skillbox.config import SkillboxConfig, load_config
from skillbox.index import InstallRecord, SkillIndex, SkillRecord, SkillSource, upsert_skill
from skillbox.onboarding import run_onboarding, should_onboard
from skillbox.output import print_info, print_warning
from skillbox.runtime import (
    RuntimeInstallResult,
    ensure_project_registered,
    install_skill_to_runtime,
    resolve_runtime,
)

logger = logging.getLogger(__name__)


def load_command_config(use_json: bool) -> SkillboxConfig:
    """Load the config, running first-run onboarding when appropriate."""
    config = load_config()
    if should_onboard(config, use_json):
        config = run_onboarding(config)
    return config


def install_and_record(
    index: SkillIndex,
    name: str,
    source: SkillSource,
    metadata: dict[str, Any],
    args: Any,
    config: SkillboxConfig,
) -> tuple[SkillIndex, RuntimeInstallResult]:
    """Install a stored skill for the current runtime and merge the index.

    The record is merged twice: once before installing so the skill is
    indexed even if the install step fails, and once with the installs.
    """
    patch = SkillRecord(
        name=name,
        source=source,
        checksum=metadata.get("checksum"),
        updated_at=metadata.get("updatedAt"),
        namespace=metadata.get("namespace"),
        categories=metadata.get("categories"),
        tags=metadata.get("tags"),
    )
    index = upsert_skill(index, patch)

    runtime = resolve_runtime(config, global_=args.global_, agents=args.agents)
    project = ensure_project_registered(runtime.project_root, runtime.scope)
    result = install_skill_to_runtime(name, runtime, config, project)

    return upsert_skill(index, dataclasses.replace(patch, installs=result.installs)), result


def scope_label(install: InstallRecord) -> str:
    if install.scope == "project":
        return f"project:{install.project_root}"
    return "user"


def print_install_summary(
    name: str, source_type: str, source_value: str, result: RuntimeInstallResult
) -> None:
    print_info(f"Skill Added: {name}")
    print_info()
    print_info(f"Source: {source_type}")
    print_info(f"  {source_value}")
    print_info()
    if result.installs:
        print_info("Installed to:")
        for install in result.installs:
            print_info(f"  ✓ {scope_label(install)}/{install.agent}")
    else:
        print_info("No agent targets were updated.")
    for warning in result.warnings:
        print_warning(warning)


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
