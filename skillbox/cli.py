#!/usr/bin/env python3
"""Skillbox CLI - Main entry point for skill management."""

from __future__ import annotations

import argparse
import sys

from skillbox import __version__
from skillbox.commands.add import cmd_add
from skillbox.commands.agent import cmd_agent
from skillbox.commands.config import cmd_config_get, cmd_config_set
from skillbox.commands.convert import cmd_convert
from skillbox.commands.import_skill import cmd_import
from skillbox.commands.list import cmd_list
from skillbox.commands.meta import cmd_meta_set
from skillbox.commands.project import (
    cmd_project_add,
    cmd_project_inspect,
    cmd_project_list,
    cmd_project_sync,
)
from skillbox.commands.remove import cmd_remove
from skillbox.commands.status import cmd_status
from skillbox.commands.update import cmd_update
from skillbox.logging_config import set_debug_mode, setup_logging


def _add_json(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="JSON output")


def _add_agents(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--agents", help="Comma-separated list of agents (default: configured agents)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Skillbox - local-first, agent-agnostic skills manager",
        prog="skillbox",
    )
    parser.add_argument("--version", action="version", version=f"skillbox {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # add
    p_add = subparsers.add_parser("add", help="Add a skill from a URL or repository")
    p_add.add_argument("input", nargs="?", help="Skill URL, GitHub repo URL or owner/repo")
    p_add.add_argument("--name", help="Override the skill name")
    p_add.add_argument(
        "--global", dest="global_", action="store_true", help="Install to user scope"
    )
    _add_agents(p_add)
    p_add.add_argument(
        "--skill", action="append", help="Repo skill to install (repeatable)"
    )
    p_add.add_argument("--list", action="store_true", help="List the skills of a repo")
    p_add.add_argument("--ingest", metavar="FILE", help="Ingest agent JSON (file or '-')")
    _add_json(p_add)
    p_add.set_defaults(func=cmd_add)

    # import
    p_import = subparsers.add_parser("import", help="Import a local skill directory")
    p_import.add_argument("path", nargs="?", help="Path to a skill directory")
    p_import.add_argument(
        "--global",
        dest="global_",
        action="store_true",
        help="Import untracked skills from user agent directories",
    )
    _add_agents(p_import)
    _add_json(p_import)
    p_import.set_defaults(func=cmd_import)

    # list
    p_list = subparsers.add_parser("list", help="List skills")
    p_list.add_argument(
        "--global", dest="global_", action="store_true", help="List user-scope skills only"
    )
    _add_agents(p_list)
    _add_json(p_list)
    p_list.set_defaults(func=cmd_list)

    # status
    p_status = subparsers.add_parser("status", help="Check skills for upstream changes")
    _add_json(p_status)
    p_status.set_defaults(func=cmd_status)

    # update
    p_update = subparsers.add_parser("update", help="Update skills from their source")
    p_update.add_argument("name", nargs="?", help="Skill name (default: all)")
    p_update.add_argument("--project", metavar="PATH", help="Only update installs for a project")
    _add_json(p_update)
    p_update.set_defaults(func=cmd_update)

    # remove
    p_remove = subparsers.add_parser("remove", help="Remove a skill")
    p_remove.add_argument("name", help="Skill name")
    p_remove.add_argument("--project", metavar="PATH", help="Only remove installs for a project")
    _add_json(p_remove)
    p_remove.set_defaults(func=cmd_remove)

    # project
    p_project = subparsers.add_parser("project", help="Manage projects")
    p_project.set_defaults(help_parser=p_project)
    project_subparsers = p_project.add_subparsers(dest="project_command", help="Project commands")

    p_proj_add = project_subparsers.add_parser(
        "add", help="Register a project and import its skills"
    )
    p_proj_add.add_argument("path", help="Project path")
    p_proj_add.add_argument(
        "--agent-path",
        action="append",
        metavar="AGENT=PATH",
        help="Agent skill directory override (repeatable)",
    )
    _add_json(p_proj_add)
    p_proj_add.set_defaults(func=cmd_project_add)

    p_proj_list = project_subparsers.add_parser("list", help="List registered projects")
    _add_json(p_proj_list)
    p_proj_list.set_defaults(func=cmd_project_list)

    p_proj_inspect = project_subparsers.add_parser("inspect", help="Show project details")
    p_proj_inspect.add_argument("path", help="Project path")
    _add_json(p_proj_inspect)
    p_proj_inspect.set_defaults(func=cmd_project_inspect)

    p_proj_sync = project_subparsers.add_parser("sync", help="Re-copy project installs")
    p_proj_sync.add_argument("path", help="Project path")
    _add_json(p_proj_sync)
    p_proj_sync.set_defaults(func=cmd_project_sync)

    # config
    p_config = subparsers.add_parser("config", help="View or edit skillbox config")
    p_config.set_defaults(help_parser=p_config)
    config_subparsers = p_config.add_subparsers(dest="config_command", help="Config commands")

    p_config_get = config_subparsers.add_parser("get", help="Show config")
    _add_json(p_config_get)
    p_config_get.set_defaults(func=cmd_config_get)

    p_config_set = config_subparsers.add_parser("set", help="Change config")
    p_config_set.add_argument(
        "--default-agent", action="append", help="Default agent (repeatable, replaces list)"
    )
    p_config_set.add_argument(
        "--add-agent", action="append", help="Add to default agents (repeatable)"
    )
    p_config_set.add_argument("--default-scope", help="Default scope: project or user")
    p_config_set.add_argument("--install-mode", help="Install mode: symlink or copy")
    _add_json(p_config_set)
    p_config_set.set_defaults(func=cmd_config_set)

    # meta
    p_meta = subparsers.add_parser("meta", help="Manage skill metadata")
    p_meta.set_defaults(help_parser=p_meta)
    meta_subparsers = p_meta.add_subparsers(dest="meta_command", help="Meta commands")

    p_meta_set = meta_subparsers.add_parser("set", help="Set categories, tags or namespace")
    p_meta_set.add_argument("name", help="Skill name")
    p_meta_set.add_argument("--category", action="append", help="Category (repeatable)")
    p_meta_set.add_argument("--tag", action="append", help="Tag (repeatable)")
    p_meta_set.add_argument("--namespace", help="Namespace")
    _add_json(p_meta_set)
    p_meta_set.set_defaults(func=cmd_meta_set)

    # agent
    p_agent = subparsers.add_parser("agent", help="Print agent-friendly usage")
    _add_json(p_agent)
    p_agent.set_defaults(func=cmd_agent)

    # convert
    p_convert = subparsers.add_parser("convert", help="Draft a skill from any URL")
    p_convert.add_argument("url", help="Source URL to convert")
    p_convert.add_argument("--name", help="Override skill name")
    p_convert.add_argument("--output", metavar="DIR", help="Output directory")
    p_convert.add_argument("--agent", action="store_true", help="Delegate conversion to agent")
    _add_json(p_convert)
    p_convert.set_defaults(func=cmd_convert)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()
    if args.verbose:
        set_debug_mode(True)

    if not hasattr(args, "func"):
        # No command, or a command group (project/config/meta) without an action
        getattr(args, "help_parser", parser).print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
