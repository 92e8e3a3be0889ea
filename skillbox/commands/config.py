"""`skillbox config` - view or edit the Skillbox settings."""

from __future__ import annotations

import json
from typing import Any

from skillbox.config import load_config, save_config, update_config
from skillbox.errors import SkillboxError
from skillbox.output import handle_command_error, json_result, print_info, print_json


def cmd_config_get(args: Any) -> int:
    """Print the current configuration."""
    try:
        config = load_config()
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "config get", e)

    if args.json:
        print_json(json_result("config get", config.to_dict()))
    else:
        print_info(json.dumps(config.to_dict(), indent=2))
    return 0


def cmd_config_set(args: Any) -> int:
    """Change default agents, scope or install mode."""
    try:
        config = update_config(
            load_config(),
            default_agents=args.default_agent,
            add_agents=args.add_agent,
            default_scope=args.default_scope,
            install_mode=args.install_mode,
        )
        save_config(config)
    except (SkillboxError, OSError) as e:
        return handle_command_error(args.json, "config set", e)

    if args.json:
        print_json(json_result("config set", config.to_dict()))
    else:
        print_info("Config updated.")
    return 0
