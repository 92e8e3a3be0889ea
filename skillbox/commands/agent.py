"""`skillbox agent` - usage notes for AI agents driving Skillbox."""

from __future__ import annotations

from typing import Any

from skillbox.output import json_result, print_info, print_json

AGENT_SNIPPET = """Use skillbox for skill management.

Common workflow:
1) skillbox list --json
2) skillbox status --json
3) skillbox update <name> --json

If you need to install a new skill from a URL, run:
skillbox add <url> [--name <name>]

If a URL is not a valid skill, run:
skillbox convert <url> --agent
"""


def cmd_agent(args: Any) -> int:
    if args.json:
        print_json(json_result("agent", {"snippet": AGENT_SNIPPET}))
    else:
        print_info(AGENT_SNIPPET)
    return 0
