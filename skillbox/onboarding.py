"""First-run onboarding.

When no default agents are configured yet, ask which agents the user
works with (detected agents preselected) and save the answer.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import questionary
from questionary import Choice, Style

from skillbox.agents import ALL_AGENTS, detect_agents
from skillbox.config import SkillboxConfig, save_config, update_config

logger = logging.getLogger(__name__)

SKILLBOX_STYLE = Style(
    [
        ("qmark", "fg:ansicyan bold"),
        ("question", "bold"),
        ("pointer", "fg:ansiyellow bold"),
        ("highlighted", "fg:ansiyellow bold"),
        ("selected", "fg:ansigreen"),
        ("answer", "fg:ansicyan bold"),
        ("instruction", "fg:ansicyan"),
    ]
)


def should_onboard(config: SkillboxConfig, use_json: bool) -> bool:
    """Onboard only interactive, human-mode runs without configured agents."""
    if config.default_agents or use_json:
        return False
    return sys.stdin.isatty() and sys.stdout.isatty()


def prompt_agents(questionary_module: Any | None = None) -> list[str] | None:
    """Ask for the agents to install skills for.

    Returns:
        The selected agents, or None if the prompt was cancelled.
    """
    q = questionary_module or questionary
    detected = set(detect_agents())
    choices = [
        Choice(
            f"{agent} (detected)" if agent in detected else agent,
            value=agent,
            checked=agent in detected,
        )
        for agent in ALL_AGENTS
    ]
    answer: list[str] | None = q.checkbox(
        "Which agents do you use?",
        choices=choices,
        style=SKILLBOX_STYLE,
    ).ask()
    return answer


def run_onboarding(
    config: SkillboxConfig, questionary_module: Any | None = None
) -> SkillboxConfig:
    """Prompt for default agents and persist them.

    An empty or cancelled selection falls back to all agents.
    """
    selected = prompt_agents(questionary_module) or list(ALL_AGENTS)
    updated = update_config(config, default_agents=selected)
    save_config(updated)
    logger.info(f"Default agents set to {', '.join(selected)}")
    return updated
