"""Tests for skillbox.onboarding module."""

import sys

from skillbox.agents import ALL_AGENTS
from skillbox.config import SkillboxConfig, load_config
from questionary import Style

from skillbox.onboarding import SKILLBOX_STYLE, run_onboarding, should_onboard


class _FakeQuestion:
    def __init__(self, answer):
        self._answer = answer

    def ask(self):
        return self._answer


class FakeQuestionary:
    """Stands in for the questionary module and records the prompt."""

    def __init__(self, answer):
        self.answer = answer
        self.choices = None
        self.style = None

    def checkbox(self, message, choices, style=None):
        self.choices = choices
        self.style = style
        return _FakeQuestion(self.answer)


class TestShouldOnboard:
    def test_configured_agents_skip(self):
        assert not should_onboard(SkillboxConfig(default_agents=["claude"]), use_json=False)

    def test_json_skips(self):
        assert not should_onboard(SkillboxConfig(), use_json=True)

    def test_requires_tty(self, monkeypatch):
        monkeypatch.setattr(sys.stdin, "isatty", lambda: False, raising=False)
        assert not should_onboard(SkillboxConfig(), use_json=False)


class TestRunOnboarding:
    def test_saves_selection(self):
        fake = FakeQuestionary(["claude", "codex"])
        config = run_onboarding(SkillboxConfig(), questionary_module=fake)
        assert config.default_agents == ["claude", "codex"]
        assert load_config().default_agents == ["claude", "codex"]

    def test_detected_agents_preselected(self, home):
        (home / ".claude").mkdir()
        fake = FakeQuestionary(["claude"])
        run_onboarding(SkillboxConfig(), questionary_module=fake)
        checked = {choice.value for choice in fake.choices if choice.checked}
        assert checked == {"claude"}

    def test_cancel_means_all_agents(self):
        config = run_onboarding(SkillboxConfig(), questionary_module=FakeQuestionary(None))
        assert config.default_agents == ALL_AGENTS

    def test_prompt_uses_skillbox_style(self):
        fake = FakeQuestionary(["claude"])
        run_onboarding(SkillboxConfig(), questionary_module=fake)
        assert fake.style is SKILLBOX_STYLE


class TestSkillboxStyle:
    def test_is_a_questionary_style(self):
        assert isinstance(SKILLBOX_STYLE, Style)
        assert ("pointer", "fg:ansiyellow bold") in SKILLBOX_STYLE.style_rules
