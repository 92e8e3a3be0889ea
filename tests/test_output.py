"""Tests for terminal and JSON output helpers."""

import json

from skillbox.errors import SkillboxError
from skillbox.output import (
    handle_command_error,
    json_result,
    print_json,
    print_progress_result,
    spinner,
)


class TestJsonResult:
    """Test the JSON envelope."""

    def test_success(self):
        assert json_result("list", {"skills": []}) == {
            "ok": True,
            "command": "list",
            "data": {"skills": []},
        }

    def test_error_without_data(self):
        assert json_result("add", error="boom") == {
            "ok": False,
            "command": "add",
            "error": {"message": "boom"},
        }

    def test_explicit_ok_overrides(self):
        result = json_result("add", {"x": 1}, error="warn", ok=True)
        assert result["ok"] is True
        assert result["error"] == {"message": "warn"}


class TestPrinting:
    """Test stdout/stderr rendering."""

    def test_print_json_is_plain(self, capsys):
        print_json(json_result("agent", {"snippet": "[bold]x[/bold]"}))
        out = capsys.readouterr().out
        assert json.loads(out)["data"]["snippet"] == "[bold]x[/bold]"
        assert "\x1b[" not in out

    def test_progress_results(self, capsys):
        print_progress_result("alpha", "ok")
        print_progress_result("beta", "failed", "404")
        print_progress_result("gamma", "skipped", "missing description")
        out = capsys.readouterr().out
        assert "✓ alpha" in out
        assert "✗ beta (404)" in out
        assert "- gamma (missing description)" in out

    def test_spinner_is_noop_when_not_a_terminal(self, capsys):
        with spinner("working"):
            pass
        assert capsys.readouterr().out == ""


class TestHandleCommandError:
    """Test invocation-level error reporting."""

    def test_json(self, capsys):
        code = handle_command_error(True, "remove", SkillboxError("Skill not found"))
        assert code == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload == {
            "ok": False,
            "command": "remove",
            "error": {"message": "Skill not found"},
        }

    def test_human_goes_to_stderr(self, capsys):
        code = handle_command_error(False, "remove", SkillboxError("Skill not found"))
        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert "Skill not found" in captured.err
