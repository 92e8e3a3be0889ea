"""Terminal and JSON output.

Human-readable output goes through rich consoles (stdout for results,
stderr for errors). JSON output is a single ``{ok, command, data|error}``
object per command, written without any styling.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)

_stdout = Console(highlight=False)
_stderr = Console(stderr=True, highlight=False)


def print_info(message: str = "") -> None:
    _stdout.print(message, markup=False, soft_wrap=True)


def print_warning(message: str) -> None:
    _stdout.print(Text(f"  ⚠ {message}", style="yellow"), soft_wrap=True)


def print_error(message: str) -> None:
    _stderr.print(Text(message, style="red"), soft_wrap=True)


def print_json(result: dict[str, Any]) -> None:
    _stdout.out(json.dumps(result, indent=2, ensure_ascii=False), highlight=False)


def json_result(
    command: str,
    data: Any = None,
    error: str | None = None,
    ok: bool | None = None,
) -> dict[str, Any]:
    """Build the JSON envelope; ``ok`` defaults to "no error"."""
    result: dict[str, Any] = {"ok": error is None if ok is None else ok, "command": command}
    if error is not None:
        result["error"] = {"message": error}
    if data is not None:
        result["data"] = data
    return result


def print_success(name: str, detail: str | None = None) -> None:
    line = Text("  ✓ ", style="green")
    line.append(name)
    if detail:
        line.append(f" ({detail})", style="dim")
    _stdout.print(line, soft_wrap=True)


def print_failure(name: str, reason: str) -> None:
    line = Text("  ✗ ", style="red")
    line.append(name)
    line.append(f" ({reason})", style="dim")
    _stdout.print(line, soft_wrap=True)


def print_skipped(name: str, reason: str) -> None:
    line = Text("  - ", style="yellow")
    line.append(name)
    line.append(f" ({reason})", style="dim")
    _stdout.print(line, soft_wrap=True)


def print_progress_result(name: str, status: str, detail: str | None = None) -> None:
    """Print the outcome of one item of a batch (success/failure/skipped)."""
    if status == "failed":
        print_failure(name, detail or "unknown error")
    elif status == "skipped":
        print_skipped(name, detail or "skipped")
    else:
        print_success(name, detail)


@contextmanager
def spinner(message: str, enabled: bool = True) -> Iterator[None]:
    """Show a transient spinner while a step runs (interactive terminals only)."""
    if not enabled or not _stdout.is_terminal:
        yield
        return
    with _stdout.status(message):
        yield


def handle_command_error(use_json: bool, command: str, error: Exception) -> int:
    """Report an invocation-level failure and return the exit code."""
    message = str(error) or error.__class__.__name__
    logger.debug(f"{command} failed", exc_info=error)
    if use_json:
        print_json(json_result(command, error=message))
    else:
        print_error(message)
    return 1
