"""
Pytest configuration and fixtures.

Использование:
    pytest tests/ -v
"""

from io import StringIO
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from rich.console import Console

from secaudit.config import Settings
from secaudit.console import ConsoleStyle
from secaudit.core.base_check import BaseCheck
from secaudit.shell import CommandResult


# ═══════════════════════════════════════════════════════
# PRESENTER
# ═══════════════════════════════════════════════════════

@pytest.fixture
def io():
    """ConsoleStyle, пишущий в StringIO (без цвета)"""
    console = Console(file=StringIO(), width=120, color_system=None, force_terminal=False)
    return ConsoleStyle(console)


def output_of(io: ConsoleStyle) -> str:
    return io.console.file.getvalue()


@pytest.fixture
def read_output():
    """Функция, возвращающая всё, что напечатал io"""
    return output_of


# ═══════════════════════════════════════════════════════
# SCRIPTED CHECKS
# ═══════════════════════════════════════════════════════

class ScriptedCheck(BaseCheck):
    """
    Проверка с заранее заданным результатом.

    outcome: "fail", "warn", "success", "skip" или "raise".
    """

    check_name = "Scripted"

    def __init__(
        self,
        outcome: str = "success",
        details: Optional[Sequence[str]] = None,
        report_name: str = "x",
        check_name: Optional[str] = None,
    ):
        self.report_name = report_name
        if check_name is not None:
            self.check_name = check_name
        super().__init__()
        self.outcome = outcome
        self.scripted_details = list(details or [])
        self.runs = 0

    def run(self) -> None:
        self.runs += 1

        if self.outcome == "raise":
            raise RuntimeError("boom")
        if self.outcome == "fail":
            self.fail(self.scripted_details)
        elif self.outcome == "warn":
            self.warn(self.scripted_details)
        elif self.outcome == "success":
            self.success(self.scripted_details)
        else:
            self.append_details(self.scripted_details)


@pytest.fixture
def make_check():
    """Фабрика ScriptedCheck"""
    return ScriptedCheck


# ═══════════════════════════════════════════════════════
# SHELL
# ═══════════════════════════════════════════════════════

class FakeShell:
    """ShellExecutor без запуска процессов."""

    def __init__(
        self,
        commands: Sequence[str] = (),
        results: Optional[Dict[str, CommandResult]] = None,
    ):
        self.commands = set(commands)
        self.results = results or {}
        self.calls: List[Tuple[str, ...]] = []

    def command_exists(self, command_name: str) -> bool:
        return command_name in self.commands

    def run_command(self, command_name: str, *args: str) -> CommandResult:
        self.calls.append((command_name, *args))
        return self.results[command_name]


@pytest.fixture
def fake_shell():
    """Фабрика FakeShell"""
    return FakeShell


# ═══════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings с корнем проекта во временной директории"""
    monkeypatch.chdir(tmp_path)
    for key in ("SECAUDIT_APP__BASE_URL", "SECAUDIT_CHECKS", "SECAUDIT_AUDITS", "SECAUDIT_PROJECT_ROOT"):
        monkeypatch.delenv(key, raising=False)
    return Settings(project_root=tmp_path)
