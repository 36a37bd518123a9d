"""
Code checks: static security analysis of the project sources.
"""

import json
from typing import Any, Dict, List

from rich.markup import escape

from ..core.base_check import BaseCheck
from ..shell import ShellExecutor


class CodeCheck(BaseCheck):
    report_name = "code"


class StaticAnalysisCheck(CodeCheck):
    """Статический анализ кода через bandit."""

    check_name = "Static analysis does not find issues"

    def __init__(self, shell: ShellExecutor):
        super().__init__()
        self.shell = shell

    def run(self) -> None:
        if not self.shell.command_exists("bandit"):
            self.append_details([
                "Cannot find [skip]bandit[/skip] executable. Please make sure to install bandit using:",
                "[cmd-warn] pip install [cmd-skip]bandit[/cmd-skip] [/cmd-warn]",
            ])
            return

        result = self.shell.run_command("bandit", "-r", ".", "-f", "json", "-q", "-x", "./.venv,./venv,./tests")

        if result.exit_code == 0:
            self.success()
        elif result.exit_code == 1:
            self.append_findings(json.loads(result.stdout))
        else:
            self.warn([
                "There was an issue running [warn]bandit[/warn], you can execute it yourself using:",
                "[cmd-warn] bandit -r . [/cmd-warn]",
            ])

    def append_findings(self, report: Dict[str, Any]) -> None:
        """
        Одна строка FAILED на каждую находку и ошибку bandit.

        Код выхода 1 всегда означает FAILED, даже если bandit сообщил
        только об ошибках разбора файлов.
        """
        findings: List[Dict[str, Any]] = report.get("results") or []
        errors: List[Dict[str, Any]] = report.get("errors") or []

        for finding in findings:
            self.fail(
                f"- [fail]{escape(str(finding.get('test_id', '?')))}[/fail] "
                f"({escape(str(finding.get('issue_severity', 'UNKNOWN')).lower())}) "
                f"{escape(str(finding.get('issue_text', '')))} "
                f"[mark]{escape(str(finding.get('filename', '?')))}:{finding.get('line_number', '?')}[/mark]"
            )

        for error in errors:
            self.fail(
                f"- [fail]Could not analyse[/fail] [mark]{escape(str(error.get('filename', '?')))}[/mark]: "
                f"{escape(str(error.get('reason', 'unknown error')))}"
            )

        self.fail([
            "",
            "Execute [cmd-warn] bandit -r . [/cmd-warn] for further details.",
        ])
