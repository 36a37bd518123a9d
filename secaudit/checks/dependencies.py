"""
Dependency checks: consistency and known vulnerabilities of installed packages.
"""

import json
from typing import Any, Dict, List

from rich.markup import escape

from ..core.base_check import BaseCheck
from ..shell import ShellExecutor


class DependenciesCheck(BaseCheck):
    report_name = "dependencies"

    def __init__(self, shell: ShellExecutor):
        super().__init__()
        self.shell = shell

    def require_command(self, command_name: str, package: str) -> bool:
        """Проверить наличие команды, иначе оставить SKIPPED с подсказкой."""
        if self.shell.command_exists(command_name):
            return True

        self.append_details([
            f"Cannot find [skip]{command_name}[/skip] executable. Please make sure to install it using:",
            f"[cmd-warn] pip install [cmd-skip]{package}[/cmd-skip] [/cmd-warn]",
        ])
        return False


class LockedDependenciesCheck(DependenciesCheck):
    """Установленные пакеты не конфликтуют между собой (pip check)."""

    check_name = "Installed dependencies have compatible requirements"

    def run(self) -> None:
        if not self.require_command("pip", "pip"):
            return

        result = self.shell.run_command("pip", "check")

        if result.exit_code != 0:
            broken = [line for line in result.stdout.splitlines() if line.strip()]
            self.fail([
                "Some installed dependencies are [warn]not[/warn] compatible with each other:",
                *[f"- {escape(line)}" for line in broken],
                "",
                "You can list the conflicts again using [cmd-warn] pip [cmd-success]check[/cmd-success] [/cmd-warn]",
            ])

        self.finish()


class VulnerableDependenciesCheck(DependenciesCheck):
    """Нет установленных пакетов с известными уязвимостями (pip-audit)."""

    check_name = "No known vulnerable dependencies installed"

    def run(self) -> None:
        if not self.require_command("pip-audit", "pip-audit"):
            return

        result = self.shell.run_command("pip-audit", "--format", "json", "--progress-spinner", "off")
        response = json.loads(result.stdout)

        # Старые версии pip-audit выдают список, новые - объект
        dependencies: List[Dict[str, Any]] = (
            response if isinstance(response, list) else response.get("dependencies", [])
        )

        vulnerable = 0
        for dependency in dependencies:
            name = escape(str(dependency.get("name", "?")))

            if dependency.get("skip_reason"):
                self.warn([
                    f"- Package [warn]{name}[/warn] could not be audited",
                    f"  reason: {escape(str(dependency['skip_reason']))}",
                ])
                continue

            vulns = dependency.get("vulns") or []
            if not vulns:
                continue

            vulnerable += 1
            messages = [f"- Vulnerable package [fail]{name}[/fail] {escape(str(dependency.get('version', '')))} found"]

            for vuln in vulns:
                fixes = ", ".join(vuln.get("fix_versions") or []) or "no fix available"
                messages.append(f"  [fail]{escape(str(vuln.get('id', '?')))}[/fail]: fixed in {escape(fixes)}")

            self.fail(messages)

        if vulnerable:
            self.append_details([
                "",
                "Execute [cmd-warn] pip-audit [/cmd-warn] for further details.",
            ])

        self.finish()
