"""
Report: a named group of checks that run one after another.
"""

import logging
from typing import List, Sequence

from .base_check import BaseCheck
from .models import CheckState, rollup

logger = logging.getLogger(__name__)


class Report:
    """Отчёт - набор проверок с общим именем отчёта."""

    def __init__(self, name: str, checks: Sequence[BaseCheck]):
        """
        Args:
            name: Имя отчёта (как в конфигурации)
            checks: Проверки в порядке регистрации
        """
        self.name = name
        self.checks: List[BaseCheck] = list(checks)
        self.failed = 0
        self.warned = 0
        self.succeeded = 0
        self.skipped = 0

    @property
    def display_name(self) -> str:
        """Имя для вывода: каждое слово с заглавной буквы."""
        return self.name.lower().title()

    def run(self, io) -> None:
        """
        Запустить все проверки отчёта последовательно.

        Args:
            io: Presenter (ConsoleStyle), получает строку статуса и детализацию каждой проверки
        """
        logger.info(f"Running report {self.name} with {len(self.checks)} checks")
        last_idx = len(self.checks) - 1

        for idx, check in enumerate(self.checks):
            io.indicator(
                f"[mark]⧗ [/mark]{check.check_name}: [mark]Running[/mark]",
                lambda check=check: self._result_generation(check),
            )

            details = check.details

            if details:
                if details[-1] != "" and idx != last_idx:
                    details.append("")

                io.indent(details)

            self._count(check.state)

    def _result_generation(self, check: BaseCheck) -> str:
        """Выполнить проверку и вернуть строку статуса."""
        check.execute()
        return f"{check.state.symbol()}{check.check_name}: {check.state.format()}"

    def _count(self, state: CheckState) -> None:
        if state is CheckState.FAILED:
            self.failed += 1
        elif state is CheckState.WARNED:
            self.warned += 1
        elif state is CheckState.SUCCEEDED:
            self.succeeded += 1
        else:
            self.skipped += 1

    @property
    def state(self) -> CheckState:
        """Худшее состояние среди проверок (по счётчикам)."""
        return rollup(self.failed, self.warned, self.succeeded)
