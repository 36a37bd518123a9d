"""
Core data models for the audit engine.
"""

from enum import Enum
from typing import List, Tuple


class CheckState(Enum):
    """Результат проверки."""
    FAILED = "failed"        # Найдена проблема безопасности
    WARNED = "warned"        # Потенциальная проблема
    SUCCEEDED = "succeeded"  # Проверка пройдена
    SKIPPED = "skipped"      # Проверка не выполнялась

    @property
    def priority(self) -> int:
        """Приоритет при слиянии состояний (FAILED > WARNED > SUCCEEDED > SKIPPED)."""
        return _PRIORITY[self]

    def format(self) -> str:
        """Название состояния в rich-разметке."""
        name = self.value.capitalize()
        return f"[bold-{_STYLE[self]}]{name}[/bold-{_STYLE[self]}]"

    def symbol(self) -> str:
        """Символ состояния в rich-разметке."""
        return f"[{_STYLE[self]}]{_SYMBOL[self]} [/{_STYLE[self]}]"

    @classmethod
    def formats(cls) -> List[str]:
        """Заголовки всех состояний в порядке приоритета."""
        return [state.format() for state in cls]


_PRIORITY = {
    CheckState.FAILED: 3,
    CheckState.WARNED: 2,
    CheckState.SUCCEEDED: 1,
    CheckState.SKIPPED: 0,
}

_STYLE = {
    CheckState.FAILED: "fail",
    CheckState.WARNED: "warn",
    CheckState.SUCCEEDED: "success",
    CheckState.SKIPPED: "skip",
}

_SYMBOL = {
    CheckState.FAILED: "✕",
    CheckState.WARNED: "⚠",
    CheckState.SUCCEEDED: "✓",
    CheckState.SKIPPED: "?",
}


# (report, failed, warned, succeeded, skipped)
SummaryRow = Tuple[str, int, int, int, int]


def rollup(failed: int, warned: int, succeeded: int) -> CheckState:
    """
    Итоговое состояние контейнера по счётчикам дочерних проверок.

    Побеждает самое приоритетное состояние с ненулевым счётчиком,
    при всех нулях - SKIPPED.
    """
    if failed > 0:
        return CheckState.FAILED
    if warned > 0:
        return CheckState.WARNED
    if succeeded > 0:
        return CheckState.SUCCEEDED
    return CheckState.SKIPPED


def exit_code(state: CheckState) -> int:
    """Код завершения процесса для итогового состояния."""
    if state is CheckState.WARNED:
        return 2
    if state in (CheckState.SUCCEEDED, CheckState.SKIPPED):
        return 0
    return 1
