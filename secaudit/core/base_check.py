"""
Base class for all security checks.
"""

import logging
import time
import traceback
from abc import ABC, abstractmethod
from typing import List, Sequence, Union

from rich.markup import escape

from .models import CheckState

logger = logging.getLogger(__name__)

Details = Union[str, Sequence[str], None]


class BaseCheck(ABC):
    """
    Базовый класс для всех проверок.

    Предоставляет:
    - Шаблон метода execute() с изоляцией ошибок
    - Монотонное слияние состояний (fail > warn > success)
    - Накопление строк детализации
    - Логирование

    Подкласс задаёт check_name, report_name и реализует run().
    Строки детализации - rich-разметка.
    """

    # Имя проверки для вывода
    check_name: str = ""

    # Имя отчёта, к которому относится проверка
    report_name: str = ""

    def __init__(self):
        self._state = CheckState.SKIPPED
        self._details: List[str] = []
        self.logger = logging.getLogger(f"secaudit.{self.report_name}.{type(self).__name__}")

    @abstractmethod
    def run(self) -> None:
        """
        Выполнить проверку (должен быть реализован в подклассах).

        Может выбрасывать любые исключения: execute() превратит их в FAILED.
        """
        pass

    @property
    def state(self) -> CheckState:
        return self._state

    @property
    def details(self) -> List[str]:
        return list(self._details)

    def append_details(self, details: Details = None) -> None:
        """
        Добавить строки детализации в указанном порядке.

        Args:
            details: Строка или последовательность строк. Пустой ввод ничего не меняет.
        """
        if not details:
            return

        if isinstance(details, str):
            self._details.append(details)
        else:
            self._details.extend(details)

    def fail(self, details: Details = None) -> None:
        """FAILED перезаписывает любое состояние."""
        self.append_details(details)
        self._state = CheckState.FAILED

    def warn(self, details: Details = None) -> None:
        """WARNED не перезаписывает FAILED."""
        self.append_details(details)

        if self._state is not CheckState.FAILED:
            self._state = CheckState.WARNED

    def success(self, details: Details = None) -> None:
        """SUCCEEDED выставляется только из SKIPPED."""
        self.append_details(details)

        if self._state is CheckState.SKIPPED:
            self._state = CheckState.SUCCEEDED

    def finish(self, details: Details = None) -> None:
        """Синоним success()."""
        self.success(details)

    def execute(self) -> None:
        """
        Запустить проверку безопасно.

        Исключение из run() не пробрасывается: состояние становится FAILED,
        а в детализацию добавляются тип и текст ошибки и трассировка.
        """
        self.logger.debug(f"Starting {self.check_name}...")
        start_time = time.perf_counter()

        try:
            self.run()
        except Exception as e:
            self.logger.error(f"{self.check_name} failed with exception: {e}", exc_info=True)
            self.fail([
                escape(f"{type(e).__name__}: {e}"),
                escape(traceback.format_exc().rstrip()),
            ])

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.logger.info(
            f"Completed {self.check_name}: "
            f"state={self._state.value}, "
            f"details={len(self._details)}, "
            f"duration={duration_ms:.2f}ms"
        )
