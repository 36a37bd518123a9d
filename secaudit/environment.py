"""
Snapshot of the process-wide interpreter environment.

Checks receive an EnvironmentProbe at construction instead of reading
os.environ / sys.flags themselves, so tests can pass any environment.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class EnvironmentProbe:
    """Неизменяемый снимок окружения интерпретатора."""

    environ: Mapping[str, str] = field(default_factory=dict)
    dev_mode: bool = False
    optimize: int = 0

    @classmethod
    def from_runtime(cls) -> "EnvironmentProbe":
        """Снять снимок текущего процесса."""
        return cls(
            environ=dict(os.environ),
            dev_mode=bool(sys.flags.dev_mode),
            optimize=sys.flags.optimize,
        )

    def get(self, key: str) -> Optional[str]:
        return self.environ.get(key)

    def flag(self, key: str) -> Optional[bool]:
        """
        Значение переменной как флаг.

        Returns:
            True/False для распознанных значений, None если переменная не задана или не распознана
        """
        value = self.environ.get(key)
        if value is None:
            return None

        value = value.strip().lower()
        if value in ("1", "on", "yes", "true"):
            return True
        if value in ("", "0", "off", "no", "false"):
            return False
        return None
