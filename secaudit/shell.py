"""
Thin wrapper around external commands used by checks.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Результат выполнения команды."""
    exit_code: int
    stdout: str
    stderr: str


class ShellExecutor:
    """Запуск внешних команд с таймаутом и кэшем путей."""

    def __init__(self, cwd: Optional[Path] = None, timeout_seconds: float = 120.0):
        """
        Args:
            cwd: Рабочая директория команд (корень проверяемого проекта)
            timeout_seconds: Таймаут одной команды
        """
        self.cwd = cwd
        self.timeout_seconds = timeout_seconds
        self._command_paths: Dict[str, Optional[str]] = {}

    def command_exists(self, command_name: str) -> bool:
        """Существует ли исполняемый файл команды (результат кэшируется)."""
        if command_name not in self._command_paths:
            path = shutil.which(command_name)
            if path is None and self.cwd is not None:
                # Относительные пути вида venv/bin/tool
                path = shutil.which(str(self.cwd / command_name))
            self._command_paths[command_name] = path
            logger.debug(f"Resolved command {command_name} -> {path}")

        return self._command_paths[command_name] is not None

    def run_command(self, command_name: str, *args: str) -> CommandResult:
        """
        Выполнить команду.

        Raises:
            subprocess.TimeoutExpired: Если команда не уложилась в таймаут
        """
        executable = self._command_paths.get(command_name) or command_name
        logger.debug(f"Running {executable} {' '.join(args)}")

        completed = subprocess.run(
            [executable, *args],
            cwd=self.cwd,
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
        )

        return CommandResult(
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
