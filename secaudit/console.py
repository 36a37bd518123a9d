"""
Console presenter built on rich.

Check details, state formats and status lines are rich markup using the
styles registered in THEME (fail, warn, success, skip, mark and their
bold-* / cmd-* variants).
"""

from typing import Any, Callable, Iterable, Optional, Sequence, Union

from rich import box
from rich.console import Console
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

MAX_LINE_LENGTH = 120

_COLORS = {
    "fail": "red",
    "warn": "yellow",
    "success": "green",
    "skip": "cyan",
    "mark": "magenta",
}


def _build_theme() -> Theme:
    styles = {}
    for name, color in _COLORS.items():
        styles[name] = color
        styles[f"bold-{name}"] = f"bold {color}"
        styles[f"cmd-{name}"] = f"{color} on grey23"
    return Theme(styles)


THEME = _build_theme()

Messages = Union[str, Iterable[str]]


class ConsoleStyle:
    """Вывод аудита в терминал."""

    def __init__(self, console: Optional[Console] = None):
        """
        Args:
            console: rich Console (по умолчанию stdout); тема стилей добавляется к нему
        """
        self.console = console or Console()
        self.console.push_theme(THEME)

        if self.console.width > MAX_LINE_LENGTH:
            self.console.width = MAX_LINE_LENGTH

    def title(self, title: str) -> None:
        """Заголовок запуска, печатается один раз."""
        self.console.print(Panel(
            Text(title, justify="center"),
            title="[bold-mark]secaudit[/bold-mark]",
            box=box.HORIZONTALS,
            border_style="bold-mark",
            style="bold-mark",
        ))

    def section(self, name: str) -> None:
        self.console.print()
        self.console.print(Text(f" » {name}", style="mark"))
        self.console.rule(style="mark")

    def indicator(self, message: str, result_generator: Callable[[], str]) -> None:
        """
        Показать строку ожидания, пока работает result_generator,
        затем напечатать возвращённую им строку результата.
        """
        with self.console.status(message):
            result = result_generator()

        self.console.print(result)

    def indent(self, messages: Messages, style: Optional[str] = None) -> None:
        """Напечатать строки с отступом в 4 пробела."""
        for line in self._lines(messages):
            self.console.print(Padding(line, (0, 0, 0, 4), style=style or "none"))

    def error(self, messages: Messages) -> None:
        self.indent(messages, style="fail")

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        """Таблица с заголовками сверху."""
        table = Table(box=box.SQUARE)

        for header in headers:
            table.add_column(header)

        for row in rows:
            table.add_row(*(str(cell) for cell in row))

        self.console.print()
        self.console.print(table)
        self.console.print()

    def horizontal_table(self, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        """Таблица с заголовками слева: по строке на каждый заголовок."""
        table = Table(box=None, show_header=False)
        table.add_column(style="bold")

        for _ in rows:
            table.add_column()

        for idx, header in enumerate(headers):
            table.add_row(header, *(str(row[idx]) for row in rows))

        self.console.print()
        self.console.print(table)
        self.console.print()

    @staticmethod
    def _lines(messages: Messages):
        if isinstance(messages, str):
            return [messages]
        return list(messages)
