"""
Audit: a named group of reports selected for one run.
"""

import logging
from typing import List, Sequence

from .models import CheckState, SummaryRow
from .report import Report

logger = logging.getLogger(__name__)


class Audit:
    """Аудит - набор отчётов."""

    def __init__(self, name: str, reports: Sequence[Report]):
        """
        Args:
            name: Запрошенное имя аудита или "full"
            reports: Отчёты в порядке конфигурации
        """
        self.name = name
        self.reports: List[Report] = list(reports)

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()

    def run(self, io) -> None:
        """Запустить все отчёты аудита последовательно."""
        logger.info(f"Running audit {self.name} with {len(self.reports)} reports")

        for report in self.reports:
            io.section(report.display_name)
            report.run(io)

    def get_summary(self) -> List[SummaryRow]:
        """
        Сводка для вывода таблицей.

        Returns:
            Строка на каждый отчёт и итоговая строка "Total"
        """
        summary: List[SummaryRow] = []
        failed = warned = succeeded = skipped = 0

        for report in self.reports:
            summary.append((
                report.display_name,
                report.failed,
                report.warned,
                report.succeeded,
                report.skipped,
            ))

            failed += report.failed
            warned += report.warned
            succeeded += report.succeeded
            skipped += report.skipped

        summary.append(("Total", failed, warned, succeeded, skipped))
        return summary

    @property
    def state(self) -> CheckState:
        """Худшее состояние среди отчётов (по состояниям отчётов, не по счётчикам)."""
        state = CheckState.SKIPPED

        for report in self.reports:
            report_state = report.state

            if report_state is CheckState.FAILED:
                return CheckState.FAILED
            elif report_state is CheckState.WARNED:
                state = CheckState.WARNED
            elif report_state is CheckState.SUCCEEDED and state is not CheckState.WARNED:
                state = CheckState.SUCCEEDED

        return state
