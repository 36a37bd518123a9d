"""
CLI interface for secaudit.

Usage:
    secaudit audit                 # Run every report ("full" audit)
    secaudit audit prod            # Run the reports of the "prod" audit
    secaudit report environment    # Run a single report
    secaudit list                  # Show configured audits and reports
    secaudit -c security.toml -v audit ci
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.markup import escape

from secaudit.config import load_settings
from secaudit.console import ConsoleStyle
from secaudit.core.exceptions import AuditError
from secaudit.core.models import CheckState, exit_code
from secaudit.registry import CheckLoader

app = typer.Typer(
    name="secaudit",
    help="Security audit of a Python application and its environment",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False):
    """Настроить логирование (stderr, stdout занят выводом аудита)."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


logger = logging.getLogger(__name__)


def _create_loader(ctx: typer.Context) -> CheckLoader:
    settings = load_settings(ctx.obj.get("config"))

    # Переменные .env проверяемого проекта видны проверкам окружения
    env_path = settings.project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    logger.debug(f"Loaded settings for project {settings.project_root}")
    return CheckLoader.from_settings(settings)


def _fail(io: ConsoleStyle, error: AuditError) -> typer.Exit:
    logger.debug(f"Aborting: {error}")
    io.error(["", escape(str(error)), ""])
    return typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON or TOML file overriding the settings"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Security audit of a Python application and its environment."""
    setup_logging(verbose)
    ctx.obj = {"config": config}


@app.command()
def audit(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None, help="The audit to run (runs all reports if not specified)"
    ),
):
    """🔒 Run the specified security audit and print the summary."""
    io = ConsoleStyle()

    try:
        loader = _create_loader(ctx)
    except AuditError as e:
        raise _fail(io, e)

    with loader:
        try:
            security_audit = loader.create_audit(name)
        except AuditError as e:
            raise _fail(io, e)

        io.title(f"{security_audit.display_name} Scan")
        security_audit.run(io)

        io.section("Summary")
        io.table(["[bold-mark]Report[/bold-mark]", *CheckState.formats()], security_audit.get_summary())

        raise typer.Exit(code=exit_code(security_audit.state))


@app.command()
def report(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None, help="The name of the report that should be executed"
    ),
):
    """📋 Run the specified security report and print its counts."""
    io = ConsoleStyle()

    try:
        loader = _create_loader(ctx)
    except AuditError as e:
        raise _fail(io, e)

    with loader:
        if name is None:
            io.error([
                "",
                "No report given, you can choose between the following reports:",
                *[f"  - [default]{report_name}[/default]" for report_name in loader.get_report_names()],
                "",
                "[skip]secaudit report <report>[/skip]",
                "",
            ])
            raise typer.Exit(code=1)

        try:
            security_report = loader.create_report(name)
        except AuditError as e:
            raise _fail(io, e)

        io.title(security_report.display_name)
        security_report.run(io)

        io.horizontal_table(CheckState.formats(), [[
            security_report.failed,
            security_report.warned,
            security_report.succeeded,
            security_report.skipped,
        ]])

        raise typer.Exit(code=exit_code(security_report.state))


@app.command("list")
def list_names(ctx: typer.Context):
    """📊 Show the configured audits and reports."""
    io = ConsoleStyle()

    try:
        loader = _create_loader(ctx)
    except AuditError as e:
        raise _fail(io, e)

    with loader:
        io.section("Audits")
        io.table(
            ["Audit", "Reports"],
            [(audit_name, ", ".join(loader.audits[audit_name])) for audit_name in loader.get_audit_names()],
        )

        io.section("Reports")
        io.table(
            ["Report", "Checks"],
            [
                (report_name, "\n".join(check.check_name for check in loader.get_checks_by_report_name(report_name)))
                for report_name in loader.get_report_names()
            ],
        )


if __name__ == "__main__":
    app()
