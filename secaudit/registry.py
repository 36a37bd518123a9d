"""
Registry: resolves audit and report names to ordered sets of checks.

Checks are built once, in configuration order, through a builder callable.
CheckLoader.from_settings() wires the builder to CHECK_FACTORIES, the explicit
map of check identifiers to construction functions.
"""

import logging
from functools import cached_property
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from .checks.code import StaticAnalysisCheck
from .checks.configuration import SecureCookiesCheck
from .checks.dependencies import LockedDependenciesCheck, VulnerableDependenciesCheck
from .checks.environment import InsecurePasswordsCheck, InsecureRuntimeConfigCheck
from .checks.filesystem import FilePermissionCheck
from .checks.webserver import ForbiddenFileAccessCheck, SecureHeadersCheck
from .config import Settings
from .core.audit import Audit
from .core.base_check import BaseCheck
from .core.exceptions import (
    InvalidCheckError,
    UnknownAuditError,
    UnknownCheckError,
    UnknownReportError,
)
from .core.report import Report
from .environment import EnvironmentProbe
from .shell import ShellExecutor

logger = logging.getLogger(__name__)

Builder = Callable[[str], Any]


class CheckContext:
    """Общие зависимости, которые получают проверки при создании."""

    def __init__(
        self,
        settings: Settings,
        probe: Optional[EnvironmentProbe] = None,
        shell: Optional[ShellExecutor] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        self.probe = probe or EnvironmentProbe.from_runtime()
        self.shell = shell or ShellExecutor(
            cwd=settings.project_root,
            timeout_seconds=settings.shell_timeout_seconds,
        )
        # Клиент, созданный здесь, закрывается в close()
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=settings.http_timeout_seconds,
            follow_redirects=True,
        )

    @cached_property
    def app_config(self) -> Dict[str, Any]:
        """Конфигурация проверяемого приложения (читается один раз)."""
        return self.settings.load_app_config()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()


CHECK_FACTORIES: Dict[str, Callable[[CheckContext], BaseCheck]] = {
    "code.static_analysis": lambda ctx: StaticAnalysisCheck(ctx.shell),
    "configuration.secure_cookies": lambda ctx: SecureCookiesCheck(
        ctx.app_config, ctx.settings.app.base_url
    ),
    "dependencies.locked": lambda ctx: LockedDependenciesCheck(ctx.shell),
    "dependencies.vulnerable": lambda ctx: VulnerableDependenciesCheck(ctx.shell),
    "environment.insecure_passwords": lambda ctx: InsecurePasswordsCheck(
        ctx.app_config, ctx.settings.secrets, ctx.client
    ),
    "environment.insecure_runtime": lambda ctx: InsecureRuntimeConfigCheck(ctx.probe),
    "filesystem.permissions": lambda ctx: FilePermissionCheck(ctx.settings.project_root),
    "webserver.forbidden_file_access": lambda ctx: ForbiddenFileAccessCheck(
        ctx.settings.app.base_url,
        ctx.settings.project_root,
        ctx.client,
        config_dir=ctx.settings.app.config_dir,
        public_dir=ctx.settings.app.public_dir,
    ),
    "webserver.secure_headers": lambda ctx: SecureHeadersCheck(
        ctx.settings.app.base_url, ctx.client
    ),
}


class CheckLoader:
    """
    Реестр проверок, отчётов и аудитов.

    Индекс отчётов строится при создании (группировка по report_name в
    порядке первого появления). Аудиты разрешаются лениво: неизвестный
    отчёт в аудите обнаруживается только при создании этого аудита.
    """

    def __init__(self, config: Mapping[str, Any], builder: Builder):
        """
        Args:
            config: {"audits": {name: [report, ...]}, "checks": [identifier, ...]}
            builder: Создаёт проверку по идентификатору
        """
        self.audits: Dict[str, List[str]] = {
            name: list(reports) for name, reports in (config.get("audits") or {}).items()
        }
        self.reports: Dict[str, List[BaseCheck]] = {}
        self.context: Optional[CheckContext] = None

        for identifier in config.get("checks") or []:
            check = builder(identifier)

            if not isinstance(check, BaseCheck):
                raise InvalidCheckError(type(check).__name__)

            self.reports.setdefault(check.report_name, []).append(check)
            logger.debug(f"Registered {identifier} in report {check.report_name}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        probe: Optional[EnvironmentProbe] = None,
        shell: Optional[ShellExecutor] = None,
        client: Optional[httpx.Client] = None,
    ) -> "CheckLoader":
        """Создать реестр с проверками из CHECK_FACTORIES."""
        context = CheckContext(settings, probe=probe, shell=shell, client=client)

        def builder(identifier: str) -> BaseCheck:
            factory = CHECK_FACTORIES.get(identifier)

            if factory is None:
                raise UnknownCheckError(identifier, CHECK_FACTORIES.keys())

            return factory(context)

        try:
            loader = cls(settings.registry_config(), builder)
        except Exception:
            context.close()
            raise

        loader.context = context
        return loader

    def close(self) -> None:
        """Освободить ресурсы контекста (HTTP-клиент)."""
        if self.context is not None:
            self.context.close()

    def __enter__(self) -> "CheckLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_report_names(self) -> List[str]:
        return list(self.reports)

    def get_audit_names(self) -> List[str]:
        return list(self.audits)

    def get_checks_by_report_name(self, name: str) -> List[BaseCheck]:
        if name not in self.reports:
            raise UnknownReportError(name, self.get_report_names())

        return self.reports[name]

    def get_reports_by_audit_name(self, name: str) -> List[Report]:
        if name not in self.audits:
            raise UnknownAuditError(name, self.get_audit_names())

        return [self.create_report(report_name) for report_name in self.audits[name]]

    def create_report(self, name: str) -> Report:
        return Report(name, self.get_checks_by_report_name(name))

    def create_audit(self, name: Optional[str] = None) -> Audit:
        """Аудит по имени или "full" со всеми отчётами."""
        if name is None:
            return Audit("full", [self.create_report(report_name) for report_name in self.reports])

        return Audit(name, self.get_reports_by_audit_name(name))
