"""
Webserver checks: security headers and files served by the running application.
"""

import re
import secrets
from contextlib import nullcontext
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import ContextManager, List, Optional, Tuple, Union

import httpx
from rich.markup import escape

from ..core.base_check import BaseCheck
from ..core.models import CheckState


class HttpHeader(Enum):
    """Заголовки безопасности и ссылки на документацию."""
    CONTENT_SECURITY_POLICY = "Content-Security-Policy"
    CONTENT_SECURITY_POLICY_REPORT_ONLY = "Content-Security-Policy-Report-Only"
    PERMISSIONS_POLICY = "Permissions-Policy"
    REFERRER_POLICY = "Referrer-Policy"
    SERVER = "Server"
    STRICT_TRANSPORT_SECURITY = "Strict-Transport-Security"
    X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
    X_FRAME_OPTIONS = "X-Frame-Options"

    @property
    def link(self) -> str:
        if self is HttpHeader.SERVER:
            return "https://owasp.org/www-project-secure-headers/#server"
        return f"https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/{self.value}"


class WebserverCheck(BaseCheck):
    report_name = "webserver"

    def __init__(self, base_url: Optional[str], client: Optional[httpx.Client] = None):
        super().__init__()
        self.base_url = base_url
        self.client = client

    def validate_base_url(self) -> bool:
        """Без base_url проверка остаётся SKIPPED."""
        if self.base_url:
            return True

        self.append_details([
            "No base url of your application is configured.",
            "You can set it using [mark]SECAUDIT_APP__BASE_URL[/mark], e.g. [cmd-mark] https://example.com [/cmd-mark]",
        ])
        return False

    def open_client(self) -> ContextManager[httpx.Client]:
        """Общий клиент реестра или временный, закрываемый после проверки."""
        if self.client is not None:
            return nullcontext(self.client)
        return httpx.Client(timeout=10.0, follow_redirects=True)


class SecureHeadersCheck(WebserverCheck):
    """Заголовки безопасности ответа приложения."""

    check_name = "Webserver sets important headers"

    def run(self) -> None:
        if not self.validate_base_url():
            return

        try:
            with self.open_client() as client:
                response = client.get(self.base_url)
        except httpx.HTTPError as e:
            self.fail(escape(f"{type(e).__name__}: {e}"))
            return

        self.check_response(response)
        self.finish()

    def check_response(self, response: httpx.Response) -> None:
        https = response.request.url.scheme == "https"

        if not https:
            self.warn([
                "- Using [warn]insecure request[/warn], please consider switching to [success]https[/success].",
                "  If you need a certificate, you can get one for free from LetsEncrypt (https://letsencrypt.org/getting-started/)",
            ])

        headers = response.headers
        self.check_content_security_policy(headers)
        if https:
            self.check_hsts_header(headers)
        self.check_permissions_policy(headers)
        self.check_referrer_policy(headers)
        self.check_server_fingerprint(headers)
        self.check_content_sniffing_header(headers)
        self.check_clickjacking_header(headers)

    def check_content_security_policy(self, headers: httpx.Headers) -> None:
        value = headers.get(HttpHeader.CONTENT_SECURITY_POLICY.value)

        if value is None:
            value = headers.get(HttpHeader.CONTENT_SECURITY_POLICY_REPORT_ONLY.value)

            if value is not None:
                self.insecure_header(
                    HttpHeader.CONTENT_SECURITY_POLICY_REPORT_ONLY,
                    "Content-Security-Policy is in Report-Only mode and therefore [warn]not enforced[/warn].",
                )

        if value is None:
            self.missing_header(HttpHeader.CONTENT_SECURITY_POLICY)
            return

        if "default-src" not in value and "script-src" not in value:
            self.insecure_header(
                HttpHeader.CONTENT_SECURITY_POLICY,
                "Content-Security-Policy neither sets default-src or script-src, "
                "which leads to possible unwanted execution of JS.",
                value,
            )

        if "unsafe-eval" in value or "unsafe-inline" in value:
            self.insecure_header(
                HttpHeader.CONTENT_SECURITY_POLICY,
                "Content-Security-Policy contains unsafe-Rules, which leads to possible unwanted execution of JS.",
                value,
            )

    def check_hsts_header(self, headers: httpx.Headers) -> None:
        if HttpHeader.STRICT_TRANSPORT_SECURITY.value not in headers:
            self.missing_header(HttpHeader.STRICT_TRANSPORT_SECURITY)

    def check_permissions_policy(self, headers: httpx.Headers) -> None:
        if HttpHeader.PERMISSIONS_POLICY.value not in headers:
            self.missing_header(HttpHeader.PERMISSIONS_POLICY)

    def check_referrer_policy(self, headers: httpx.Headers) -> None:
        value = headers.get(HttpHeader.REFERRER_POLICY.value)

        if value is None:
            self.missing_header(HttpHeader.REFERRER_POLICY)
        elif value == "unsafe-url":
            self.insecure_header(
                HttpHeader.REFERRER_POLICY,
                "Your current policy could leak private information to insecure or malicious servers.",
                value,
            )

    def check_server_fingerprint(self, headers: httpx.Headers) -> None:
        value = headers.get(HttpHeader.SERVER.value)

        if value is not None and re.search(r"[0-9]+(\.[0-9]+)+", value):
            self.insecure_header(
                HttpHeader.SERVER,
                "Server-Header should not include the version-Number of your webserver",
                value,
            )

    def check_content_sniffing_header(self, headers: httpx.Headers) -> None:
        value = headers.get(HttpHeader.X_CONTENT_TYPE_OPTIONS.value)

        if value is None:
            self.missing_header(HttpHeader.X_CONTENT_TYPE_OPTIONS)
        elif value != "nosniff":
            self.insecure_header(HttpHeader.X_CONTENT_TYPE_OPTIONS, 'Value should be "nosniff"', value)

    def check_clickjacking_header(self, headers: httpx.Headers) -> None:
        value = headers.get(HttpHeader.X_FRAME_OPTIONS.value)

        if value is None:
            self.missing_header(HttpHeader.X_FRAME_OPTIONS)
        elif value.upper().startswith("ALLOW-FROM"):
            self.insecure_header(
                HttpHeader.X_FRAME_OPTIONS,
                "ALLOW-FROM is deprecated and should no longer be used.",
                value,
            )

    def insecure_header(self, header: HttpHeader, reason: Optional[str] = None, value: Optional[str] = None) -> None:
        messages: List[str] = [f"- Insecure Header [warn]{header.value}[/warn]:"]

        if reason is not None:
            messages.append(f"  Reason: {reason}")

        if value is not None:
            messages.append(f"  Current value: {escape(value)}")

        messages.append(f"  (For further details visit: {header.link})")
        self.warn(messages)

    def missing_header(self, header: HttpHeader) -> None:
        self.fail([
            f"- Missing Header [fail]{header.value}[/fail]",
            f"  (For details visit: {header.link})",
        ])


class ForbiddenFileAccessCheck(WebserverCheck):
    """
    Какие файлы проекта отдаёт веб-сервер.

    Во временные файлы в корне проекта, в каталоге конфигурации и в
    публичном каталоге пишется случайное содержимое, после чего они
    запрашиваются по нескольким путям. Публичный файл должен быть доступен
    из корня сайта, остальные не должны быть доступны ни напрямую, ни через
    обход каталога. Файлы удаляются после проверки в любом случае.
    """

    check_name = "Webserver does not serve sensitive files"

    # httpx убирает сегменты ".." из пути, поэтому обход каталога кодируется
    TRAVERSAL = "%2e%2e/"

    def __init__(
        self,
        base_url: Optional[str],
        project_root: Union[str, Path],
        client: Optional[httpx.Client] = None,
        config_dir: Union[str, Path] = "config",
        public_dir: Union[str, Path] = "public",
    ):
        super().__init__(base_url, client)
        self.project_root = Path(project_root)
        self.config_dir = Path(config_dir)
        self.public_dir = Path(public_dir)
        self.files: List[Path] = []

    def run(self) -> None:
        if not self.validate_base_url():
            return

        try:
            with self.open_client() as client:
                self.run_all_tests(client)
            self.append_summary()
        except httpx.HTTPError as e:
            self.fail(escape(f"{type(e).__name__}: {e}"))
        finally:
            self.cleanup()

        self.finish()

    def run_all_tests(self, client: httpx.Client) -> None:
        # Файлы в корне проекта не должны быть доступны
        placed = self.place_file(Path("."))
        if placed is not None:
            filename, content = placed
            self.test_request(
                client, filename, content,
                "- Files in [fail]Project-Root[/fail] are accessible using [cmd-mark] /{filename} [/cmd-mark]",
            )
            self.test_request(
                client, self.TRAVERSAL + filename, content,
                "- Files in [fail]Project-Root[/fail] are accessible using [cmd-mark] /../{filename} [/cmd-mark]",
            )

        # Каталог конфигурации не должен быть доступен
        placed = self.place_file(self.config_dir)
        if placed is not None:
            filename, content = placed
            config = escape(self.config_dir.as_posix())
            self.test_request(
                client, f"{self.config_dir.as_posix()}/{filename}", content,
                f"- [fail]Configuration-Folder[/fail] is accessible using [cmd-mark] /{config}/{{filename}} [/cmd-mark]",
            )
            self.test_request(
                client, f"{self.TRAVERSAL}{self.config_dir.as_posix()}/{filename}", content,
                f"- [fail]Configuration-Folder[/fail] is accessible using [cmd-mark] /../{config}/{{filename}} [/cmd-mark]",
            )

        # Публичные файлы доступны только из корня сайта
        placed = self.place_file(self.public_dir)
        if placed is not None:
            filename, content = placed
            public = escape(self.public_dir.as_posix())
            self.test_request(
                client, filename, content,
                "- [fail]Public-Files[/fail] are not accessible using [cmd-mark] /{filename} [/cmd-mark]",
                should_match=True, warn=True,
            )
            self.test_request(
                client, f"{self.public_dir.as_posix()}/{filename}", content,
                f"- [fail]Public-Files[/fail] are accessible using [cmd-mark] /{public}/{{filename}} [/cmd-mark]",
                warn=True,
            )

    def append_summary(self) -> None:
        if self.state in (CheckState.WARNED, CheckState.FAILED):
            self.append_details([
                "",
                "Issues with your [warn]webserver configuration[/warn] detected.",
                "Make sure that your webserver uses the [mark]public[/mark]-Folder as Webroot and "
                "does not allow file traversal using [mark]/../[/mark]",
                "Consult the documentation of your webserver for further information",
            ])

    def cleanup(self) -> None:
        for path in self.files:
            path.unlink(missing_ok=True)
        self.files.clear()

    def test_request(
        self,
        client: httpx.Client,
        path: str,
        content: str,
        messages: Union[str, List[str]],
        should_match: bool = False,
        warn: bool = False,
    ) -> None:
        response = client.get(f"{self.base_url.rstrip('/')}/{path}")

        if (content in response.text) != should_match:
            if warn:
                self.warn(messages)
            else:
                self.fail(messages)

    def place_file(self, directory: Path) -> Optional[Tuple[str, str]]:
        """
        Записать файл со случайным содержимым.

        Returns:
            (имя файла, содержимое) или None, если каталога нет
        """
        target = self.project_root / directory

        if not target.is_dir():
            self.append_details(
                f"- Directory [mark]{escape(directory.as_posix())}[/mark] does not exist, requests skipped."
            )
            return None

        while True:
            filename = f"secaudit-check-{datetime.now():%Y%m%d-%H%M%S}-{secrets.token_hex(3)}.txt"
            path = target / filename
            if not path.exists():
                break

        content = secrets.token_hex(16)
        path.write_text(content)
        self.files.append(path)

        return filename, content
