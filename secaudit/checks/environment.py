"""
Environment checks: secrets in the application configuration and insecure
interpreter settings of the running environment.
"""

import hashlib
import re
from contextlib import nullcontext
from typing import Any, ContextManager, Dict, List, Mapping, Optional

import httpx
from rich.markup import escape

from ..config import SecretsSettings
from ..core.base_check import BaseCheck
from ..core.models import CheckState
from ..environment import EnvironmentProbe


class EnvironmentCheck(BaseCheck):
    report_name = "environment"


class InsecurePasswordsCheck(EnvironmentCheck):
    """
    Проверка секретов в конфигурации приложения.

    Секретом считается любое значение, имя ключа которого совпадает с
    secret_params_regex. Значения проверяются на длину и состав, а при
    use_hibp_api - по базе HaveIBeenPwned (отправляется только префикс
    SHA-1 из 5 символов).
    """

    HAVE_I_BEEN_PWNED_API_URI = "https://api.pwnedpasswords.com/range/"
    HIBP_PREFIX_LENGTH = 5

    check_name = "Configured Passwords are secure"

    def __init__(
        self,
        app_config: Mapping[str, Any],
        secrets: SecretsSettings,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__()
        self.app_config = app_config
        self.requirements = secrets
        self.secret_params_regex = re.compile(secrets.secret_params_regex, re.IGNORECASE)
        self.client = client
        self.secrets: Dict[str, str] = {}
        self._hibp_cache: Dict[str, List[str]] = {}

    def run(self) -> None:
        self.check_branch(self.app_config, "config")
        self.append_details([
            f"Found [success]{len(self.secrets)}[/success] secret(s) in configuration",
            "",
            "Checking all found secrets with the following criteria:",
            f"- at least [success]{self.requirements.require_length}[/success] character(s) long",
            f"- contains at least [success]{self.requirements.require_uppercase}[/success] uppercase letter(s)",
            f"- contains at least [success]{self.requirements.require_lowercase}[/success] lowercase letter(s)",
            f"- contains at least [success]{self.requirements.require_numerical}[/success] number(s)",
            "",
            "You can change these settings with [mark]SECAUDIT_SECRETS__REQUIRE_LENGTH[/mark], "
            "[mark]..._REQUIRE_UPPERCASE[/mark], [mark]..._REQUIRE_LOWERCASE[/mark] "
            "and [mark]..._REQUIRE_NUMERICAL[/mark]",
            "",
        ])

        self.check_requirements()

        if self.requirements.use_hibp_api:
            try:
                self.append_details([
                    "Checking all found secrets against the [mark]HaveIBeenPwned-Database[/mark]...",
                    "",
                ])
                self.check_have_i_been_pwned()
            except httpx.HTTPError as e:
                self.warn([
                    "[fail]Aborted[/fail] HaveIBeenPwned-Lookup due to the following error:",
                    escape(str(e)),
                ])
        else:
            self.append_details([
                "Checking against https://haveibeenpwned.com/ is disabled.",
                "If you want to enable it, set [mark]SECAUDIT_SECRETS__USE_HIBP_API[/mark] to [success]true[/success]",
                "If you decide to enable it, [mark]HaveIBeenPwned[/mark] will only receive an "
                "[success]anonymized[/success] version of your secret!",
            ])

        self.finish()

    def check_branch(self, branch: Any, path: str) -> None:
        """Рекурсивно обойти конфигурацию и собрать секреты."""
        for key, twig in self._items(branch):
            twig_path = f'{path}["{key}"]'

            if self.secret_params_regex.match(str(key)):
                self.inspect_param(twig, twig_path)

            if isinstance(twig, (dict, list)):
                self.check_branch(twig, twig_path)

    def inspect_param(self, twig: Any, path: str) -> None:
        if isinstance(twig, (dict, list)):
            for key, value in self._items(twig):
                self.inspect_param(value, f'{path}["{key}"]')
            return

        if twig is None or isinstance(twig, bool):
            return

        self.secrets[path] = str(twig)

    @staticmethod
    def _items(branch: Any):
        if isinstance(branch, Mapping):
            return list(branch.items())
        if isinstance(branch, list):
            return list(enumerate(branch))
        return []

    def check_requirements(self) -> None:
        for path, secret in self.secrets.items():
            errors = []

            if self.requirements.require_length > len(secret):
                errors.append(f"- at least [fail]{self.requirements.require_length}[/fail] character(s) long")

            if self.requirements.require_uppercase > len(re.findall(r"[A-Z]", secret)):
                errors.append(f"- contains at least [fail]{self.requirements.require_uppercase}[/fail] uppercase letter(s)")

            if self.requirements.require_lowercase > len(re.findall(r"[a-z]", secret)):
                errors.append(f"- contains at least [fail]{self.requirements.require_lowercase}[/fail] lowercase letter(s)")

            if self.requirements.require_numerical > len(re.findall(r"[0-9]", secret)):
                errors.append(f"- contains at least [fail]{self.requirements.require_numerical}[/fail] number(s)")

            if errors:
                self.fail([
                    f"The secret at [fail]{escape(path)}[/fail] does not match the following criteria:",
                    *errors,
                    "",
                ])

    def check_have_i_been_pwned(self) -> None:
        with self.open_client() as client:
            for path, secret in self.secrets.items():
                count = self.occurrences_in_have_i_been_pwned(secret, client)

                if count > 0:
                    self.warn(
                        f"The secret at [warn]{escape(path)}[/warn] was found [mark]{count}[/mark] times "
                        "in the HaveIBeenPwned-Database"
                    )

    def occurrences_in_have_i_been_pwned(self, secret: str, client: httpx.Client) -> int:
        """
        Количество утечек секрета по k-anonymity API.

        Наружу уходит только префикс SHA-1 хэша из 5 символов.
        """
        hashed = hashlib.sha1(secret.encode("utf-8")).hexdigest().upper()
        prefix, suffix = hashed[:self.HIBP_PREFIX_LENGTH], hashed[self.HIBP_PREFIX_LENGTH:]

        if prefix not in self._hibp_cache:
            uri = self.HAVE_I_BEEN_PWNED_API_URI + prefix

            if len(uri) != len(self.HAVE_I_BEEN_PWNED_API_URI) + self.HIBP_PREFIX_LENGTH:
                raise AssertionError(
                    "HaveIBeenPwned lookup aborted: the request URI contained more than the "
                    f"first {self.HIBP_PREFIX_LENGTH} characters of the hashed secret."
                )

            response = client.get(uri)
            self._hibp_cache[prefix] = response.text.splitlines() if response.status_code == 200 else []

        for line in self._hibp_cache[prefix]:
            if line.upper().startswith(suffix):
                _, _, count = line.partition(":")
                return int(count.strip() or 0)

        return 0

    def open_client(self) -> ContextManager[httpx.Client]:
        if self.client is not None:
            return nullcontext(self.client)
        return httpx.Client(timeout=10.0)


class InsecureRuntimeConfigCheck(EnvironmentCheck):
    """Небезопасные настройки интерпретатора и окружения."""

    check_name = "Runtime environment is configured securely"

    def __init__(self, probe: EnvironmentProbe):
        super().__init__()
        self.probe = probe

    def run(self) -> None:
        if self.probe.flag("DEBUG"):
            self.fail([
                "- [fail]DEBUG[/fail] is enabled.",
                "  This exposes sensitive information and errors to your users and should therefore be disabled.",
            ])

        if self.probe.get("PYTHONHASHSEED") == "0":
            self.fail([
                "- [fail]PYTHONHASHSEED[/fail] is set to 0.",
                "  This disables hash randomization and makes hash-flooding attacks possible.",
            ])

        if self.probe.dev_mode:
            self.warn([
                "- Python [warn]development mode[/warn] is enabled.",
                "  This enables additional runtime checks and debug hooks that should not run in production.",
            ])

        if self.probe.get("PYTHONINSPECT"):
            self.warn([
                "- [warn]PYTHONINSPECT[/warn] is set.",
                "  The interpreter drops into an interactive shell after the program exits.",
            ])

        if self.probe.optimize > 0:
            self.warn([
                "- Optimizations ([warn]-O[/warn]) are enabled.",
                "  This strips [cmd-warn] assert [/cmd-warn] statements, do not rely on them for security checks.",
            ])

        warnings_filter = (self.probe.get("PYTHONWARNINGS") or "").lower()
        if "ignore" in warnings_filter.split(","):
            self.warn([
                "- [warn]PYTHONWARNINGS[/warn] ignores all warnings.",
                "  This hides deprecation and security warnings from appearing in your logs.",
            ])

        self.append_summary()
        self.finish()

    def append_summary(self) -> None:
        if self.state in (CheckState.WARNED, CheckState.FAILED):
            self.append_details([
                "",
                "Issues with your [warn]runtime environment[/warn] detected.",
                "Make sure to review the environment of the process serving your application.",
                "Additionally check your [warn]process manager[/warn] and [warn]container[/warn] configurations,",
                "sometimes they set variables that are not visible in your shell.",
            ])
