"""
Configuration checks: inspect the audited application's own configuration.
"""

from typing import Any, Mapping, Optional

from ..core.base_check import BaseCheck


class ConfigurationCheck(BaseCheck):
    report_name = "configuration"


class SecureCookiesCheck(ConfigurationCheck):
    """Флаги сессионных cookie."""

    check_name = "Session-Cookies are secure"

    def __init__(self, app_config: Mapping[str, Any], base_url: Optional[str] = None):
        super().__init__()
        self.app_config = app_config
        self.base_url = base_url

    def run(self) -> None:
        session_config = self.app_config.get("session_config")

        if session_config is None:
            self.append_details("[mark]session_config[/mark] is not set, session handling is not active")
            return

        if session_config.get("cookie_httponly", False) is not True:
            self.fail([
                "- Session cookie should be [fail]HTTP-Only[/fail]",
                '  you can enable this by setting [mark]session_config["cookie_httponly"][/mark] to [success]true[/success]',
            ])

        if session_config.get("cookie_secure", False) is not True:
            if (self.base_url or "").startswith("https://"):
                self.fail([
                    "- Session cookie should be [fail]Secure[/fail] if your app is using [success]https[/success]",
                    '  you can enable this by setting [mark]session_config["cookie_secure"][/mark] to [success]true[/success]',
                ])
            else:
                self.warn([
                    "- Session cookie should be [warn]Secure[/warn] if your app is using https",
                    '  you can enable this by setting [mark]session_config["cookie_secure"][/mark] to [success]true[/success]',
                ])

        self.finish()
