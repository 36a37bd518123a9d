"""
Configuration for the audit system.

Values come from (highest priority first): an optional JSON/TOML config file
passed on the command line, SECAUDIT_* environment variables, a .env file,
and the defaults below.
"""

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from secaudit.core.exceptions import ConfigurationError


DEFAULT_AUDITS: Dict[str, List[str]] = {
    "ci": ["code", "configuration", "dependencies", "filesystem"],
    "dev": ["code", "dependencies", "filesystem"],
    "prod": ["configuration", "dependencies", "environment", "filesystem", "webserver"],
}

DEFAULT_CHECKS: List[str] = [
    # Code
    "code.static_analysis",
    # Configuration
    "configuration.secure_cookies",
    # Dependencies
    "dependencies.locked",
    "dependencies.vulnerable",
    # Environment
    "environment.insecure_passwords",
    "environment.insecure_runtime",
    # Filesystem
    "filesystem.permissions",
    # Webserver
    "webserver.forbidden_file_access",
    "webserver.secure_headers",
]


class AppSettings(BaseModel):
    """Проверяемое приложение."""
    base_url: Optional[str] = None
    # JSON/TOML файл конфигурации приложения (для проверок конфигурации и секретов)
    config_file: Optional[Path] = None
    # Каталоги относительно project_root, которые проверяет webserver.forbidden_file_access
    config_dir: Path = Path("config")
    public_dir: Path = Path("public")


class SecretsSettings(BaseModel):
    """Требования к секретам в конфигурации приложения."""
    require_length: int = 16
    require_uppercase: int = 1
    require_lowercase: int = 1
    require_numerical: int = 1
    secret_params_regex: str = r"^[A-Za-z_]*(pass(word)?|secret)$"
    use_hibp_api: bool = False


class Settings(BaseSettings):
    """Настройки аудита."""

    model_config = SettingsConfigDict(
        env_prefix="SECAUDIT_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # === Paths ===
    project_root: Path = Field(default_factory=Path.cwd)

    # === Registry ===
    audits: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_AUDITS))
    checks: List[str] = Field(default_factory=lambda: list(DEFAULT_CHECKS))

    # === Checks ===
    app: AppSettings = Field(default_factory=AppSettings)
    secrets: SecretsSettings = Field(default_factory=SecretsSettings)

    # === Execution Settings ===
    shell_timeout_seconds: float = 120.0
    http_timeout_seconds: float = 10.0

    def registry_config(self) -> Dict[str, Any]:
        """Конфигурация в форме {audits, checks} для CheckLoader."""
        return {"audits": self.audits, "checks": self.checks}

    def load_app_config(self) -> Dict[str, Any]:
        """
        Загрузить конфигурацию проверяемого приложения.

        Returns:
            Содержимое app.config_file или {} если файл не задан
        """
        if self.app.config_file is None:
            return {}

        path = self.app.config_file
        if not path.is_absolute():
            path = self.project_root / path

        return read_config_file(path)


def read_config_file(path: Path) -> Dict[str, Any]:
    """Прочитать JSON или TOML файл (по расширению)."""
    try:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    return data


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Загрузить настройки.

    Args:
        config_file: Необязательный JSON/TOML файл, его значения важнее переменных окружения
    """
    overrides = read_config_file(config_file) if config_file is not None else {}

    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

