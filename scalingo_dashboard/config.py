"""
Настройки дашборда.

Значения читаются из переменных окружения; если рядом есть файл `.env`,
он загружается через python-dotenv. Объект `Settings` передаётся в
`ScalingoClient` явно, глобального состояния с токенами нет.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from scalingo_dashboard.errors import ConfigurationError


# Загружаем переменные из .env файла, если он существует
load_dotenv()

DEFAULT_API_URL = "https://api.osc-fr1.scalingo.com"
DEFAULT_AUTH_URL = "https://auth.scalingo.com"
DEFAULT_LOG_LINES = 150
DEFAULT_TIMEOUT = 30.0

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Параметры доступа к API Scalingo.

    Атрибуты:
        api_token (str | None): персональный токен API (`SCALINGO_API_TOKEN`).
        api_url (str): адрес API региона (`SCALINGO_API_URL`).
        auth_url (str): адрес сервиса обмена токенов (`SCALINGO_AUTH_URL`).
        log_lines (int): сколько строк лога запрашивать по умолчанию.
        timeout (float): таймаут HTTP‑запросов в секундах.
        debug (bool): показывать ли подробности ошибок в ответах 5xx.
    """

    api_token: str | None = None
    api_url: str = DEFAULT_API_URL
    auth_url: str = DEFAULT_AUTH_URL
    log_lines: int = DEFAULT_LOG_LINES
    timeout: float = DEFAULT_TIMEOUT
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            log_lines = int(os.getenv("SCALINGO_LOG_LINES", DEFAULT_LOG_LINES))
            timeout = float(os.getenv("SCALINGO_TIMEOUT", DEFAULT_TIMEOUT))
        except ValueError as e:
            raise ConfigurationError(f"Некорректное числовое значение в настройках: {e}") from e
        return cls(
            api_token=os.getenv("SCALINGO_API_TOKEN") or None,
            api_url=os.getenv("SCALINGO_API_URL", DEFAULT_API_URL).rstrip("/"),
            auth_url=os.getenv("SCALINGO_AUTH_URL", DEFAULT_AUTH_URL).rstrip("/"),
            log_lines=log_lines,
            timeout=timeout,
            debug=os.getenv("DASHBOARD_DEBUG", "").lower() in TRUE_VALUES,
        )
