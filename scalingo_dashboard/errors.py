"""
Исключения дашборда.

Клиент Scalingo оборачивает сетевые и HTTP‑ошибки в `ScalingoAPIError`,
чтобы обработчики API могли единообразно превращать их в ответы 4xx/5xx.
"""


class DashboardError(RuntimeError):
    """Базовое исключение дашборда."""


class ConfigurationError(DashboardError):
    """Не хватает настроек (например, не задан SCALINGO_API_TOKEN)."""


class ScalingoAPIError(DashboardError):
    """
    Запрос к API Scalingo завершился ошибкой.

    Атрибуты:
        status (int | None): HTTP‑статус ответа; ``None`` для сетевых ошибок.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(ScalingoAPIError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status=404)


class InvalidAction(DashboardError, ValueError):
    """Неизвестное действие над приложением (допустимы start, stop, restart)."""
