from enum import Enum

from pydantic import BaseModel, ConfigDict


class LogLevel(str, Enum):
    """Грубый уровень записи лога, используемый только для подсветки."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class LogEntry(BaseModel):
    """
    Представляет одну строку лога приложения Scalingo, распознанную парсером.

    Поля:
        id: уникальный идентификатор записи, выдаётся при разборе;
        timestamp: время в виде ``HH:MM:SS`` (без долей секунды);
        level: уровень ``info``, ``warn`` или ``error``;
        message: текст сообщения без пробелов по краям;
        source: метка экземпляра в квадратных скобках (``[web-1]``) либо ``unknown``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    level: LogLevel = LogLevel.INFO
    message: str
    source: str
