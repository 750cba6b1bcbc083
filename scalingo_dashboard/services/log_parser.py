"""
    Парсер логов Scalingo: превращает сырой текстовый вывод логов
    приложения в список структурированных записей `LogEntry`.

    Строки в ожидаемом формате разбираются по шаблону, уровень
    определяется по ключевым словам в сообщении. Строки, не подходящие под
    шаблон, не отбрасываются: для них извлекается то, что удаётся найти
    (метка экземпляра, время), а остальное заполняется значениями по
    умолчанию.
    """

import logging
import re
import uuid
from datetime import datetime
from typing import Callable, List

from scalingo_dashboard.models.log_entry import LogEntry, LogLevel

logger = logging.getLogger(__name__)

# Шаблон строки лога Scalingo: дата, время с долями секунды, смещение,
# название часового пояса, экземпляр в квадратных скобках и сообщение.
# Пример:
#     2025-07-15 12:10:47.951404087 +0200 CEST [web-1] Next.js 13.5.11
LOG_PATTERN = re.compile(
    r'^(?P<date>\d{4}-\d{2}-\d{2})\s+'
    r'(?P<time>\d{2}:\d{2}:\d{2})\.\d+\s+'
    r'(?P<offset>[+-]\d{4})\s+'
    r'(?P<tz>\w+)\s+'
    r'\[(?P<instance>[^\]]+)\]\s+'
    r'(?P<message>.*)$',
    re.ASCII,
)

INSTANCE_PATTERN = re.compile(r'\[([^\]]+)\]')
TIME_PATTERN = re.compile(r'(\d{2}:\d{2}:\d{2})', re.ASCII)

# Порядок важен: сначала проверяются ошибки, затем предупреждения.
ERROR_KEYWORDS = ("error", "failed", "exception")
WARN_KEYWORDS = ("warn", "warning", "deprecated")

UNKNOWN_SOURCE = "unknown"
TIME_FORMAT = "%H:%M:%S"


class LogParser:
    @staticmethod
    def parse_logs(logs_text: str, clock: Callable[[], datetime] = datetime.now) -> List[LogEntry]:
        """
        Разбирает текст логов и возвращает список объектов `LogEntry` в
        исходном порядке строк.

        Каждая непустая строка даёт ровно одну запись. Если строка не
        соответствует `LOG_PATTERN`, запись строится запасным способом
        (см. `parse_fallback_line`), поэтому метод никогда не падает.

        :param logs_text: сырой текст, строки разделены ``\\n``.
        :param clock: источник текущего времени для строк без метки
            времени; по умолчанию ``datetime.now``.
        :return: список записей; пустой, если текст пустой или состоит
            только из пробелов.
        """
        if not logs_text.strip():
            return []

        entries: List[LogEntry] = []
        fallback_count = 0
        for line in logs_text.strip().split("\n"):
            # Пустые строки посреди вывода пропускаем
            if not line.strip():
                continue
            match = LOG_PATTERN.match(line)
            if match:
                entries.append(LogParser.parse_structured_line(match))
            else:
                fallback_count += 1
                entries.append(LogParser.parse_fallback_line(line, clock))

        if fallback_count:
            logger.debug("Не распознано по шаблону строк: %d из %d", fallback_count, len(entries))
        return entries

    @staticmethod
    def parse_structured_line(match: re.Match) -> LogEntry:
        message = match.group("message")
        return LogEntry(
            id=str(uuid.uuid4()),
            timestamp=match.group("time"),
            level=LogParser.detect_level(message),
            message=message.strip(),
            source=f"[{match.group('instance')}]",
        )

    @staticmethod
    def parse_fallback_line(line: str, clock: Callable[[], datetime] = datetime.now) -> LogEntry:
        """
        Строит запись для строки нестандартного формата.

        Метка экземпляра берётся из первых квадратных скобок (иначе
        ``unknown``), время из первой подстроки ``HH:MM:SS``. Если времени
        в строке нет, подставляется текущее время часов `clock`, поэтому
        повторный разбор той же строки может дать другое значение.
        Уровень здесь всегда ``info``.
        """
        instance_match = INSTANCE_PATTERN.search(line)
        time_match = TIME_PATTERN.search(line)
        timestamp = time_match.group(1) if time_match else clock().strftime(TIME_FORMAT)
        return LogEntry(
            id=str(uuid.uuid4()),
            timestamp=timestamp,
            level=LogLevel.INFO,
            message=line.strip(),
            source=f"[{instance_match.group(1)}]" if instance_match else UNKNOWN_SOURCE,
        )

    @staticmethod
    def detect_level(message: str) -> LogLevel:
        """
        Определяет уровень по ключевым словам без учёта регистра.

        Это эвристика для подсветки в интерфейсе: сообщение
        ``"0 errors"`` тоже будет считаться ошибкой.
        """
        lower_message = message.lower()
        if any(keyword in lower_message for keyword in ERROR_KEYWORDS):
            return LogLevel.ERROR
        if any(keyword in lower_message for keyword in WARN_KEYWORDS):
            return LogLevel.WARN
        return LogLevel.INFO
