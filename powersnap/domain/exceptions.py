from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from powersnap.domain.error_codes import ErrorCode


class PowerSnapError(Exception):
    """
    Назначение:
        Базовый класс фатальных ошибок ядра.

    Контракт:
        - code: ErrorCode конкретной ошибки.
        - to_dict() даёт сериализуемое представление для отчёта.
    """

    code: ErrorCode

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": str(self),
            "details": self.details(),
        }


@dataclass
class MappingValidationError(PowerSnapError):
    """
    Назначение:
        Структурно некорректный документ маппинга (непарсимый JSON, неверные типы полей).
        Фатальна для задания импорта, использующего этот маппинг.
    """

    message: str
    source: str | None = None

    code = ErrorCode.MAPPING_INVALID

    def details(self) -> dict[str, Any]:
        return {"source": self.source}

    def __str__(self) -> str:
        if self.source:
            return f"Invalid mapping document '{self.source}': {self.message}"
        return f"Invalid mapping document: {self.message}"


@dataclass
class CatalogDefinitionError(PowerSnapError):
    """
    Назначение:
        Некорректное декларативное описание каталога типов записей.
    """

    message: str
    record_type: str | None = None

    code = ErrorCode.CATALOG_INVALID

    def details(self) -> dict[str, Any]:
        return {"record_type": self.record_type}

    def __str__(self) -> str:
        if self.record_type:
            return f"Invalid record type definition '{self.record_type}': {self.message}"
        return f"Invalid record type catalog: {self.message}"


@dataclass
class UnknownRecordTypeError(PowerSnapError):
    """
    Назначение:
        Запрошен тип записи, отсутствующий в каталоге. Это ошибка конфигурации,
        а не повод для подстановки значения по умолчанию.
    """

    record_type: str

    code = ErrorCode.UNKNOWN_RECORD_TYPE

    def details(self) -> dict[str, Any]:
        return {"record_type": self.record_type}

    def __str__(self) -> str:
        return f"Unknown record type: {self.record_type}"


@dataclass
class IncompleteKeyError(PowerSnapError):
    """
    Назначение:
        У записи отсутствует значение одного или нескольких компонентов ключа.

    Инварианты/гарантии:
        - missing содержит имена компонентов в порядке объявления.
    """

    record_type: str
    missing: tuple[str, ...]
    line_no: int | None = None

    code = ErrorCode.INCOMPLETE_KEY

    def details(self) -> dict[str, Any]:
        return {
            "record_type": self.record_type,
            "missing": list(self.missing),
            "line_no": self.line_no,
        }

    def __str__(self) -> str:
        missing = ", ".join(self.missing)
        return f"Incomplete key for {self.record_type} (line_no={self.line_no}): missing {missing}"


@dataclass
class FileAccessError(PowerSnapError):
    """
    Назначение:
        Файл источника заблокирован или недоступен после исчерпания бюджета повторов.
        Фатальна только для этого файла.
    """

    path: str
    reason: str
    waited_seconds: float = 0.0

    code = ErrorCode.FILE_ACCESS

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "waited_seconds": self.waited_seconds}

    def __str__(self) -> str:
        return f"Cannot read '{self.path}' after {self.waited_seconds:.2f}s: {self.reason}"


@dataclass
class SourceFormatError(PowerSnapError):
    """
    Назначение:
        Неподдерживаемое расширение или нечитаемая структура файла источника.
    """

    path: str
    message: str

    code = ErrorCode.SOURCE_FORMAT

    def details(self) -> dict[str, Any]:
        return {"path": self.path}

    def __str__(self) -> str:
        return f"Unsupported or malformed source '{self.path}': {self.message}"


@dataclass
class SnapshotFormatError(PowerSnapError):
    """
    Назначение:
        Сохранённый снимок не соответствует ожидаемому JSON-формату.
    """

    path: str | None
    message: str

    code = ErrorCode.SNAPSHOT_FORMAT

    def details(self) -> dict[str, Any]:
        return {"path": self.path}

    def __str__(self) -> str:
        return f"Malformed snapshot '{self.path or '<memory>'}': {self.message}"


__all__ = [
    "CatalogDefinitionError",
    "FileAccessError",
    "IncompleteKeyError",
    "MappingValidationError",
    "PowerSnapError",
    "SnapshotFormatError",
    "SourceFormatError",
    "UnknownRecordTypeError",
]
