from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DiagnosticStage(str, Enum):
    """
    Назначение:
        Источник диагностического события в конвейере file -> snapshot -> diff.
    """

    READ = "READ"
    MAP = "MAP"
    CLASSIFY = "CLASSIFY"
    KEY = "KEY"
    MERGE = "MERGE"
    DIFF = "DIFF"


class Severity(str, Enum):
    """
    Назначение:
        Уровень важности диагностики и записи маппинга.
    """

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"

    @classmethod
    def parse(cls, value: str | None) -> "Severity":
        """
        Назначение:
            Разбор строки без учёта регистра; пустое значение -> INFO.

        Ошибки:
            ValueError для неизвестного значения.
        """
        if value is None or str(value).strip() == "":
            return cls.INFO
        lowered = str(value).strip().lower()
        for item in cls:
            if item.value.lower() == lowered:
                return item
        raise ValueError(f"Unsupported severity: {value}")


@dataclass(frozen=True)
class Finding:
    """
    Назначение:
        Нефатальная диагностика (проблема качества данных), собираемая в отчёт.

    Поля:
        stage: этап конвейера
        severity: Info/Warning/Error
        code: значение FindingCode
        message: человекочитаемое описание
        record_type/field/line_no/source: контекст (если известен)
    """

    stage: DiagnosticStage
    severity: Severity
    code: str
    message: str
    record_type: str | None = None
    field: str | None = None
    line_no: int | None = None
    source: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def with_source(self, source: str | None) -> "Finding":
        if source is None or self.source == source:
            return self
        return Finding(
            stage=self.stage,
            severity=self.severity,
            code=self.code,
            message=self.message,
            record_type=self.record_type,
            field=self.field,
            line_no=self.line_no,
            source=source,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "record_type": self.record_type,
            "field": self.field,
            "line_no": self.line_no,
            "source": self.source,
        }
