from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from powersnap.domain.models import DiagnosticStage


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные сессии (импорт или сравнение снимков).
    """

    run_id: str
    operation: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    """
    Назначение:
        Унифицированные счётчики сессии.
    """

    items_total: int = 0
    items_ok: int = 0
    items_failed: int = 0
    records_total: int = 0
    errors_total: int = 0
    warnings_total: int = 0
    by_stage: dict[str, dict[str, int]] = field(default_factory=dict)
    ops: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportDiagnostic:
    severity: str
    stage: DiagnosticStage
    code: str
    message: str
    record_type: str | None = None
    field: str | None = None
    line_no: int | None = None


@dataclass
class ReportItem:
    """
    Назначение:
        Единица отчёта: файл сессии импорта или запись diff.
    """

    status: str
    source: str | None = None
    payload: Mapping[str, Any] | None = None
    diagnostics: list[ReportDiagnostic] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReportEnvelope:
    """
    Назначение:
        Корневой объект отчёта.
    """

    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)
