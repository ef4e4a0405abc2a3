from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Mapping

from powersnap.common.time import getNowIso
from powersnap.domain.models import DiagnosticStage, Finding, Severity
from powersnap.domain.reporting.models import (
    ReportDiagnostic,
    ReportEnvelope,
    ReportItem,
    ReportMeta,
    ReportSummary,
)


class ReportCollector:
    """
    Назначение/ответственность:
        Единый сборщик отчётов для сессий импорта и сравнения.
    """

    def __init__(self, run_id: str, operation: str, started_at: str | None = None) -> None:
        self.meta = ReportMeta(
            run_id=run_id,
            operation=operation,
            started_at=started_at or getNowIso(),
        )
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.status: str | None = None

    def set_items_limit(self, limit: int | None) -> None:
        self.meta.items_limit = limit

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_op(self, name: str, **counts: int) -> None:
        entry = self.summary.ops.setdefault(name, {})
        for counter, value in counts.items():
            entry[counter] = entry.get(counter, 0) + value

    def add_findings(self, findings: Iterable[Finding]) -> None:
        """Учесть диагностики в счётчиках, не создавая отдельного элемента."""
        for finding in findings:
            self._count(finding)

    def add_item(
        self,
        *,
        status: str,
        source: str | None = None,
        payload: Mapping[str, Any] | None = None,
        findings: Iterable[Finding] | None = None,
        records: int = 0,
        meta: dict[str, Any] | None = None,
    ) -> None:
        finding_list = list(findings or [])
        self.summary.items_total += 1
        self.summary.records_total += records
        if status == "OK":
            self.summary.items_ok += 1
        else:
            self.summary.items_failed += 1
        self.add_findings(finding_list)

        if self._should_store_item():
            self.items.append(
                ReportItem(
                    status=status,
                    source=source,
                    payload=payload,
                    diagnostics=[_to_diagnostic(f) for f in finding_list if f.severity is not Severity.INFO],
                    meta=meta or {},
                )
            )
        else:
            self.meta.items_truncated = True

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms
        if self.status is None:
            self.status = self._derive_status()

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status or self._derive_status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )

    def _should_store_item(self) -> bool:
        limit = self.meta.items_limit
        if limit is None:
            return True
        return len(self.items) < limit

    def _derive_status(self) -> str:
        if self.summary.errors_total == 0 and self.summary.items_failed == 0:
            return "SUCCESS"
        if self.summary.items_ok > 0:
            return "PARTIAL"
        return "FAILED"

    def _count(self, finding: Finding) -> None:
        if finding.severity is Severity.ERROR:
            field = "errors_total"
            self.summary.errors_total += 1
        elif finding.severity is Severity.WARNING:
            field = "warnings_total"
            self.summary.warnings_total += 1
        else:
            return
        key = finding.stage.value if isinstance(finding.stage, DiagnosticStage) else str(finding.stage)
        entry = self.summary.by_stage.setdefault(key, {"errors_total": 0, "warnings_total": 0})
        entry[field] += 1


def _to_diagnostic(finding: Finding) -> ReportDiagnostic:
    return ReportDiagnostic(
        severity=finding.severity.value,
        stage=finding.stage,
        code=finding.code,
        message=finding.message,
        record_type=finding.record_type,
        field=finding.field,
        line_no=finding.line_no,
    )


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    """
    Назначение:
        Упрощённая сериализация без привязки к dataclasses.asdict для вложенных enum.
    """
    return {
        "status": envelope.status,
        "meta": asdict(envelope.meta),
        "summary": asdict(envelope.summary),
        "items": [
            {
                "status": item.status,
                "source": item.source,
                "payload": item.payload,
                "diagnostics": [
                    {**asdict(diag), "stage": diag.stage.value} for diag in item.diagnostics
                ],
                "meta": item.meta,
            }
            for item in envelope.items
        ],
        "context": envelope.context,
    }
