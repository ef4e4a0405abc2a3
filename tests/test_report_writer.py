from __future__ import annotations

import json

from powersnap.domain.models import DiagnosticStage, Finding, Severity
from powersnap.domain.reporting.collector import ReportCollector
from powersnap.infra.artifacts.report_writer import finalizeReport, writeReportJson


def _finding(severity: Severity, stage: DiagnosticStage = DiagnosticStage.KEY) -> Finding:
    return Finding(stage=stage, severity=severity, code="INCOMPLETE_KEY", message="Сценарий не задан", line_no=4)


def test_report_is_written_with_counters(tmp_path):
    collector = ReportCollector(run_id="r1", operation="import")
    collector.add_item(status="OK", source="a.csv", records=3, findings=[_finding(Severity.WARNING), _finding(Severity.INFO)])
    collector.add_item(status="FAILED", source="b.csv", findings=[_finding(Severity.ERROR, DiagnosticStage.READ)])
    collector.add_op("merge", added=3)
    collector.add_op("merge", added=1, updated=2)

    finalizeReport(collector, 12, logFile="import_r1.log", reportDir=str(tmp_path))
    path = writeReportJson(collector, str(tmp_path), "import_r1")

    data = json.loads((tmp_path / "import_r1.json").read_text(encoding="utf-8"))
    assert path == str(tmp_path / "import_r1.json")
    assert data["status"] == "PARTIAL"
    assert data["meta"]["duration_ms"] == 12
    assert data["summary"]["records_total"] == 3
    assert data["summary"]["warnings_total"] == 1
    assert data["summary"]["by_stage"] == {
        "KEY": {"errors_total": 0, "warnings_total": 1},
        "READ": {"errors_total": 1, "warnings_total": 0},
    }
    assert data["summary"]["ops"]["merge"] == {"added": 4, "updated": 2}
    assert data["items"][0]["diagnostics"][0]["stage"] == "KEY"
    assert len(data["items"][0]["diagnostics"]) == 1
    assert data["context"]["runtime"]["log_file"] == "import_r1.log"
    assert "Сценарий" in (tmp_path / "import_r1.json").read_text(encoding="utf-8")


def test_items_limit_truncates_but_keeps_counting():
    collector = ReportCollector(run_id="r2", operation="diff")
    collector.set_items_limit(1)

    collector.add_item(status="OK", source="Bus")
    collector.add_item(status="OK", source="Bus")
    report = collector.build()

    assert report.status == "SUCCESS"
    assert len(report.items) == 1
    assert report.summary.items_total == 2
    assert report.meta.items_truncated is True


def test_all_failed_items_give_failed_status():
    collector = ReportCollector(run_id="r3", operation="import")
    collector.add_item(status="FAILED", source="a.csv")

    collector.finish(duration_ms=1)

    assert collector.build().status == "FAILED"
