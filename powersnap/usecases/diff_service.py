from __future__ import annotations

import logging
import time

from powersnap.common.run_id import generate_run_id
from powersnap.common.time import getDurationMs
from powersnap.config import Settings
from powersnap.datasets.registry import load_catalog
from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.diff.diff_engine import DiffEngine
from powersnap.domain.diff.models import DiffReport
from powersnap.domain.reporting.collector import ReportCollector
from powersnap.domain.snapshot.snapshot import Snapshot
from powersnap.infra.artifacts.report_writer import finalizeReport, writeReportJson
from powersnap.infra.logging.setup import createSessionLogger, getComponentLogger, logEvent
from powersnap.infra.snapshot.snapshot_store import load_snapshot

COMPONENT = "diff"


class SnapshotDiffService:
    """
    Оркестратор сравнения двух сохранённых снимков с записью отчёта.
    """

    def __init__(
        self,
        catalog: RecordTypeCatalog,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
        log_file: str | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.engine = DiffEngine(catalog, tolerance=self.settings.diff_tolerance)
        self.logger = logger or getComponentLogger(COMPONENT)
        self.run_id = run_id or generate_run_id()
        self.log_file = log_file

    @classmethod
    def from_settings(cls, settings: Settings, run_id: str | None = None) -> "SnapshotDiffService":
        run_id = run_id or generate_run_id()
        logger, log_file = createSessionLogger("diff", settings.log_dir, run_id, settings.log_level)
        return cls(load_catalog(settings.catalog_path), settings=settings, logger=logger, run_id=run_id, log_file=log_file)

    def compare(self, older: Snapshot, newer: Snapshot) -> DiffReport:
        report = self.engine.report(older, newer)
        logEvent(
            self.logger,
            logging.INFO,
            self.run_id,
            COMPONENT,
            f"diff: added={report.added_count} removed={report.removed_count} modified={report.modified_count}",
        )
        return report

    def run(
        self,
        older_path: str,
        newer_path: str,
        report_dir: str | None = None,
        items_limit: int | None = None,
    ) -> tuple[DiffReport, str]:
        """
        Назначение:
            Загрузить снимки, сравнить и записать diff_<run_id>.json.

        Выходные данные:
            (DiffReport, путь к отчёту)

        Ошибки:
            SnapshotFormatError из загрузки снимков пробрасывается.
        """
        started = time.monotonic()
        report_dir = report_dir or self.settings.report_dir
        older = load_snapshot(older_path)
        newer = load_snapshot(newer_path)
        diff_report = self.compare(older, newer)

        collector = ReportCollector(run_id=self.run_id, operation="diff")
        collector.set_items_limit(items_limit)
        collector.set_context("inputs", {"older": older_path, "newer": newer_path})
        collector.set_context("diff", diff_report.to_dict()["summary"])
        for entry in diff_report.entries:
            collector.add_item(
                status="OK",
                source=entry.record_type,
                payload=entry.to_dict(),
                meta={"kind": entry.kind.value},
            )
        finalizeReport(collector, getDurationMs(started, time.monotonic()), logFile=self.log_file, reportDir=report_dir)
        path = writeReportJson(collector, report_dir, f"diff_{self.run_id}")
        logEvent(self.logger, logging.INFO, self.run_id, COMPONENT, f"diff report written to {path}")
        return diff_report, path
