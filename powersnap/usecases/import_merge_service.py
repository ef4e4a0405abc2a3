from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from powersnap.common.run_id import generate_run_id
from powersnap.common.time import getDurationMs
from powersnap.config import Settings
from powersnap.datasets.registry import load_catalog
from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.catalog.descriptors import RecordTypeDescriptor
from powersnap.domain.classify.classifier import ColumnSignatureClassifier
from powersnap.domain.error_codes import FindingCode
from powersnap.domain.exceptions import FileAccessError, IncompleteKeyError, SourceFormatError
from powersnap.domain.keys.composite_key import build_composite_key
from powersnap.domain.mapping.models import MappingDocument, MappingEntry
from powersnap.domain.mapping.resolver import MappingResolver, blocked_types
from powersnap.domain.mapping.suggest import MappingSuggestion
from powersnap.domain.merge.merger import SnapshotMerger
from powersnap.domain.merge.models import MergeOptions, MergeReport, RecordSet
from powersnap.domain.models import DiagnosticStage, Finding, Severity
from powersnap.domain.reporting.collector import ReportCollector
from powersnap.domain.reporting.models import ReportEnvelope
from powersnap.domain.snapshot.snapshot import Snapshot
from powersnap.infra.artifacts.report_writer import finalizeReport, writeReportJson
from powersnap.infra.logging.setup import createSessionLogger, getComponentLogger, logEvent
from powersnap.infra.mapping.mapping_reader import load_mapping_document
from powersnap.infra.sources.file_access import ensure_readable
from powersnap.infra.sources.models import TableSection
from powersnap.infra.sources.sections import split_sections
from powersnap.infra.sources.table_source import read_source_sheets

COMPONENT = "import"


@dataclass
class FileImportReport:
    """
    Назначение:
        Итог обработки одного файла в сессии.

    Поля:
        status: OK | FAILED (фатальная ошибка файла) | ABORTED (слияние прервано)
    """

    path: str
    status: str
    records: int = 0
    findings: list[Finding] = field(default_factory=list)
    merge: MergeReport | None = None
    error: dict[str, Any] | None = None


@dataclass
class SessionReport:
    run_id: str
    snapshot: Snapshot
    files: list[FileImportReport] = field(default_factory=list)
    report: ReportEnvelope | None = None
    report_path: str | None = None

    @property
    def failed_files(self) -> list[str]:
        return [item.path for item in self.files if item.status != "OK"]


class ImportMerger:
    """
    Назначение/ответственность:
        Импорт файлов экспорта и их слияние в снимок.

    Контракт:
        - import_one(path, mapping) -> RecordSet (записи + findings); чистое
          преобразование, существующие снимки не затрагиваются.
        - merge_into(snapshot, record_set, options) -> MergeReport.
        - import_session(paths, mapping, ...) -> SessionReport; ошибка одного
          файла не прерывает обработку остальных.

    Ошибки:
        import_one пробрасывает FileAccessError/SourceFormatError (фатальны для файла);
        MappingValidationError при загрузке маппинга по пути фатальна для сессии.
        Проблемы строк и секций возвращаются как Finding.
    """

    def __init__(
        self,
        catalog: RecordTypeCatalog,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
        log_file: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or Settings()
        self.logger = logger or getComponentLogger(COMPONENT)
        self.run_id = run_id or generate_run_id()
        self.log_file = log_file
        self.classifier = ColumnSignatureClassifier(catalog, threshold=self.settings.min_match_threshold)
        self.merger = SnapshotMerger(
            catalog,
            logger=self.logger,
            run_id=self.run_id,
            tolerance=self.settings.diff_tolerance,
        )

    @classmethod
    def from_settings(cls, settings: Settings, run_id: str | None = None) -> "ImportMerger":
        """
        Назначение:
            Собрать импорт из настроек: каталог (catalog_path или встроенный)
            и сессионный логгер import_<run_id>.log в log_dir.
        """
        run_id = run_id or generate_run_id()
        catalog = load_catalog(settings.catalog_path)
        logger, log_file = createSessionLogger("import", settings.log_dir, run_id, settings.log_level)
        return cls(catalog, settings=settings, logger=logger, run_id=run_id, log_file=log_file)

    def suggest(
        self,
        mapping: MappingDocument | MappingResolver,
        record_type: str,
        headers: Sequence[str],
    ) -> list[MappingSuggestion]:
        resolver = self._resolver(mapping)
        return resolver.suggest(self.catalog.require(record_type), headers)

    # --- ImportOne ---

    def import_one(
        self,
        path: str,
        mapping: MappingDocument | MappingResolver,
        sheet_names: Iterable[str] | None = None,
    ) -> RecordSet:
        resolver = self._resolver(mapping)
        document = resolver.document
        record_set = RecordSet(
            source=path,
            software_version=document.software_version or None,
            mapping_path=document.source_path,
        )
        mapping_findings = resolver.validate()
        record_set.findings.extend(f.with_source(path) for f in mapping_findings)
        blocked = blocked_types(mapping_findings)

        ensure_readable(
            path,
            timeout_seconds=self.settings.file_wait_timeout_seconds,
            interval_seconds=self.settings.file_retry_interval_seconds,
        )
        sheets = read_source_sheets(path, sheet_names)
        known_headers = resolver.known_headers()

        for sheet in sheets:
            sections = split_sections(sheet, known_headers)
            if not sections:
                self._log(logging.INFO, f"{path}:{sheet.name}: no header row found")
            for section in sections:
                self._import_section(section, resolver, blocked, record_set)

        if self.settings.strict_required_headers and any(
            f.code == FindingCode.REQUIRED_HEADER_MISSING.value and f.is_error for f in record_set.findings
        ):
            record_set.clear()
            self._log(logging.ERROR, f"{path}: required headers missing, file rejected (strict mode)")

        self._log(
            logging.INFO,
            f"imported {path}: records={record_set.count()} types={','.join(record_set.record_types()) or '-'} "
            f"findings={len(record_set.findings)}",
        )
        return record_set

    def _import_section(
        self,
        section: TableSection,
        resolver: MappingResolver,
        blocked: set[str],
        record_set: RecordSet,
    ) -> None:
        source = record_set.source
        where = f"{source}:{section.sheet_name}:{section.header_line}"
        result = self.classifier.classify(section.headers, resolver)
        if not result.activated:
            code = FindingCode.KEY_COLUMNS_MISSING if result.winner is not None else FindingCode.CLASSIFICATION_FAILED
            self._add(
                record_set,
                Severity.WARNING,
                DiagnosticStage.CLASSIFY,
                code,
                f"{where}: section skipped, {result.reason}",
                line_no=section.header_line,
                record_type=result.winner.record_type if result.winner else None,
            )
            return

        record_type = result.record_type
        if record_type in blocked:
            self._add(
                record_set,
                Severity.ERROR,
                DiagnosticStage.MAP,
                FindingCode.MAPPING_BLOCKED,
                f"{where}: {record_type} section skipped because its mapping has errors",
                line_no=section.header_line,
                record_type=record_type,
            )
            return

        descriptor = self.catalog.require(record_type)
        binding = resolver.bind_headers(record_type, section.headers)
        columns = {name: index for name, index in binding.columns.items() if descriptor.has_property(name)}
        defaults, section_ok = self._resolve_missing(descriptor, binding.missing, record_set, where, section.header_line)
        if not section_ok:
            return

        self._log(
            logging.INFO,
            f"{where}: {record_type} ({result.winner.percentage:.1f}% match), rows={len(section.rows)}",
        )
        for row in section.rows:
            record: dict[str, str] = {}
            for name, index in columns.items():
                record[name] = row.cells[index] if index < len(row.cells) else ""
            for name, value in defaults.items():
                record[name] = value
            try:
                key = build_composite_key(descriptor, record, line_no=row.line_no)
            except IncompleteKeyError as exc:
                self._add(
                    record_set,
                    Severity.WARNING,
                    DiagnosticStage.KEY,
                    FindingCode.INCOMPLETE_KEY,
                    f"{section.sheet_name}: {exc}; row skipped",
                    line_no=row.line_no,
                    record_type=record_type,
                    field=exc.missing[0],
                )
                continue
            if not record_set.add(record_type, key, record):
                self._add(
                    record_set,
                    Severity.WARNING,
                    DiagnosticStage.KEY,
                    FindingCode.DUPLICATE_KEY_IN_SOURCE,
                    f"{section.sheet_name}: {record_type} {key} appears more than once, later row kept",
                    line_no=row.line_no,
                    record_type=record_type,
                )

    def _resolve_missing(
        self,
        descriptor: RecordTypeDescriptor,
        missing: Sequence[MappingEntry],
        record_set: RecordSet,
        where: str,
        line_no: int,
    ) -> tuple[dict[str, str], bool]:
        """
        Назначение:
            Обработать записи маппинга, для которых нет колонки.

        Алгоритм:
            - Есть defaultValue -> значение подставляется во все строки (Info).
            - required: Error -> секция пропускается; Warning/Info -> диагностика
              соответствующего уровня, импорт продолжается.
        """
        defaults: dict[str, str] = {}
        section_ok = True
        for entry in missing:
            if not descriptor.has_property(entry.property_name):
                continue
            if entry.default_value is not None:
                defaults[entry.property_name] = entry.default_value
                self._add(
                    record_set,
                    Severity.INFO,
                    DiagnosticStage.MAP,
                    FindingCode.DEFAULT_VALUE_APPLIED,
                    f"{where}: column '{entry.column_header}' missing, default '{entry.default_value}' used",
                    line_no=line_no,
                    record_type=descriptor.name,
                    field=entry.property_name,
                )
                continue
            if not entry.required:
                continue
            self._add(
                record_set,
                entry.severity,
                DiagnosticStage.MAP,
                FindingCode.REQUIRED_HEADER_MISSING,
                f"{where}: required header '{entry.column_header}' for {descriptor.name}.{entry.property_name} missing",
                line_no=line_no,
                record_type=descriptor.name,
                field=entry.property_name,
            )
            if entry.severity is Severity.ERROR:
                section_ok = False
        return defaults, section_ok

    # --- MergeInto ---

    def merge_into(
        self,
        snapshot: Snapshot,
        record_set: RecordSet,
        options: MergeOptions | None = None,
    ) -> MergeReport:
        return self.merger.merge(snapshot, record_set, options or MergeOptions.from_settings(self.settings))

    # --- session ---

    def import_session(
        self,
        paths: Sequence[str],
        mapping: MappingDocument | MappingResolver | str,
        snapshot: Snapshot | None = None,
        options: MergeOptions | None = None,
        scenario_overrides: Mapping[str, str] | None = None,
        sheet_names: Iterable[str] | None = None,
        report_dir: str | None = None,
        log_file: str | None = None,
    ) -> SessionReport:
        """
        Назначение:
            Импортировать и влить несколько файлов (сшивание сценариев).

        Входные данные:
            mapping: документ, резолвер или путь к JSON (ошибка загрузки фатальна для сессии)
            scenario_overrides: путь файла -> имя сценария для этого файла
            report_dir: если задан, отчёт сессии пишется в import_<run_id>.json
        """
        started = time.monotonic()
        if isinstance(mapping, str):
            mapping = load_mapping_document(mapping)
        resolver = self._resolver(mapping)
        snapshot = snapshot if snapshot is not None else Snapshot()
        base_options = options or MergeOptions.from_settings(self.settings)
        overrides = scenario_overrides or {}

        collector = ReportCollector(run_id=self.run_id, operation="import")
        session = SessionReport(run_id=self.run_id, snapshot=snapshot)

        for path in paths:
            file_report = FileImportReport(path=path, status="OK")
            try:
                record_set = self.import_one(path, resolver, sheet_names=sheet_names)
            except (FileAccessError, SourceFormatError) as exc:
                code = FindingCode.FILE_ACCESS_FAILED if isinstance(exc, FileAccessError) else FindingCode.SOURCE_FORMAT_ERROR
                file_report.status = "FAILED"
                file_report.error = exc.to_dict()
                file_report.findings.append(
                    Finding(
                        stage=DiagnosticStage.READ,
                        severity=Severity.ERROR,
                        code=code.value,
                        message=str(exc),
                        source=path,
                    )
                )
                self._log(logging.ERROR, str(exc))
                session.files.append(file_report)
                collector.add_item(status="FAILED", source=path, findings=file_report.findings, meta={"error": file_report.error})
                continue

            file_options = MergeOptions(
                on_collision=base_options.on_collision,
                scenario_override=overrides.get(path, base_options.scenario_override),
                equipment_mismatch=base_options.equipment_mismatch,
            )
            merge_report = self.merge_into(snapshot, record_set, file_options)
            file_report.records = record_set.count()
            file_report.merge = merge_report
            file_report.findings = list(record_set.findings) + list(merge_report.findings)
            if merge_report.aborted:
                file_report.status = "ABORTED"
            session.files.append(file_report)
            collector.add_item(
                status=file_report.status,
                source=path,
                findings=file_report.findings,
                records=file_report.records,
                payload=merge_report.to_dict()["counts"],
            )
            collector.add_op(
                "merge",
                added=merge_report.total("added"),
                updated=merge_report.total("updated"),
                collisions=merge_report.total("collisions"),
                skipped=merge_report.total("skipped"),
            )

        collector.set_context(
            "snapshot",
            {
                "records": snapshot.record_count(),
                "record_types": snapshot.record_types(),
                "scenarios": snapshot.available_scenarios(self.catalog),
                "software_version": snapshot.software_version,
            },
        )
        duration_ms = getDurationMs(started, time.monotonic())
        if report_dir:
            finalizeReport(collector, duration_ms, logFile=log_file or self.log_file, reportDir=report_dir)
            session.report_path = writeReportJson(collector, report_dir, f"import_{self.run_id}")
        else:
            collector.finish(duration_ms=duration_ms)
        session.report = collector.build()
        self._log(
            logging.INFO,
            f"session finished: files={len(paths)} failed={len(session.failed_files)} records={snapshot.record_count()}",
        )
        return session

    def _resolver(self, mapping: MappingDocument | MappingResolver) -> MappingResolver:
        if isinstance(mapping, MappingResolver):
            return mapping
        return MappingResolver(mapping, self.catalog, similarity_floor=self.settings.fuzzy_similarity_floor)

    def _add(
        self,
        record_set: RecordSet,
        severity: Severity,
        stage: DiagnosticStage,
        code: FindingCode,
        message: str,
        *,
        line_no: int | None = None,
        record_type: str | None = None,
        field: str | None = None,
    ) -> None:
        record_set.findings.append(
            Finding(
                stage=stage,
                severity=severity,
                code=code.value,
                message=message,
                record_type=record_type,
                field=field,
                line_no=line_no,
                source=record_set.source,
            )
        )
        level = {Severity.ERROR: logging.ERROR, Severity.WARNING: logging.WARNING}.get(severity, logging.INFO)
        self._log(level, message)

    def _log(self, level: int, message: str) -> None:
        logEvent(self.logger, level, self.run_id, COMPONENT, message)
