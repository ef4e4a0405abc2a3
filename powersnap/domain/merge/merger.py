from __future__ import annotations

import logging
from dataclasses import dataclass

from powersnap.common.time import getUtcNowIso
from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.catalog.descriptors import RecordTypeDescriptor
from powersnap.domain.compare import DEFAULT_TOLERANCE, values_equal
from powersnap.domain.error_codes import FindingCode
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.merge.models import (
    CollisionPolicy,
    EquipmentMismatchPolicy,
    MergeOptions,
    MergeReport,
    RecordSet,
)
from powersnap.domain.models import DiagnosticStage, Finding, Severity
from powersnap.domain.snapshot.snapshot import ImportFileRecord, Snapshot
from powersnap.infra.logging.setup import getComponentLogger, logEvent

COMPONENT = "merge"


@dataclass
class _StagedWrite:
    record_type: str
    key: CompositeKey
    record: dict[str, str]


class SnapshotMerger:
    """
    Назначение/ответственность:
        Слияние RecordSet в Snapshot по политике коллизий.

    Алгоритм:
        1) Для каждой записи применяется ScenarioOverride (только типы со сценарием).
        2) Ключ отсутствует в снимке -> вставка.
        3) Ключ есть -> коллизия:
           - тип без сценария: сравнение неключевых свойств; совпали -> unchanged,
             различаются -> политика equipment_mismatch (warn/fail/ignore);
             при FAIL расхождение не прерывает слияние, запись остаётся прежней;
           - FAIL (типы со сценарием): слияние прерывается;
           - SKIP: запись пропускается; OVERWRITE: запись заменяется.
        4) Все изменения сначала накапливаются и применяются только если
           слияние не прервано (всё или ничего на файл).

    Инварианты/гарантии:
        - Каждая коллизия логируется.
        - При прерывании снимок не изменяется.
    """

    def __init__(
        self,
        catalog: RecordTypeCatalog,
        logger: logging.Logger | None = None,
        run_id: str = "",
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        self.catalog = catalog
        self.logger = logger or getComponentLogger(COMPONENT)
        self.run_id = run_id
        self.tolerance = tolerance

    def merge(self, snapshot: Snapshot, record_set: RecordSet, options: MergeOptions | None = None) -> MergeReport:
        options = options or MergeOptions()
        report = MergeReport(source=record_set.source)
        staged: dict[tuple[str, CompositeKey], _StagedWrite] = {}
        abort = False

        self._check_version(snapshot, record_set, report)

        for record_type, key, record in record_set.items():
            descriptor = self.catalog.require(record_type)
            counts = report.counts_for(record_type)
            record = dict(record)
            if options.scenario_override and descriptor.has_scenarios:
                key, record = self._apply_override(descriptor, key, record, options.scenario_override, report)

            pending = staged.get((record_type, key))
            existing = pending.record if pending is not None else snapshot.get(record_type, key)
            if existing is None:
                staged[(record_type, key)] = _StagedWrite(record_type, key, record)
                counts.added += 1
                continue

            counts.collisions += 1
            if not descriptor.has_scenarios:
                differing = self._differing_properties(descriptor, existing, record)
                if not differing:
                    counts.unchanged += 1
                    logEvent(
                        self.logger,
                        logging.INFO,
                        self.run_id,
                        COMPONENT,
                        f"{record_type} {key}: identical equipment record already present",
                    )
                    continue
                counts.mismatches += 1
                if options.equipment_mismatch is EquipmentMismatchPolicy.FAIL:
                    abort = True
                    self._mismatch(report, Severity.ERROR, record_type, key, differing)
                    continue
                if options.equipment_mismatch is EquipmentMismatchPolicy.WARN:
                    self._mismatch(report, Severity.WARNING, record_type, key, differing)
                if options.on_collision is CollisionPolicy.FAIL:
                    counts.skipped += 1
                    self._collision(report, Severity.WARNING, record_type, key, "existing equipment record kept (fail)")
                    continue

            elif options.on_collision is CollisionPolicy.FAIL:
                abort = True
                self._collision(report, Severity.ERROR, record_type, key, "collision with on_collision=fail")
                continue

            if options.on_collision is CollisionPolicy.SKIP:
                counts.skipped += 1
                self._collision(report, Severity.WARNING, record_type, key, "existing record kept (skip)")
                continue

            staged[(record_type, key)] = _StagedWrite(record_type, key, record)
            counts.updated += 1
            self._collision(report, Severity.WARNING, record_type, key, "existing record overwritten")

        if abort:
            for counts in report.counts.values():
                counts.added = 0
                counts.updated = 0
            report.aborted = True
            report.findings.append(
                Finding(
                    stage=DiagnosticStage.MERGE,
                    severity=Severity.ERROR,
                    code=FindingCode.MERGE_ABORTED.value,
                    message="merge aborted, snapshot left unchanged",
                    source=record_set.source,
                )
            )
            logEvent(self.logger, logging.ERROR, self.run_id, COMPONENT, f"merge of {record_set.source} aborted")
            return report

        for write in staged.values():
            snapshot.put(write.record_type, write.key, write.record)
        if snapshot.software_version is None and record_set.software_version:
            snapshot.software_version = record_set.software_version
        if record_set.source:
            snapshot.add_source(
                ImportFileRecord(
                    file_path=record_set.source,
                    imported_at=getUtcNowIso(),
                    record_types=tuple(record_set.record_types()),
                    entry_count=record_set.count(),
                    scenario_mappings=dict(report.scenario_mappings),
                    mapping_path=record_set.mapping_path,
                    software_version=record_set.software_version,
                )
            )
        logEvent(
            self.logger,
            logging.INFO,
            self.run_id,
            COMPONENT,
            f"merged {record_set.source}: added={report.total('added')} updated={report.total('updated')} "
            f"collisions={report.total('collisions')}",
        )
        return report

    def _apply_override(
        self,
        descriptor: RecordTypeDescriptor,
        key: CompositeKey,
        record: dict[str, str],
        override: str,
        report: MergeReport,
    ) -> tuple[CompositeKey, dict[str, str]]:
        index = descriptor.scenario_index
        original = key[index]
        report.scenario_mappings.setdefault(original, override)
        record[descriptor.scenario_property] = override
        return key.replace(index, override), record

    def _differing_properties(
        self,
        descriptor: RecordTypeDescriptor,
        existing: dict[str, str],
        incoming: dict[str, str],
    ) -> list[str]:
        return [
            name
            for name in descriptor.non_key_properties
            if not values_equal(existing.get(name), incoming.get(name), self.tolerance)
        ]

    def _check_version(self, snapshot: Snapshot, record_set: RecordSet, report: MergeReport) -> None:
        current = snapshot.software_version
        incoming = record_set.software_version
        if not current or not incoming or current == incoming:
            return
        message = f"software version mismatch: snapshot={current} source={incoming}"
        report.findings.append(
            Finding(
                stage=DiagnosticStage.MERGE,
                severity=Severity.WARNING,
                code=FindingCode.VERSION_MISMATCH.value,
                message=message,
                source=record_set.source,
            )
        )
        logEvent(self.logger, logging.WARNING, self.run_id, COMPONENT, message)

    def _collision(self, report: MergeReport, severity: Severity, record_type: str, key: CompositeKey, detail: str) -> None:
        message = f"{record_type} {key}: key collision, {detail}"
        report.findings.append(
            Finding(
                stage=DiagnosticStage.MERGE,
                severity=severity,
                code=FindingCode.KEY_COLLISION.value,
                message=message,
                record_type=record_type,
                source=report.source,
            )
        )
        level = logging.ERROR if severity is Severity.ERROR else logging.WARNING
        logEvent(self.logger, level, self.run_id, COMPONENT, message)

    def _mismatch(
        self,
        report: MergeReport,
        severity: Severity,
        record_type: str,
        key: CompositeKey,
        differing: list[str],
    ) -> None:
        message = f"{record_type} {key}: sources disagree on {', '.join(differing)}"
        report.findings.append(
            Finding(
                stage=DiagnosticStage.MERGE,
                severity=severity,
                code=FindingCode.EQUIPMENT_MISMATCH.value,
                message=message,
                record_type=record_type,
                field=differing[0],
                source=report.source,
            )
        )
        level = logging.ERROR if severity is Severity.ERROR else logging.WARNING
        logEvent(self.logger, level, self.run_id, COMPONENT, message)
