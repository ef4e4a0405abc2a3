from __future__ import annotations

from typing import Mapping

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.compare import DEFAULT_TOLERANCE, values_equal
from powersnap.domain.diff.models import ChangeKind, DiffEntry, DiffReport, PropertyChange
from powersnap.domain.snapshot.snapshot import Snapshot


class DiffEngine:
    """
    Назначение/ответственность:
        Структурное сравнение двух снимков: Added/Removed/Modified.

    Контракт:
        - diff(older, newer) -> list[DiffEntry], отсортированный по
          (record_type, key); порядок детерминирован.
        - Сравниваются объявленные свойства типа, кроме deprecated.
          Для типов вне каталога сравнивается объединение имён свойств.
        - Чистая функция: снимки не изменяются.

    Инварианты/гарантии:
        - diff(S, S) пуст.
    """

    def __init__(self, catalog: RecordTypeCatalog | None = None, tolerance: float = DEFAULT_TOLERANCE) -> None:
        self.catalog = catalog
        self.tolerance = tolerance

    def diff(self, older: Snapshot, newer: Snapshot) -> list[DiffEntry]:
        entries: list[DiffEntry] = []
        record_types = sorted(set(older.record_types()) | set(newer.record_types()))
        for record_type in record_types:
            old_records = older.records(record_type)
            new_records = newer.records(record_type)
            for key in sorted(set(old_records) | set(new_records)):
                old_record = old_records.get(key)
                new_record = new_records.get(key)
                if old_record is None:
                    entries.append(DiffEntry(record_type, key, ChangeKind.ADDED))
                elif new_record is None:
                    entries.append(DiffEntry(record_type, key, ChangeKind.REMOVED))
                else:
                    changes = self.compare_records(record_type, old_record, new_record)
                    if changes:
                        entries.append(DiffEntry(record_type, key, ChangeKind.MODIFIED, tuple(changes)))
        return entries

    def report(self, older: Snapshot, newer: Snapshot) -> DiffReport:
        return DiffReport(entries=tuple(self.diff(older, newer)))

    def compare_records(
        self,
        record_type: str,
        old_record: Mapping[str, str],
        new_record: Mapping[str, str],
    ) -> list[PropertyChange]:
        changes: list[PropertyChange] = []
        for name in self._properties(record_type, old_record, new_record):
            old_value = old_record.get(name)
            new_value = new_record.get(name)
            if not values_equal(old_value, new_value, self.tolerance):
                changes.append(PropertyChange(property_path=name, old_value=old_value, new_value=new_value))
        return changes

    def _properties(
        self,
        record_type: str,
        old_record: Mapping[str, str],
        new_record: Mapping[str, str],
    ) -> list[str]:
        descriptor = self.catalog.describe(record_type) if self.catalog is not None else None
        if descriptor is not None:
            return list(descriptor.comparable_properties)
        names = list(old_record)
        names.extend(name for name in new_record if name not in old_record)
        return names
