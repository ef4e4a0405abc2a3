from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.keys.composite_key import CompositeKey

Record = dict[str, str]


@dataclass(frozen=True)
class ImportFileRecord:
    """
    Назначение:
        Запись журнала источников снимка: какой файл и как был влит.

    Поля:
        scenario_mappings: исходный сценарий -> сценарий в снимке
    """

    file_path: str
    imported_at: str
    record_types: tuple[str, ...]
    entry_count: int
    scenario_mappings: Mapping[str, str] = field(default_factory=dict)
    mapping_path: str | None = None
    software_version: str | None = None

    @property
    def was_renamed(self) -> bool:
        return any(original != target for original, target in self.scenario_mappings.items())


@dataclass(frozen=True)
class TypeStatistics:
    total: int
    by_scenario: Mapping[str, int]
    uniform: bool


class Snapshot:
    """
    Назначение/ответственность:
        Полный набор влитых записей: record_type -> CompositeKey -> {property: value}.
        Дополнительно хранит для каждого типа множество наблюдённых значений
        каждого компонента ключа (для обнаружения сценариев).

    Ограничения:
        Изменяется только через put/remove/rename_scenario. Одновременное
        слияние в один снимок не поддерживается; вызовы должны быть сериализованы.
    """

    def __init__(self, software_version: str | None = None) -> None:
        self.software_version = software_version
        self.sources: list[ImportFileRecord] = []
        self._records: dict[str, dict[CompositeKey, Record]] = {}
        self._key_values: dict[str, list[set[str]]] = {}

    # --- read API ---

    def record_types(self) -> list[str]:
        return [name for name, records in self._records.items() if records]

    def records(self, record_type: str) -> Mapping[CompositeKey, Record]:
        return MappingProxyType(self._records.get(record_type, {}))

    def keys(self, record_type: str) -> list[CompositeKey]:
        return list(self._records.get(record_type, {}))

    def get(self, record_type: str, key: CompositeKey) -> Record | None:
        return self._records.get(record_type, {}).get(key)

    def contains(self, record_type: str, key: CompositeKey) -> bool:
        return key in self._records.get(record_type, {})

    def items(self) -> Iterator[tuple[str, CompositeKey, Record]]:
        for record_type, records in self._records.items():
            for key, record in records.items():
                yield record_type, key, record

    def record_count(self, record_type: str | None = None) -> int:
        if record_type is not None:
            return len(self._records.get(record_type, {}))
        return sum(len(records) for records in self._records.values())

    def key_values(self, record_type: str) -> tuple[frozenset[str], ...]:
        """Различные наблюдённые значения по каждому компоненту ключа типа."""
        return tuple(frozenset(values) for values in self._key_values.get(record_type, []))

    # --- write API ---

    def put(self, record_type: str, key: CompositeKey, record: Mapping[str, str]) -> None:
        self._records.setdefault(record_type, {})[key] = dict(record)
        slots = self._key_values.setdefault(record_type, [])
        while len(slots) < len(key):
            slots.append(set())
        for index, component in enumerate(key):
            slots[index].add(component)

    def remove(self, record_type: str, key: CompositeKey) -> Record | None:
        record = self._records.get(record_type, {}).pop(key, None)
        if record is not None:
            self._rebuild_key_values(record_type)
        return record

    def add_source(self, source: ImportFileRecord) -> None:
        self.sources.append(source)

    def copy(self) -> "Snapshot":
        clone = Snapshot(software_version=self.software_version)
        clone.sources = list(self.sources)
        for record_type, key, record in self.items():
            clone.put(record_type, key, record)
        return clone

    # --- scenarios ---

    def available_scenarios(self, catalog: RecordTypeCatalog) -> list[str]:
        scenarios: set[str] = set()
        for record_type in self.record_types():
            scenarios.update(self._scenarios_of(catalog, record_type))
        return sorted(scenarios)

    def scenario_statistics(self, catalog: RecordTypeCatalog, scenario: str) -> dict[str, int]:
        """Число записей каждого сценарного типа в указанном сценарии."""
        result: dict[str, int] = {}
        for record_type in self.record_types():
            descriptor = catalog.describe(record_type)
            if descriptor is None or descriptor.scenario_index is None:
                continue
            index = descriptor.scenario_index
            count = sum(1 for key in self._records[record_type] if key[index] == scenario)
            if count:
                result[record_type] = count
        return result

    def type_statistics(self, catalog: RecordTypeCatalog) -> dict[str, TypeStatistics]:
        scenarios = set(self.available_scenarios(catalog))
        result: dict[str, TypeStatistics] = {}
        for record_type in self.record_types():
            records = self._records[record_type]
            descriptor = catalog.describe(record_type)
            by_scenario: dict[str, int] = {}
            if descriptor is not None and descriptor.scenario_index is not None:
                index = descriptor.scenario_index
                for key in records:
                    by_scenario[key[index]] = by_scenario.get(key[index], 0) + 1
                uniform = set(by_scenario) == scenarios
            else:
                uniform = True
            result[record_type] = TypeStatistics(
                total=len(records),
                by_scenario=dict(sorted(by_scenario.items())),
                uniform=uniform,
            )
        return result

    def has_uniform_scenarios(self, catalog: RecordTypeCatalog) -> bool:
        """Все сценарные типы покрывают один и тот же набор сценариев."""
        return all(stats.uniform for stats in self.type_statistics(catalog).values())

    def rename_scenario(self, catalog: RecordTypeCatalog, old: str, new: str) -> int:
        """
        Назначение:
            Переименовать сценарий во всех сценарных типах (ключ и значение свойства).

        Ошибки:
            ValueError, если после переименования ключ совпадёт с существующим;
            в этом случае снимок не изменяется.

        Выходные данные:
            Количество переименованных записей.
        """
        if not new or not new.strip():
            raise ValueError("new scenario name is blank")
        if old == new:
            return 0
        planned: list[tuple[str, CompositeKey, CompositeKey]] = []
        for record_type in self.record_types():
            descriptor = catalog.describe(record_type)
            if descriptor is None or descriptor.scenario_index is None:
                continue
            index = descriptor.scenario_index
            records = self._records[record_type]
            for key in records:
                if key[index] != old:
                    continue
                renamed = key.replace(index, new)
                if renamed in records:
                    raise ValueError(f"cannot rename scenario '{old}' to '{new}': {record_type} {renamed} exists")
                planned.append((record_type, key, renamed))

        for record_type, key, renamed in planned:
            descriptor = catalog.require(record_type)
            record = self._records[record_type].pop(key)
            record[descriptor.scenario_property] = new
            self._records[record_type][renamed] = record
        for record_type in {item[0] for item in planned}:
            self._rebuild_key_values(record_type)
        return len(planned)

    # --- comparison ---

    def as_dict(self) -> dict[str, dict[CompositeKey, Record]]:
        return {name: dict(records) for name, records in self._records.items() if records}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    __hash__ = None  # type: ignore[assignment]

    def _scenarios_of(self, catalog: RecordTypeCatalog, record_type: str) -> set[str]:
        descriptor = catalog.describe(record_type)
        if descriptor is None or descriptor.scenario_index is None:
            return set()
        values = self._key_values.get(record_type, [])
        if descriptor.scenario_index >= len(values):
            return set()
        return set(values[descriptor.scenario_index])

    def _rebuild_key_values(self, record_type: str) -> None:
        slots: list[set[str]] = []
        for key in self._records.get(record_type, {}):
            while len(slots) < len(key):
                slots.append(set())
            for index, component in enumerate(key):
                slots[index].add(component)
        self._key_values[record_type] = slots
