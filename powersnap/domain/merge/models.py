from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping

from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.models import Finding, Severity


class CollisionPolicy(str, Enum):
    """
    Назначение:
        Поведение при совпадении составного ключа со значением в снимке.
    """

    OVERWRITE = "overwrite"
    SKIP = "skip"
    FAIL = "fail"


class EquipmentMismatchPolicy(str, Enum):
    """
    Назначение:
        Поведение, когда оборудование (тип без компонента сценария) из разных
        файлов имеет различающиеся значения свойств.
    """

    WARN = "warn"
    FAIL = "fail"
    IGNORE = "ignore"


@dataclass(frozen=True)
class MergeOptions:
    on_collision: CollisionPolicy = CollisionPolicy.OVERWRITE
    scenario_override: str | None = None
    equipment_mismatch: EquipmentMismatchPolicy = EquipmentMismatchPolicy.WARN

    @classmethod
    def from_settings(cls, settings: Any, scenario_override: str | None = None) -> "MergeOptions":
        """
        Опции по умолчанию из Settings (on_collision/equipment_mismatch).

        Ошибки:
            ValueError для неизвестного значения политики.
        """
        return cls(
            on_collision=CollisionPolicy(settings.on_collision),
            scenario_override=scenario_override,
            equipment_mismatch=EquipmentMismatchPolicy(settings.equipment_mismatch),
        )


@dataclass
class RecordSet:
    """
    Назначение:
        Временный набор записей одного файла, сгруппированный по типам.
        Не связан ни с каким снимком.

    Поля:
        source: путь исходного файла
        findings: пропущенные строки/секции и замечания маппинга
        software_version/mapping_path: из документа маппинга
    """

    source: str | None = None
    software_version: str | None = None
    mapping_path: str | None = None
    records: dict[str, dict[CompositeKey, dict[str, str]]] = field(default_factory=dict)
    findings: list[Finding] = field(default_factory=list)

    def add(self, record_type: str, key: CompositeKey, record: Mapping[str, str]) -> bool:
        """
        Добавить запись. Возвращает False, если ключ уже был (запись заменена).
        """
        per_type = self.records.setdefault(record_type, {})
        existed = key in per_type
        per_type[key] = dict(record)
        return not existed

    def items(self) -> Iterator[tuple[str, CompositeKey, dict[str, str]]]:
        for record_type, records in self.records.items():
            for key, record in records.items():
                yield record_type, key, record

    def record_types(self) -> list[str]:
        return [name for name, records in self.records.items() if records]

    def count(self, record_type: str | None = None) -> int:
        if record_type is not None:
            return len(self.records.get(record_type, {}))
        return sum(len(records) for records in self.records.values())

    def clear(self) -> None:
        self.records.clear()

    @property
    def has_errors(self) -> bool:
        return any(f.severity is Severity.ERROR for f in self.findings)


@dataclass
class TypeMergeCounts:
    added: int = 0
    updated: int = 0
    collisions: int = 0
    skipped: int = 0
    unchanged: int = 0
    mismatches: int = 0


@dataclass
class MergeReport:
    """
    Назначение:
        Результат MergeInto: счётчики по типам и диагностики.

    Инварианты/гарантии:
        - aborted=True означает, что снимок не изменён (added/updated = 0).
    """

    source: str | None = None
    counts: dict[str, TypeMergeCounts] = field(default_factory=dict)
    findings: list[Finding] = field(default_factory=list)
    aborted: bool = False
    scenario_mappings: dict[str, str] = field(default_factory=dict)

    def counts_for(self, record_type: str) -> TypeMergeCounts:
        return self.counts.setdefault(record_type, TypeMergeCounts())

    def total(self, name: str) -> int:
        return sum(getattr(counts, name) for counts in self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "aborted": self.aborted,
            "counts": {name: asdict(counts) for name, counts in sorted(self.counts.items())},
            "scenario_mappings": dict(self.scenario_mappings),
            "findings": [f.to_dict() for f in self.findings],
        }
