from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from powersnap.domain.keys.composite_key import CompositeKey


class ChangeKind(str, Enum):
    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"


@dataclass(frozen=True)
class PropertyChange:
    """
    Назначение:
        Изменение одного свойства. Значения сохраняются дословно, без нормализации.
    """

    property_path: str
    old_value: str | None
    new_value: str | None


@dataclass(frozen=True)
class DiffEntry:
    record_type: str
    key: CompositeKey
    kind: ChangeKind
    changes: tuple[PropertyChange, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_type": self.record_type,
            "key": list(self.key.components),
            "kind": self.kind.value,
            "changes": [
                {"property": c.property_path, "old": c.old_value, "new": c.new_value}
                for c in self.changes
            ],
        }


@dataclass(frozen=True)
class DiffReport:
    """
    Назначение:
        Обёртка над списком DiffEntry со счётчиками для отчётов.
    """

    entries: tuple[DiffEntry, ...]

    def _count(self, kind: ChangeKind) -> int:
        return sum(1 for entry in self.entries if entry.kind is kind)

    @property
    def added_count(self) -> int:
        return self._count(ChangeKind.ADDED)

    @property
    def removed_count(self) -> int:
        return self._count(ChangeKind.REMOVED)

    @property
    def modified_count(self) -> int:
        return self._count(ChangeKind.MODIFIED)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def by_type(self) -> dict[str, dict[str, int]]:
        result: dict[str, dict[str, int]] = {}
        for entry in self.entries:
            counts = result.setdefault(entry.record_type, {kind.value: 0 for kind in ChangeKind})
            counts[entry.kind.value] += 1
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "added": self.added_count,
                "removed": self.removed_count,
                "modified": self.modified_count,
                "by_type": self.by_type(),
            },
            "entries": [entry.to_dict() for entry in self.entries],
        }
