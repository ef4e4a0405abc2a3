from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.catalog.descriptors import RecordTypeDescriptor
from powersnap.domain.exceptions import IncompleteKeyError


@dataclass(frozen=True, order=True)
class CompositeKey:
    """
    Назначение:
        Value Object составного ключа записи: упорядоченный кортеж строк
        переменной длины.

    Инварианты/гарантии:
        - Равенство и hash по содержимому (ординальное сравнение строк).
        - Компоненты непустые.
    """

    components: tuple[str, ...]

    def __post_init__(self) -> None:
        components = tuple(self.components)
        if not components:
            raise ValueError("composite key needs at least one component")
        for component in components:
            if not isinstance(component, str) or component.strip() == "":
                raise ValueError(f"composite key component must be a non-blank string: {component!r}")
        object.__setattr__(self, "components", components)

    @classmethod
    def of(cls, *components: str) -> "CompositeKey":
        return cls(tuple(components))

    def replace(self, index: int, value: str) -> "CompositeKey":
        """Новый ключ с заменённым компонентом (переименование сценария)."""
        parts = list(self.components)
        parts[index] = value
        return CompositeKey(tuple(parts))

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[str]:
        return iter(self.components)

    def __getitem__(self, index: int) -> str:
        return self.components[index]

    def __str__(self) -> str:
        return "(" + ", ".join(self.components) + ")"


def _is_blank(value: object) -> bool:
    return value is None or str(value).strip() == ""


def build_composite_key(
    descriptor: RecordTypeDescriptor,
    record: Mapping[str, str | None],
    line_no: int | None = None,
) -> CompositeKey:
    """
    Назначение:
        Построить CompositeKey записи по компонентам ключа дескриптора.

    Контракт:
        - Компоненты читаются в порядке объявления.
        - Значения берутся как есть, без нормализации.

    Ошибки:
        IncompleteKeyError, если хотя бы один компонент отсутствует или пуст.
    """
    components = descriptor.key_components
    missing = tuple(name for name in components if _is_blank(record.get(name)))
    if missing:
        raise IncompleteKeyError(record_type=descriptor.name, missing=missing, line_no=line_no)
    return CompositeKey(tuple(str(record[name]) for name in components))


class CompositeKeyBuilder:
    """
    Назначение/ответственность:
        Построение ключей по имени типа через каталог.
    """

    def __init__(self, catalog: RecordTypeCatalog) -> None:
        self.catalog = catalog

    def build(self, record_type: str, record: Mapping[str, str | None], line_no: int | None = None) -> CompositeKey:
        return build_composite_key(self.catalog.require(record_type), record, line_no=line_no)
