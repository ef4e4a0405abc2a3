from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from powersnap.domain.catalog.descriptors import PropertyDescriptor, RecordTypeDescriptor
from powersnap.domain.exceptions import CatalogDefinitionError, UnknownRecordTypeError


class RecordTypeCatalog:
    """
    Назначение/ответственность:
        Закрытый, перечислимый набор типов записей. Строится один раз
        из декларативной таблицы и далее не меняется.

    Контракт:
        - list_types() -> имена типов в порядке объявления.
        - describe(name) -> дескриптор или None (неизвестный тип).
        - require(name) -> дескриптор или UnknownRecordTypeError.

    Ошибки:
        CatalogDefinitionError при некорректной таблице (дубликаты,
        тип без компонентов ключа, несколько маркеров сценария).
    """

    def __init__(self, descriptors: Iterable[RecordTypeDescriptor]) -> None:
        ordered: dict[str, RecordTypeDescriptor] = {}
        for descriptor in descriptors:
            _check_descriptor(descriptor)
            if descriptor.name in ordered:
                raise CatalogDefinitionError("duplicate record type", record_type=descriptor.name)
            ordered[descriptor.name] = descriptor
        self._descriptors = ordered
        self._order = {name: index for index, name in enumerate(ordered)}

    @classmethod
    def from_definitions(cls, definitions: Iterable[Mapping[str, Any]]) -> "RecordTypeCatalog":
        """
        Назначение:
            Построить каталог из декларативных описаний (dict из таблицы или YAML).

        Входные данные:
            definitions: элементы вида
                {name, display_name?, source_class?, category?,
                 properties: [str | {name, category?, units?, key?, scenario?, deprecated?}]}
        """
        return cls(parse_definition(item) for item in definitions)

    def list_types(self) -> list[str]:
        return list(self._descriptors)

    def describe(self, record_type: str) -> RecordTypeDescriptor | None:
        return self._descriptors.get(record_type)

    def require(self, record_type: str) -> RecordTypeDescriptor:
        descriptor = self._descriptors.get(record_type)
        if descriptor is None:
            raise UnknownRecordTypeError(record_type)
        return descriptor

    def declaration_index(self, record_type: str) -> int:
        """
        Позиция типа в порядке объявления; неизвестные типы идут после всех известных.
        """
        return self._order.get(record_type, len(self._order))

    def scenario_types(self) -> list[str]:
        return [name for name, descriptor in self._descriptors.items() if descriptor.has_scenarios]

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._descriptors

    def __iter__(self) -> Iterator[RecordTypeDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


def _check_descriptor(descriptor: RecordTypeDescriptor) -> None:
    if not descriptor.name or not descriptor.name.strip():
        raise CatalogDefinitionError("record type name is blank")
    seen: set[str] = set()
    for prop in descriptor.properties:
        if prop.name in seen:
            raise CatalogDefinitionError(f"duplicate property '{prop.name}'", record_type=descriptor.name)
        seen.add(prop.name)
        if prop.is_scenario and not prop.is_key:
            raise CatalogDefinitionError(
                f"scenario property '{prop.name}' must be a key component",
                record_type=descriptor.name,
            )
    if not descriptor.key_components:
        raise CatalogDefinitionError("no key components declared", record_type=descriptor.name)
    if sum(1 for prop in descriptor.properties if prop.is_scenario) > 1:
        raise CatalogDefinitionError("more than one scenario property", record_type=descriptor.name)


def parse_definition(item: Mapping[str, Any]) -> RecordTypeDescriptor:
    if not isinstance(item, Mapping):
        raise CatalogDefinitionError(f"definition must be a mapping, got {type(item).__name__}")
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CatalogDefinitionError("definition without a name")
    raw_properties = item.get("properties")
    if not isinstance(raw_properties, list) or not raw_properties:
        raise CatalogDefinitionError("properties must be a non-empty list", record_type=name)

    properties: list[PropertyDescriptor] = []
    for raw in raw_properties:
        if isinstance(raw, str):
            properties.append(PropertyDescriptor(name=raw))
            continue
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            raise CatalogDefinitionError(f"invalid property entry: {raw!r}", record_type=name)
        scenario = bool(raw.get("scenario", False))
        properties.append(
            PropertyDescriptor(
                name=raw["name"],
                category=str(raw.get("category") or "General"),
                units=raw.get("units"),
                is_key=bool(raw.get("key", False)) or scenario,
                is_scenario=scenario,
                deprecated=bool(raw.get("deprecated", False)),
            )
        )

    return RecordTypeDescriptor(
        name=name.strip(),
        properties=tuple(properties),
        display_name=str(item.get("display_name") or name),
        source_class=str(item.get("source_class") or ""),
        category=str(item.get("category") or "equipment"),
    )
