from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.catalog.descriptors import RecordTypeDescriptor
from powersnap.domain.error_codes import FindingCode
from powersnap.domain.mapping.models import MappingDocument, MappingEntry
from powersnap.domain.mapping.suggest import FUZZY_SIMILARITY_FLOOR, MappingSuggestion, suggest_mappings
from powersnap.domain.models import DiagnosticStage, Finding, Severity


@dataclass
class HeaderBinding:
    """
    Назначение:
        Результат сопоставления строки заголовков с записями маппинга одного типа.

    Поля:
        columns: property_name -> индекс колонки в строке
        missing: записи маппинга, для которых колонка не найдена
        via_alias: property_name -> алиас, по которому найдена колонка
    """

    record_type: str
    columns: dict[str, int] = field(default_factory=dict)
    missing: list[MappingEntry] = field(default_factory=list)
    via_alias: dict[str, str] = field(default_factory=dict)


class MappingResolver:
    """
    Назначение/ответственность:
        Запросы к MappingDocument и его валидация.

    Контракт:
        - column_for(type, property) -> заголовок или None
        - property_for(type, header) -> свойство или None
        - validate() -> list[Finding]; чистая функция, не бросает исключений
          для проблем качества данных.

    Инварианты/гарантии:
        - При дубликатах (type, property) используется первое вхождение.
        - Записи с пустым targetType/propertyName в запросах не участвуют.
    """

    def __init__(
        self,
        document: MappingDocument,
        catalog: RecordTypeCatalog | None = None,
        similarity_floor: float = FUZZY_SIMILARITY_FLOOR,
    ) -> None:
        self.document = document
        self.catalog = catalog
        self.similarity_floor = similarity_floor
        self._by_type: dict[str, dict[str, MappingEntry]] = {}
        for entry in document.entries:
            if not entry.target_type or not entry.property_name:
                continue
            per_type = self._by_type.setdefault(entry.target_type, {})
            if _find_casefold(per_type, entry.property_name) is None:
                per_type[entry.property_name] = entry

    def column_for(self, record_type: str, property_name: str) -> str | None:
        entry = self._by_type.get(record_type, {}).get(property_name)
        if entry is None or not entry.column_header:
            return None
        return entry.column_header

    def property_for(self, record_type: str, header: str) -> str | None:
        entries = self._by_type.get(record_type, {})
        for entry in entries.values():
            if entry.column_header and entry.column_header == header:
                return entry.property_name
        for entry in entries.values():
            if header in entry.aliases:
                return entry.property_name
        return None

    def entries_for_type(self, record_type: str) -> list[MappingEntry]:
        return list(self._by_type.get(record_type, {}).values())

    def mapped_types(self) -> list[str]:
        types = list(self._by_type)
        if self.catalog is not None:
            catalog = self.catalog
            types.sort(key=catalog.declaration_index)
        return types

    def mapped_headers(self, record_type: str) -> list[str]:
        """Уникальные непустые основные заголовки типа в порядке документа."""
        headers: list[str] = []
        for entry in self._by_type.get(record_type, {}).values():
            if entry.column_header and entry.column_header not in headers:
                headers.append(entry.column_header)
        return headers

    def known_headers(self) -> set[str]:
        """Все заголовки и алиасы документа (для поиска строк заголовков)."""
        known: set[str] = set()
        for entries in self._by_type.values():
            for entry in entries.values():
                known.update(entry.headers())
        return known

    def bind_headers(self, record_type: str, headers: Sequence[str]) -> HeaderBinding:
        """
        Назначение:
            Найти индекс колонки для каждой записи маппинга типа.

        Алгоритм:
            - Сначала точное совпадение с columnHeader.
            - Затем первый совпавший алиас.
            - Иначе запись попадает в missing.
        """
        positions: dict[str, int] = {}
        for index, header in enumerate(headers):
            if header and header not in positions:
                positions[header] = index

        binding = HeaderBinding(record_type=record_type)
        for entry in self.entries_for_type(record_type):
            if entry.column_header in positions:
                binding.columns[entry.property_name] = positions[entry.column_header]
                continue
            alias = next((a for a in entry.aliases if a in positions), None)
            if alias is not None:
                binding.columns[entry.property_name] = positions[alias]
                binding.via_alias[entry.property_name] = alias
                continue
            binding.missing.append(entry)
        return binding

    def suggest(
        self,
        descriptor: RecordTypeDescriptor,
        headers: Sequence[str],
        similarity_floor: float | None = None,
    ) -> list[MappingSuggestion]:
        """
        Рекомендации header -> property для неразмеченных заголовков.
        Только совет: документ маппинга не изменяется.
        """
        floor = self.similarity_floor if similarity_floor is None else similarity_floor
        return suggest_mappings(descriptor.property_names, headers, similarity_floor=floor)

    def validate(self) -> list[Finding]:
        """
        Назначение:
            Проверить документ маппинга.

        Выходные данные:
            list[Finding]:
                - пустые targetType/propertyName (Error)
                - required=true и пустой columnHeader (Error)
                - пустой columnHeader у необязательной записи (Warning)
                - дубликаты (type, property) без учёта регистра
                  (Warning, Error если одна из записей required)
                - при наличии каталога: неизвестный тип (Error), неизвестное
                  свойство (Warning), незамапленный компонент ключа (Warning)
        """
        findings: list[Finding] = []
        source = self.document.source_path
        seen: dict[tuple[str, str], MappingEntry] = {}

        for position, entry in enumerate(self.document.entries, start=1):
            where = f"entry #{position}"
            if not entry.target_type:
                findings.append(
                    _finding(Severity.ERROR, FindingCode.BLANK_TARGET_TYPE, f"{where}: targetType is blank", source=source)
                )
            if not entry.property_name:
                findings.append(
                    _finding(
                        Severity.ERROR,
                        FindingCode.BLANK_PROPERTY_NAME,
                        f"{where}: propertyName is blank",
                        record_type=entry.target_type or None,
                        source=source,
                    )
                )
            if not entry.column_header:
                if entry.required:
                    findings.append(
                        _finding(
                            Severity.ERROR,
                            FindingCode.REQUIRED_HEADER_BLANK,
                            f"{where}: required mapping has a blank columnHeader",
                            record_type=entry.target_type or None,
                            field=entry.property_name or None,
                            source=source,
                        )
                    )
                else:
                    findings.append(
                        _finding(
                            Severity.WARNING,
                            FindingCode.BLANK_COLUMN_HEADER,
                            f"{where}: columnHeader is blank, mapping is ignored",
                            record_type=entry.target_type or None,
                            field=entry.property_name or None,
                            source=source,
                        )
                    )
            if not entry.target_type or not entry.property_name:
                continue

            dedup_key = (entry.target_type.casefold(), entry.property_name.casefold())
            first = seen.get(dedup_key)
            if first is None:
                seen[dedup_key] = entry
                continue
            if first.required or entry.required:
                findings.append(
                    _finding(
                        Severity.ERROR,
                        FindingCode.REQUIRED_DUPLICATE_MAPPING,
                        f"{where}: required mapping {entry.target_type}.{entry.property_name} is declared more than once",
                        record_type=first.target_type,
                        field=first.property_name,
                        source=source,
                    )
                )
            else:
                findings.append(
                    _finding(
                        Severity.WARNING,
                        FindingCode.DUPLICATE_MAPPING,
                        f"{where}: duplicate mapping {entry.target_type}.{entry.property_name}, using first occurrence",
                        record_type=first.target_type,
                        field=first.property_name,
                        source=source,
                    )
                )

        if self.catalog is not None:
            findings.extend(self._validate_against_catalog(self.catalog))
        return findings

    def _validate_against_catalog(self, catalog: RecordTypeCatalog) -> list[Finding]:
        findings: list[Finding] = []
        source = self.document.source_path
        for record_type, entries in self._by_type.items():
            descriptor = catalog.describe(record_type)
            if descriptor is None:
                findings.append(
                    _finding(
                        Severity.ERROR,
                        FindingCode.UNKNOWN_TARGET_TYPE,
                        f"record type '{record_type}' is not in the catalog",
                        record_type=record_type,
                        source=source,
                    )
                )
                continue
            for property_name in entries:
                if not descriptor.has_property(property_name):
                    findings.append(
                        _finding(
                            Severity.WARNING,
                            FindingCode.UNKNOWN_PROPERTY,
                            f"{record_type} has no property '{property_name}', mapping is ignored",
                            record_type=record_type,
                            field=property_name,
                            source=source,
                        )
                    )
            for component in descriptor.key_components:
                if self.column_for(record_type, component) is None:
                    findings.append(
                        _finding(
                            Severity.WARNING,
                            FindingCode.KEY_PROPERTY_UNMAPPED,
                            f"key component {record_type}.{component} has no column mapping",
                            record_type=record_type,
                            field=component,
                            source=source,
                        )
                    )
        return findings


def blocked_types(findings: Sequence[Finding]) -> set[str]:
    """Типы, затронутые ошибками маппинга; их секции не импортируются."""
    return {f.record_type for f in findings if f.is_error and f.stage is DiagnosticStage.MAP and f.record_type}


def _find_casefold(entries: dict[str, MappingEntry], property_name: str) -> MappingEntry | None:
    wanted = property_name.casefold()
    for name, entry in entries.items():
        if name.casefold() == wanted:
            return entry
    return None


def _finding(
    severity: Severity,
    code: FindingCode,
    message: str,
    *,
    record_type: str | None = None,
    field: str | None = None,
    source: str | None = None,
) -> Finding:
    return Finding(
        stage=DiagnosticStage.MAP,
        severity=severity,
        code=code.value,
        message=message,
        record_type=record_type,
        field=field,
        source=source,
    )
