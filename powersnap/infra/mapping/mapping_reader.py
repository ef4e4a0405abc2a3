from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from powersnap.domain.exceptions import MappingValidationError
from powersnap.domain.mapping.models import MappingDocument, MappingEntry
from powersnap.domain.models import Severity


def _pick(obj: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in obj:
            return obj[name]
    return None


def _text(value: Any, field_name: str, where: str, source: str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MappingValidationError(f"{where}: '{field_name}' must be a string", source=source)
    return str(value).strip()


def parse_mapping_document(data: Any, source: str | None = None) -> MappingDocument:
    """
    Назначение:
        Преобразовать распарсенный JSON в MappingDocument.

    Входные данные:
        data: dict с ключами softwareVersion/mapVersion/importMap
              (допускаются и ключи в PascalCase: SoftwareVersion, ImportMap, ...)

    Ошибки:
        MappingValidationError при структурной ошибке: корень не объект,
        importMap не список, элемент не объект, неверный тип поля,
        неизвестный severity.

    Алгоритм:
        - Строковые поля тримятся.
        - aliases: список строк, пустые и повторы отбрасываются.
        - Проблемы качества данных (дубликаты, пустые поля) здесь не проверяются.
    """
    if not isinstance(data, Mapping):
        raise MappingValidationError("document root must be an object", source=source)

    raw_entries = _pick(data, "importMap", "ImportMap")
    if raw_entries is None:
        raw_entries = []
    if not isinstance(raw_entries, list):
        raise MappingValidationError("'importMap' must be a list", source=source)

    entries: list[MappingEntry] = []
    for position, raw in enumerate(raw_entries, start=1):
        where = f"importMap[{position}]"
        if not isinstance(raw, Mapping):
            raise MappingValidationError(f"{where} must be an object", source=source)

        required = _pick(raw, "required", "Required")
        if required is None:
            required = False
        if not isinstance(required, bool):
            raise MappingValidationError(f"{where}: 'required' must be a boolean", source=source)

        try:
            severity = Severity.parse(_pick(raw, "severity", "Severity"))
        except ValueError as exc:
            raise MappingValidationError(f"{where}: {exc}", source=source) from exc

        raw_aliases = _pick(raw, "aliases", "Aliases") or []
        if not isinstance(raw_aliases, list):
            raise MappingValidationError(f"{where}: 'aliases' must be a list", source=source)
        aliases: list[str] = []
        for alias in raw_aliases:
            text = _text(alias, "aliases", where, source)
            if text and text not in aliases:
                aliases.append(text)

        default_raw = _pick(raw, "defaultValue", "DefaultValue")
        default_value = None if default_raw is None else _text(default_raw, "defaultValue", where, source)

        entries.append(
            MappingEntry(
                target_type=_text(_pick(raw, "targetType", "TargetType"), "targetType", where, source),
                property_name=_text(_pick(raw, "propertyName", "PropertyName"), "propertyName", where, source),
                column_header=_text(_pick(raw, "columnHeader", "ColumnHeader"), "columnHeader", where, source),
                required=required,
                severity=severity,
                aliases=tuple(aliases),
                default_value=default_value,
            )
        )

    return MappingDocument(
        software_version=_text(_pick(data, "softwareVersion", "SoftwareVersion"), "softwareVersion", "document", source),
        map_version=_text(_pick(data, "mapVersion", "MapVersion"), "mapVersion", "document", source),
        entries=tuple(entries),
        source_path=source,
    )


def load_mapping_document(path: str) -> MappingDocument:
    """
    Назначение:
        Прочитать JSON-документ маппинга с диска.

    Ошибки:
        MappingValidationError: файл не читается, невалидный JSON или структура.
    """
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise MappingValidationError(f"invalid JSON: {exc}", source=path) from exc
    except OSError as exc:
        raise MappingValidationError(f"cannot read file: {exc}", source=path) from exc
    return parse_mapping_document(data, source=path)


def dump_mapping_document(document: MappingDocument) -> dict[str, Any]:
    """
    Сериализация в документированную camelCase-форму.
    """
    entries: list[dict[str, Any]] = []
    for entry in document.entries:
        item: dict[str, Any] = {
            "targetType": entry.target_type,
            "propertyName": entry.property_name,
            "columnHeader": entry.column_header,
            "required": entry.required,
            "severity": entry.severity.value,
        }
        if entry.aliases:
            item["aliases"] = list(entry.aliases)
        if entry.default_value is not None:
            item["defaultValue"] = entry.default_value
        entries.append(item)
    return {
        "softwareVersion": document.software_version,
        "mapVersion": document.map_version,
        "importMap": entries,
    }


def save_mapping_document(document: MappingDocument, path: str) -> str:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_mapping_document(document), f, ensure_ascii=False, indent=2)
    return path
