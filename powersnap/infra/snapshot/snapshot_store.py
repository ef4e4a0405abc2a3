from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from powersnap.domain.exceptions import SnapshotFormatError
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.snapshot.snapshot import ImportFileRecord, Snapshot

FORMAT_VERSION = 1


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """
    Назначение:
        Сериализация снимка в переносимый JSON-объект.

    Контракт:
        - Ключ каждой записи хранится явным массивом keyComponents.
        - Типы и записи отсортированы (детерминированный вывод).
    """
    record_types: dict[str, list[dict[str, Any]]] = {}
    for record_type in sorted(snapshot.record_types()):
        records = snapshot.records(record_type)
        record_types[record_type] = [
            {"keyComponents": list(key.components), "properties": dict(records[key])}
            for key in sorted(records)
        ]
    return {
        "formatVersion": FORMAT_VERSION,
        "softwareVersion": snapshot.software_version,
        "sources": [
            {
                "filePath": source.file_path,
                "importedAt": source.imported_at,
                "recordTypes": list(source.record_types),
                "entryCount": source.entry_count,
                "scenarioMappings": dict(source.scenario_mappings),
                "mappingPath": source.mapping_path,
                "softwareVersion": source.software_version,
            }
            for source in snapshot.sources
        ],
        "recordTypes": record_types,
    }


def snapshot_from_dict(data: Any, path: str | None = None) -> Snapshot:
    """
    Ошибки:
        SnapshotFormatError при несовместимой версии формата или неверной структуре.
    """
    if not isinstance(data, dict):
        raise SnapshotFormatError(path, "root must be an object")
    version = data.get("formatVersion")
    if version != FORMAT_VERSION:
        raise SnapshotFormatError(path, f"unsupported formatVersion: {version!r}")

    record_types = data.get("recordTypes") or {}
    if not isinstance(record_types, dict):
        raise SnapshotFormatError(path, "'recordTypes' must be an object")

    snapshot = Snapshot(software_version=data.get("softwareVersion"))
    for record_type, entries in record_types.items():
        if not isinstance(entries, list):
            raise SnapshotFormatError(path, f"'{record_type}' must be a list")
        for position, entry in enumerate(entries, start=1):
            where = f"{record_type}[{position}]"
            if not isinstance(entry, dict):
                raise SnapshotFormatError(path, f"{where} must be an object")
            components = entry.get("keyComponents")
            properties = entry.get("properties") or {}
            if not isinstance(components, list) or not isinstance(properties, dict):
                raise SnapshotFormatError(path, f"{where}: keyComponents must be a list and properties an object")
            try:
                key = CompositeKey(tuple(components))
            except ValueError as exc:
                raise SnapshotFormatError(path, f"{where}: {exc}") from exc
            snapshot.put(record_type, key, {str(k): "" if v is None else str(v) for k, v in properties.items()})

    sources = data.get("sources") or []
    if not isinstance(sources, list):
        raise SnapshotFormatError(path, "'sources' must be a list")
    for position, source in enumerate(sources, start=1):
        snapshot.add_source(_source_from_dict(source, f"sources[{position}]", path))
    return snapshot


def _source_from_dict(source: Any, where: str, path: str | None) -> ImportFileRecord:
    if not isinstance(source, dict) or not source.get("filePath"):
        raise SnapshotFormatError(path, f"{where}: invalid source entry")
    record_types = source.get("recordTypes") or []
    scenario_mappings = source.get("scenarioMappings") or {}
    if not isinstance(record_types, list):
        raise SnapshotFormatError(path, f"{where}: recordTypes must be a list")
    if not isinstance(scenario_mappings, dict):
        raise SnapshotFormatError(path, f"{where}: scenarioMappings must be an object")
    try:
        entry_count = int(source.get("entryCount") or 0)
    except (TypeError, ValueError) as exc:
        raise SnapshotFormatError(path, f"{where}: entryCount must be an integer") from exc
    return ImportFileRecord(
        file_path=str(source["filePath"]),
        imported_at=source.get("importedAt") or "",
        record_types=tuple(str(name) for name in record_types),
        entry_count=entry_count,
        scenario_mappings={str(k): str(v) for k, v in scenario_mappings.items()},
        mapping_path=source.get("mappingPath"),
        software_version=source.get("softwareVersion"),
    )


def save_snapshot(snapshot: Snapshot, path: str) -> str:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot_to_dict(snapshot), f, ensure_ascii=False, indent=2)
    return path


def load_snapshot(path: str) -> Snapshot:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(path, f"invalid JSON: {exc}") from exc
    return snapshot_from_dict(data, path=path)
