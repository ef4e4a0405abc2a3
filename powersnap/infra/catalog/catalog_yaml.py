from __future__ import annotations

from pathlib import Path

import yaml

from powersnap.domain.catalog.catalog import RecordTypeCatalog
from powersnap.domain.exceptions import CatalogDefinitionError


def load_catalog_yaml(path: str) -> RecordTypeCatalog:
    """
    Назначение:
        Загрузить каталог типов записей из YAML.

    Входные данные:
        path: файл вида
            record_types:
              - name: Bus
                properties:
                  - {name: Id, key: true}
                  - BaseKV

    Ошибки:
        CatalogDefinitionError: файл отсутствует, не парсится или имеет неверную форму.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise CatalogDefinitionError(f"catalog file not found: {path}")
    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise CatalogDefinitionError(f"cannot parse {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("record_types")
    if not isinstance(data, list):
        raise CatalogDefinitionError(f"{path}: expected a list of record types")
    return RecordTypeCatalog.from_definitions(data)
