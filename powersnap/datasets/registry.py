from __future__ import annotations

from powersnap.datasets.record_types import RECORD_TYPE_DEFINITIONS
from powersnap.domain.catalog.catalog import RecordTypeCatalog


def build_default_catalog() -> RecordTypeCatalog:
    """
    Возвращает каталог встроенных типов записей (новый объект на каждый вызов).
    """
    return RecordTypeCatalog.from_definitions(RECORD_TYPE_DEFINITIONS)


def load_catalog(catalog_path: str | None = None) -> RecordTypeCatalog:
    """
    Назначение:
        Каталог из YAML-файла, если путь задан, иначе встроенный.

    Ошибки:
        CatalogDefinitionError при некорректном файле.
    """
    if not catalog_path:
        return build_default_catalog()
    from powersnap.infra.catalog.catalog_yaml import load_catalog_yaml

    return load_catalog_yaml(catalog_path)
