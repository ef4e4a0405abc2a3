from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Коды фатальных ошибок (исключений) ядра импорта.
    """

    MAPPING_INVALID = "MAPPING_INVALID"
    CATALOG_INVALID = "CATALOG_INVALID"
    UNKNOWN_RECORD_TYPE = "UNKNOWN_RECORD_TYPE"
    INCOMPLETE_KEY = "INCOMPLETE_KEY"
    FILE_ACCESS = "FILE_ACCESS"
    SOURCE_FORMAT = "SOURCE_FORMAT"
    SNAPSHOT_FORMAT = "SNAPSHOT_FORMAT"


class FindingCode(str, Enum):
    """
    Назначение:
        Коды нефатальных диагностик (Finding), которые собираются в отчёт.
    """

    # mapping
    BLANK_TARGET_TYPE = "BLANK_TARGET_TYPE"
    BLANK_PROPERTY_NAME = "BLANK_PROPERTY_NAME"
    BLANK_COLUMN_HEADER = "BLANK_COLUMN_HEADER"
    REQUIRED_HEADER_BLANK = "REQUIRED_HEADER_BLANK"
    DUPLICATE_MAPPING = "DUPLICATE_MAPPING"
    REQUIRED_DUPLICATE_MAPPING = "REQUIRED_DUPLICATE_MAPPING"
    UNKNOWN_TARGET_TYPE = "UNKNOWN_TARGET_TYPE"
    UNKNOWN_PROPERTY = "UNKNOWN_PROPERTY"
    KEY_PROPERTY_UNMAPPED = "KEY_PROPERTY_UNMAPPED"

    # import
    CLASSIFICATION_FAILED = "CLASSIFICATION_FAILED"
    KEY_COLUMNS_MISSING = "KEY_COLUMNS_MISSING"
    MAPPING_BLOCKED = "MAPPING_BLOCKED"
    REQUIRED_HEADER_MISSING = "REQUIRED_HEADER_MISSING"
    DEFAULT_VALUE_APPLIED = "DEFAULT_VALUE_APPLIED"
    INCOMPLETE_KEY = "INCOMPLETE_KEY"
    DUPLICATE_KEY_IN_SOURCE = "DUPLICATE_KEY_IN_SOURCE"
    FILE_ACCESS_FAILED = "FILE_ACCESS_FAILED"
    SOURCE_FORMAT_ERROR = "SOURCE_FORMAT_ERROR"

    # merge
    KEY_COLLISION = "KEY_COLLISION"
    EQUIPMENT_MISMATCH = "EQUIPMENT_MISMATCH"
    MERGE_ABORTED = "MERGE_ABORTED"
    VERSION_MISMATCH = "VERSION_MISMATCH"
