from __future__ import annotations

import json

import pytest

from powersnap.domain.exceptions import MappingValidationError
from powersnap.domain.models import Severity
from powersnap.infra.mapping.mapping_reader import (
    dump_mapping_document,
    load_mapping_document,
    parse_mapping_document,
    save_mapping_document,
)


def test_parse_camel_case_document():
    document = parse_mapping_document(
        {
            "softwareVersion": "10.4",
            "mapVersion": "3",
            "importMap": [
                {
                    "targetType": " Bus ",
                    "propertyName": "Id",
                    "columnHeader": " Bus ID ",
                    "required": True,
                    "severity": "error",
                    "aliases": ["Bus Name", "Bus Name", ""],
                },
                {
                    "targetType": "Bus",
                    "propertyName": "Service",
                    "columnHeader": "Service",
                    "defaultValue": "Normal",
                },
            ],
        }
    )

    assert document.software_version == "10.4"
    assert document.map_version == "3"
    first, second = document.entries
    assert first.target_type == "Bus"
    assert first.column_header == "Bus ID"
    assert first.severity is Severity.ERROR
    assert first.aliases == ("Bus Name",)
    assert second.required is False
    assert second.severity is Severity.INFO
    assert second.default_value == "Normal"


def test_parse_pascal_case_document():
    document = parse_mapping_document(
        {
            "SoftwareVersion": "9.0",
            "MapVersion": "1",
            "ImportMap": [
                {"TargetType": "Fuse", "PropertyName": "OnBus", "ColumnHeader": "On Bus", "Severity": "Warning"}
            ],
        }
    )

    assert document.software_version == "9.0"
    assert document.entries[0].property_name == "OnBus"
    assert document.entries[0].severity is Severity.WARNING


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"importMap": {"targetType": "Bus"}},
        {"importMap": ["Bus"]},
        {"importMap": [{"targetType": "Bus", "required": "yes"}]},
        {"importMap": [{"targetType": "Bus", "severity": "Critical"}]},
        {"importMap": [{"targetType": "Bus", "aliases": "Bus Name"}]},
        {"importMap": [{"targetType": ["Bus"]}]},
    ],
)
def test_structural_errors_raise(data):
    with pytest.raises(MappingValidationError):
        parse_mapping_document(data)


def test_load_invalid_json_raises(tmp_path):
    path = tmp_path / "map.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(MappingValidationError) as exc_info:
        load_mapping_document(str(path))
    assert exc_info.value.source == str(path)


def test_save_writes_documented_camel_case(tmp_path):
    document = parse_mapping_document(
        {
            "softwareVersion": "10.4",
            "mapVersion": "3",
            "importMap": [
                {"targetType": "Bus", "propertyName": "Id", "columnHeader": "Bus ID", "required": True, "aliases": ["ID"]}
            ],
        }
    )
    path = tmp_path / "out" / "map.json"

    save_mapping_document(document, str(path))
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data == dump_mapping_document(document)
    assert data["importMap"][0] == {
        "targetType": "Bus",
        "propertyName": "Id",
        "columnHeader": "Bus ID",
        "required": True,
        "severity": "Info",
        "aliases": ["ID"],
    }
    assert load_mapping_document(str(path)).entries == document.entries
