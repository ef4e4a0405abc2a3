from __future__ import annotations

import json

import pytest

from powersnap.domain.exceptions import SnapshotFormatError
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.snapshot.snapshot import ImportFileRecord, Snapshot
from powersnap.infra.snapshot.snapshot_store import load_snapshot, save_snapshot, snapshot_from_dict, snapshot_to_dict


def _snapshot() -> Snapshot:
    snapshot = Snapshot(software_version="10.4")
    snapshot.put("Bus", CompositeKey.of("B2"), {"Id": "B2", "BaseKV": "4.16"})
    snapshot.put("Bus", CompositeKey.of("B1"), {"Id": "B1", "BaseKV": "13.8"})
    snapshot.put(
        "ShortCircuit",
        CompositeKey.of("SWGR-1", "CB-1", "Main-Max"),
        {"BusName": "SWGR-1", "EquipmentName": "CB-1", "Scenario": "Main-Max", "HalfCycleDutyKA": "20 kA"},
    )
    snapshot.add_source(
        ImportFileRecord(
            file_path="max.csv",
            imported_at="2024-05-01T10:00:00Z",
            record_types=("ShortCircuit",),
            entry_count=1,
            scenario_mappings={"Study": "Main-Max"},
            software_version="10.4",
        )
    )
    return snapshot


def test_saved_snapshot_loads_back_equal(tmp_path):
    original = _snapshot()
    path = save_snapshot(original, str(tmp_path / "snapshots" / "s1.json"))

    loaded = load_snapshot(path)

    assert loaded == original
    assert loaded.software_version == "10.4"
    assert loaded.sources == original.sources
    assert loaded.sources[0].was_renamed is True


def test_serialized_form_is_sorted_and_explicit():
    data = snapshot_to_dict(_snapshot())

    assert data["formatVersion"] == 1
    assert list(data["recordTypes"]) == ["Bus", "ShortCircuit"]
    assert [entry["keyComponents"] for entry in data["recordTypes"]["Bus"]] == [["B1"], ["B2"]]
    assert data["sources"][0]["scenarioMappings"] == {"Study": "Main-Max"}


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"formatVersion": 2, "recordTypes": {}},
        {"formatVersion": 1, "recordTypes": "Bus"},
        {"formatVersion": 1, "recordTypes": {"Bus": [{"keyComponents": "B1", "properties": {}}]}},
        {"formatVersion": 1, "recordTypes": {"Bus": [{"keyComponents": [""], "properties": {}}]}},
        {"formatVersion": 1, "recordTypes": {}, "sources": [{"importedAt": "x"}]},
        {"formatVersion": 1, "recordTypes": {}, "sources": 3},
        {"formatVersion": 1, "recordTypes": {}, "sources": [{"filePath": "a.csv", "entryCount": "many"}]},
        {"formatVersion": 1, "recordTypes": {}, "sources": [{"filePath": "a.csv", "entryCount": [2]}]},
        {"formatVersion": 1, "recordTypes": {}, "sources": [{"filePath": "a.csv", "scenarioMappings": ["Study"]}]},
        {"formatVersion": 1, "recordTypes": {}, "sources": [{"filePath": "a.csv", "recordTypes": "Bus"}]},
    ],
)
def test_malformed_snapshot_raises(data):
    with pytest.raises(SnapshotFormatError):
        snapshot_from_dict(data)


def test_invalid_json_file_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(SnapshotFormatError) as exc_info:
        load_snapshot(str(path))
    assert exc_info.value.path == str(path)


def test_loaded_values_are_strings(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(
        json.dumps(
            {"formatVersion": 1, "recordTypes": {"Bus": [{"keyComponents": ["B1"], "properties": {"Id": "B1", "BaseKV": 13.8, "Zone": None}}]}}
        ),
        encoding="utf-8",
    )

    snapshot = load_snapshot(str(path))

    assert snapshot.get("Bus", CompositeKey.of("B1")) == {"Id": "B1", "BaseKV": "13.8", "Zone": ""}
