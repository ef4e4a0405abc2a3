from __future__ import annotations

import pytest

from powersnap.datasets.registry import build_default_catalog
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.snapshot.snapshot import Snapshot


def _put_duty(snapshot: Snapshot, device: str, scenario: str) -> None:
    record = {"BusName": "SWGR-1", "EquipmentName": device, "Scenario": scenario}
    snapshot.put("ShortCircuit", CompositeKey.of("SWGR-1", device, scenario), record)


def _put_arc(snapshot: Snapshot, bus: str, scenario: str) -> None:
    snapshot.put("ArcFlash", CompositeKey.of(bus, scenario), {"ArcFaultBusName": bus, "Scenario": scenario})


def _study() -> Snapshot:
    snapshot = Snapshot()
    _put_duty(snapshot, "CB-1", "Main-Max")
    _put_duty(snapshot, "CB-2", "Main-Max")
    _put_duty(snapshot, "CB-1", "Main-Min")
    _put_arc(snapshot, "SWGR-1", "Main-Max")
    snapshot.put("Bus", CompositeKey.of("SWGR-1"), {"Id": "SWGR-1"})
    return snapshot


def test_available_scenarios_come_from_scenario_types_only():
    snapshot = _study()

    assert snapshot.available_scenarios(build_default_catalog()) == ["Main-Max", "Main-Min"]


def test_scenario_and_type_statistics():
    catalog = build_default_catalog()
    snapshot = _study()

    assert snapshot.scenario_statistics(catalog, "Main-Max") == {"ShortCircuit": 2, "ArcFlash": 1}
    stats = snapshot.type_statistics(catalog)
    assert stats["ShortCircuit"].by_scenario == {"Main-Max": 2, "Main-Min": 1}
    assert stats["ShortCircuit"].uniform is True
    assert stats["ArcFlash"].uniform is False
    assert stats["Bus"].total == 1
    assert snapshot.has_uniform_scenarios(catalog) is False


def test_key_values_track_observed_components():
    snapshot = _study()

    values = snapshot.key_values("ShortCircuit")

    assert values[1] == frozenset({"CB-1", "CB-2"})
    assert values[2] == frozenset({"Main-Max", "Main-Min"})


def test_rename_scenario_updates_keys_and_property():
    catalog = build_default_catalog()
    snapshot = _study()

    renamed = snapshot.rename_scenario(catalog, "Main-Min", "Emergency")

    assert renamed == 1
    record = snapshot.get("ShortCircuit", CompositeKey.of("SWGR-1", "CB-1", "Emergency"))
    assert record["Scenario"] == "Emergency"
    assert not snapshot.contains("ShortCircuit", CompositeKey.of("SWGR-1", "CB-1", "Main-Min"))
    assert snapshot.available_scenarios(catalog) == ["Emergency", "Main-Max"]


def test_rename_collision_leaves_snapshot_unchanged():
    catalog = build_default_catalog()
    snapshot = _study()
    before = snapshot.copy()

    with pytest.raises(ValueError):
        snapshot.rename_scenario(catalog, "Main-Min", "Main-Max")

    assert snapshot == before
    with pytest.raises(ValueError):
        snapshot.rename_scenario(catalog, "Main-Min", " ")


def test_remove_and_copy_are_independent():
    snapshot = _study()
    clone = snapshot.copy()

    removed = snapshot.remove("ShortCircuit", CompositeKey.of("SWGR-1", "CB-2", "Main-Max"))

    assert removed["EquipmentName"] == "CB-2"
    assert snapshot.key_values("ShortCircuit")[1] == frozenset({"CB-1"})
    assert clone.record_count("ShortCircuit") == 3
    assert snapshot != clone
