from __future__ import annotations

import pytest

from powersnap.datasets.registry import build_default_catalog
from powersnap.domain.exceptions import IncompleteKeyError, UnknownRecordTypeError
from powersnap.domain.keys.composite_key import CompositeKey, CompositeKeyBuilder, build_composite_key


def test_key_has_value_semantics():
    first = CompositeKey.of("B1", "Main-Max")
    second = CompositeKey(("B1", "Main-Max"))

    assert first == second
    assert hash(first) == hash(second)
    assert {first: 1}[second] == 1
    assert CompositeKey.of("B1") != CompositeKey.of("b1")
    assert CompositeKey.of("B1") != CompositeKey.of("B1", "Main-Max")


def test_key_string_form_and_ordering():
    keys = [CompositeKey.of("B2", "A"), CompositeKey.of("B1", "Z"), CompositeKey.of("B1", "A")]

    assert str(keys[0]) == "(B2, A)"
    assert [str(key) for key in sorted(keys)] == ["(B1, A)", "(B1, Z)", "(B2, A)"]


@pytest.mark.parametrize("components", [(), ("B1", ""), ("  ",)])
def test_key_rejects_blank_components(components):
    with pytest.raises(ValueError):
        CompositeKey(components)


def test_build_reads_components_in_declared_order():
    descriptor = build_default_catalog().require("ShortCircuit")
    record = {"Scenario": "Main-Max", "EquipmentName": "CB-1", "BusName": "SWGR-1", "FaultType": "3P"}

    key = build_composite_key(descriptor, record)

    assert key.components == ("SWGR-1", "CB-1", "Main-Max")


def test_build_rejects_blank_component():
    descriptor = build_default_catalog().require("ShortCircuit")

    with pytest.raises(IncompleteKeyError) as exc_info:
        build_composite_key(descriptor, {"BusName": "SWGR-1", "EquipmentName": " ", "Scenario": None}, line_no=7)

    assert exc_info.value.missing == ("EquipmentName", "Scenario")
    assert exc_info.value.line_no == 7
    assert exc_info.value.to_dict()["code"] == "INCOMPLETE_KEY"


def test_builder_looks_up_descriptor():
    builder = CompositeKeyBuilder(build_default_catalog())

    assert builder.build("Fuse", {"Id": "F-1", "OnBus": "MCC-1"}) == CompositeKey.of("F-1", "MCC-1")
    with pytest.raises(UnknownRecordTypeError):
        builder.build("Nope", {"Id": "1"})


def test_replace_returns_new_key():
    key = CompositeKey.of("B1", "Main-Min")

    assert key.replace(1, "Main-Max") == CompositeKey.of("B1", "Main-Max")
    assert key == CompositeKey.of("B1", "Main-Min")
