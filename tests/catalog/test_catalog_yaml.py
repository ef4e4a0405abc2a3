from __future__ import annotations

import pytest

from powersnap.datasets.registry import load_catalog
from powersnap.domain.exceptions import CatalogDefinitionError


def test_load_catalog_from_yaml(tmp_path):
    path = tmp_path / "catalog.yml"
    path.write_text(
        "\n".join(
            [
                "record_types:",
                "  - name: Study",
                "    category: calculation",
                "    properties:",
                "      - {name: Bus, key: true}",
                "      - {name: Scenario, scenario: true}",
                "      - {name: Energy, units: cal/cm2}",
                "  - name: Bus",
                "    properties:",
                "      - {name: Id, key: true}",
                "      - BaseKV",
            ]
        ),
        encoding="utf-8",
    )

    catalog = load_catalog(str(path))

    assert catalog.list_types() == ["Study", "Bus"]
    study = catalog.require("Study")
    assert study.key_components == ("Bus", "Scenario")
    assert study.get_property("Energy").units == "cal/cm2"


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogDefinitionError):
        load_catalog(str(tmp_path / "absent.yml"))


def test_load_catalog_wrong_shape(tmp_path):
    path = tmp_path / "catalog.yml"
    path.write_text("record_types: 12\n", encoding="utf-8")

    with pytest.raises(CatalogDefinitionError):
        load_catalog(str(path))
