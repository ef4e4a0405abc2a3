from __future__ import annotations

from openpyxl import Workbook

from powersnap.datasets.registry import build_default_catalog
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.mapping.models import MappingDocument, MappingEntry
from powersnap.domain.snapshot.snapshot import Snapshot
from powersnap.infra.snapshot.snapshot_store import load_snapshot, save_snapshot
from powersnap.usecases.import_merge_service import ImportMerger


def _mapping() -> MappingDocument:
    return MappingDocument(
        software_version="10.4",
        map_version="1",
        entries=(
            MappingEntry("Bus", "Id", "Bus ID"),
            MappingEntry("Bus", "BaseKV", "Base kV"),
            MappingEntry("Fuse", "Id", "Fuse ID"),
            MappingEntry("Fuse", "OnBus", "On Bus"),
            MappingEntry("Fuse", "Status", "Fuse Status"),
        ),
    )


def _workbook(path) -> str:
    workbook = Workbook()
    buses = workbook.active
    buses.title = "Buses"
    buses.append(["Bus ID", "Base kV"])
    buses.append(["B1", 13.8])
    buses.append(["B2", 4.16])
    fuses = workbook.create_sheet("Fuses")
    fuses.append(["Fuse ID", "On Bus", "Fuse Status"])
    fuses.append(["F1", "B1", "Closed"])
    workbook.save(path)
    return str(path)


def test_imported_files_survive_save_and_load(tmp_path):
    csv_path = tmp_path / "extra.csv"
    csv_path.write_text("Bus ID,Base kV\nB3,0.48\n", encoding="utf-8")
    xlsx_path = _workbook(tmp_path / "export.xlsx")
    merger = ImportMerger(build_default_catalog(), run_id="rt1")

    record_sets = [merger.import_one(xlsx_path, _mapping()), merger.import_one(str(csv_path), _mapping())]
    snapshot = Snapshot()
    for record_set in record_sets:
        merger.merge_into(snapshot, record_set)
    loaded = load_snapshot(save_snapshot(snapshot, str(tmp_path / "snapshot.json")))

    expected = Snapshot()
    for record_set in record_sets:
        for record_type, key, record in record_set.items():
            expected.put(record_type, key, record)
    assert record_sets[0].record_types() == ["Bus", "Fuse"]
    assert loaded == expected
    assert loaded.record_count() == 4
    assert loaded.get("Bus", CompositeKey.of("B2"))["BaseKV"] == "4.16"
    assert loaded.get("Fuse", CompositeKey.of("F1", "B1"))["Status"] == "Closed"
    assert [source.file_path for source in loaded.sources] == [xlsx_path, str(csv_path)]
    assert loaded.software_version == "10.4"
