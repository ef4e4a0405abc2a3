from __future__ import annotations

import json

from powersnap.datasets.registry import build_default_catalog
from powersnap.domain.keys.composite_key import CompositeKey
from powersnap.domain.merge.models import CollisionPolicy, MergeOptions
from powersnap.infra.mapping.mapping_reader import save_mapping_document
from powersnap.domain.mapping.models import MappingDocument, MappingEntry
from powersnap.usecases.import_merge_service import ImportMerger


def _duty_mapping() -> MappingDocument:
    return MappingDocument(
        software_version="10.4",
        map_version="1",
        entries=(
            MappingEntry("ShortCircuit", "BusName", "Bus Name"),
            MappingEntry("ShortCircuit", "EquipmentName", "Equipment Name"),
            MappingEntry("ShortCircuit", "Scenario", "Scenario"),
            MappingEntry("ShortCircuit", "HalfCycleDutyKA", "1/2 Cycle Duty (kA)"),
        ),
    )


def _duty_csv(tmp_path, name: str, duty: str) -> str:
    path = tmp_path / name
    path.write_text(
        "Bus Name,Equipment Name,Scenario,1/2 Cycle Duty (kA)\n"
        f"SWGR-1,CB-1,Study,{duty}\n"
        f"SWGR-1,CB-2,Study,{duty}\n",
        encoding="utf-8",
    )
    return str(path)


def test_session_stitches_scenarios_from_overrides(tmp_path):
    max_path = _duty_csv(tmp_path, "max.csv", "25")
    min_path = _duty_csv(tmp_path, "min.csv", "18")
    merger = ImportMerger(build_default_catalog(), run_id="s1")

    session = merger.import_session(
        [max_path, min_path],
        _duty_mapping(),
        scenario_overrides={max_path: "Main-Max", min_path: "Main-Min"},
    )

    snapshot = session.snapshot
    assert session.failed_files == []
    assert snapshot.record_count("ShortCircuit") == 4
    assert snapshot.available_scenarios(merger.catalog) == ["Main-Max", "Main-Min"]
    assert snapshot.get("ShortCircuit", CompositeKey.of("SWGR-1", "CB-1", "Main-Min"))["HalfCycleDutyKA"] == "18"
    assert session.report.status == "SUCCESS"


def test_failed_file_does_not_stop_session(tmp_path):
    good = _duty_csv(tmp_path, "good.csv", "25")
    missing = str(tmp_path / "missing.csv")
    merger = ImportMerger(build_default_catalog(), run_id="s2")

    session = merger.import_session([missing, good], _duty_mapping())

    assert session.failed_files == [missing]
    assert session.files[0].error["code"] == "FILE_ACCESS"
    assert session.files[1].status == "OK"
    assert session.snapshot.record_count() == 2
    assert session.report.status == "PARTIAL"


def test_aborted_merge_is_reported_per_file(tmp_path):
    first = _duty_csv(tmp_path, "first.csv", "25")
    second = _duty_csv(tmp_path, "second.csv", "30")
    merger = ImportMerger(build_default_catalog(), run_id="s3")

    session = merger.import_session(
        [first, second],
        _duty_mapping(),
        options=MergeOptions(on_collision=CollisionPolicy.FAIL),
    )

    assert [item.status for item in session.files] == ["OK", "ABORTED"]
    assert session.snapshot.get("ShortCircuit", CompositeKey.of("SWGR-1", "CB-1", "Study"))["HalfCycleDutyKA"] == "25"


def test_session_loads_mapping_path_and_writes_report(tmp_path):
    mapping_path = tmp_path / "map.json"
    save_mapping_document(_duty_mapping(), str(mapping_path))
    source = _duty_csv(tmp_path, "study.csv", "25")
    report_dir = tmp_path / "reports"
    merger = ImportMerger(build_default_catalog(), run_id="s4")

    session = merger.import_session([source], str(mapping_path), report_dir=str(report_dir))

    assert session.report_path == str(report_dir / "import_s4.json")
    data = json.loads((report_dir / "import_s4.json").read_text(encoding="utf-8"))
    assert data["status"] == "SUCCESS"
    assert data["meta"]["run_id"] == "s4"
    assert data["summary"]["records_total"] == 2
    assert data["summary"]["ops"]["merge"]["added"] == 2
    assert data["context"]["snapshot"]["scenarios"] == ["Study"]


def test_fail_policy_stitches_files_sharing_equipment(tmp_path):
    mapping = MappingDocument(
        software_version="10.4",
        map_version="1",
        entries=_duty_mapping().entries + (
            MappingEntry("Bus", "Id", "Bus ID"),
            MappingEntry("Bus", "BaseKV", "Base kV"),
        ),
    )
    paths = []
    for name, scenario in (("min.csv", "Main-Min"), ("max.csv", "Main-Max")):
        path = tmp_path / name
        path.write_text(
            "Bus ID,Base kV\n"
            "B1,13.8\n"
            "\n"
            "Bus Name,Equipment Name,Scenario,1/2 Cycle Duty (kA)\n"
            f"B1,CB-1,{scenario},20\n",
            encoding="utf-8",
        )
        paths.append(str(path))
    merger = ImportMerger(build_default_catalog(), run_id="s5")

    session = merger.import_session(paths, mapping, options=MergeOptions(on_collision=CollisionPolicy.FAIL))

    assert [item.status for item in session.files] == ["OK", "OK"]
    assert session.snapshot.record_count("Bus") == 1
    assert session.snapshot.record_count("ShortCircuit") == 2
