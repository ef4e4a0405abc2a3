from __future__ import annotations

import pytest

from powersnap.config import Settings, load_settings
from powersnap.domain.merge.models import CollisionPolicy, EquipmentMismatchPolicy, MergeOptions


def _clear_env(monkeypatch):
    for name in (
        "POWERSNAP_LOG_DIR",
        "POWERSNAP_REPORT_DIR",
        "POWERSNAP_CATALOG_PATH",
        "POWERSNAP_LOG_LEVEL",
        "POWERSNAP_MIN_MATCH_THRESHOLD",
        "POWERSNAP_FUZZY_SIMILARITY_FLOOR",
        "POWERSNAP_DIFF_TOLERANCE",
        "POWERSNAP_FILE_WAIT_TIMEOUT",
        "POWERSNAP_FILE_RETRY_INTERVAL",
        "POWERSNAP_ON_COLLISION",
        "POWERSNAP_EQUIPMENT_MISMATCH",
        "POWERSNAP_STRICT_REQUIRED_HEADERS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_sources(monkeypatch):
    _clear_env(monkeypatch)

    loaded = load_settings(None)

    assert loaded.settings == Settings()
    assert loaded.sources_used == []


def test_priority_overrides_over_env_over_config(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            "min_match_threshold: 40",
            "on_collision: skip",
            "log_dir: ./cfg_logs",
            "strict_required_headers: true",
        ]),
        encoding="utf-8",
    )

    # ENV перекрывает config
    monkeypatch.setenv("POWERSNAP_MIN_MATCH_THRESHOLD", "50")
    monkeypatch.setenv("POWERSNAP_ON_COLLISION", "FAIL")
    monkeypatch.setenv("POWERSNAP_STRICT_REQUIRED_HEADERS", "no")

    # overrides перекрывают ENV
    loaded = load_settings(str(cfg), overrides={"min_match_threshold": 60.0, "log_level": None})

    settings = loaded.settings
    assert settings.min_match_threshold == 60.0
    assert settings.on_collision == "fail"
    assert settings.log_dir == "./cfg_logs"
    assert settings.strict_required_headers is False
    assert settings.log_level == "INFO"
    assert loaded.sources_used == ["config", "env", "overrides"]


def test_invalid_env_values_raise(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("POWERSNAP_DIFF_TOLERANCE", "tiny")

    with pytest.raises(ValueError, match="Invalid numeric env value"):
        load_settings(None)

    _clear_env(monkeypatch)
    monkeypatch.setenv("POWERSNAP_STRICT_REQUIRED_HEADERS", "maybe")

    with pytest.raises(ValueError):
        load_settings(None)


def test_unknown_override_is_rejected(monkeypatch):
    _clear_env(monkeypatch)

    with pytest.raises(ValueError, match="Unknown setting"):
        load_settings(None, overrides={"host": "1.2.3.4"})


def test_merge_options_from_settings():
    options = MergeOptions.from_settings(
        Settings(on_collision="skip", equipment_mismatch="ignore"),
        scenario_override="Main-Max",
    )

    assert options.on_collision is CollisionPolicy.SKIP
    assert options.equipment_mismatch is EquipmentMismatchPolicy.IGNORE
    assert options.scenario_override == "Main-Max"
    with pytest.raises(ValueError):
        MergeOptions.from_settings(Settings(on_collision="merge"))
