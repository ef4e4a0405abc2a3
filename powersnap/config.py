from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import yaml


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"
    catalog_path: str | None = None

    # Logging
    log_level: str = "INFO"

    # Classification / suggestions
    min_match_threshold: float = 30.0
    fuzzy_similarity_floor: float = 0.70

    # Diff
    diff_tolerance: float = 1e-6

    # Locked source files
    file_wait_timeout_seconds: float = 5.0
    file_retry_interval_seconds: float = 0.25

    # Merge
    on_collision: str = "overwrite"
    equipment_mismatch: str = "warn"
    strict_required_headers: bool = False


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


_ENV_NAMES = {
    "log_dir": "POWERSNAP_LOG_DIR",
    "report_dir": "POWERSNAP_REPORT_DIR",
    "catalog_path": "POWERSNAP_CATALOG_PATH",
    "log_level": "POWERSNAP_LOG_LEVEL",
    "min_match_threshold": "POWERSNAP_MIN_MATCH_THRESHOLD",
    "fuzzy_similarity_floor": "POWERSNAP_FUZZY_SIMILARITY_FLOOR",
    "diff_tolerance": "POWERSNAP_DIFF_TOLERANCE",
    "file_wait_timeout_seconds": "POWERSNAP_FILE_WAIT_TIMEOUT",
    "file_retry_interval_seconds": "POWERSNAP_FILE_RETRY_INTERVAL",
    "on_collision": "POWERSNAP_ON_COLLISION",
    "equipment_mismatch": "POWERSNAP_EQUIPMENT_MISMATCH",
    "strict_required_headers": "POWERSNAP_STRICT_REQUIRED_HEADERS",
}

_FLOAT_FIELDS = (
    "min_match_threshold",
    "fuzzy_similarity_floor",
    "diff_tolerance",
    "file_wait_timeout_seconds",
    "file_retry_interval_seconds",
)


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def parse_float(v: str | None) -> float | None:
    if v is None:
        return None
    try:
        return float(v)
    except ValueError as exc:
        raise ValueError(f"Invalid numeric env value: {v}") from exc


def parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def load_settings(
    config_path: str | None,
    overrides: dict | None = None,
) -> LoadedSettings:
    """
    Priority: overrides > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()
    overrides = overrides or {}

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {name: _env_get(env_name) for name, env_name in _ENV_NAMES.items()}
    if any(v is not None for v in env.values()):
        sources.append("env")

    merged = {name: cfg.get(name, getattr(defaults, name)) for name in _ENV_NAMES}

    for name, raw in env.items():
        if raw is None:
            continue
        if name in _FLOAT_FIELDS:
            merged[name] = parse_float(raw)
        elif name == "strict_required_headers":
            merged[name] = parse_bool(raw)
        else:
            merged[name] = raw

    # 3) explicit overrides (only those actually passed)
    if any(v is not None for v in overrides.values()):
        sources.append("overrides")

    for k, v in overrides.items():
        if v is None:
            continue
        if k not in merged:
            raise ValueError(f"Unknown setting: {k}")
        merged[k] = v

    settings = Settings(
        log_dir=str(merged["log_dir"]),
        report_dir=str(merged["report_dir"]),
        catalog_path=merged["catalog_path"],
        log_level=str(merged["log_level"]),
        min_match_threshold=float(merged["min_match_threshold"]),
        fuzzy_similarity_floor=float(merged["fuzzy_similarity_floor"]),
        diff_tolerance=float(merged["diff_tolerance"]),
        file_wait_timeout_seconds=float(merged["file_wait_timeout_seconds"]),
        file_retry_interval_seconds=float(merged["file_retry_interval_seconds"]),
        on_collision=str(merged["on_collision"]).strip().lower(),
        equipment_mismatch=str(merged["equipment_mismatch"]).strip().lower(),
        strict_required_headers=bool(merged["strict_required_headers"]),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
