"""Shared CONFIG for the schedule scripts (defaults + JSON overrides)."""
from __future__ import annotations

import copy
import json
from pathlib import Path

import schedule_matrix as sm

SCRIPT_DIR = Path(__file__).resolve().parent

DEFAULT_CONFIG = {
    # Scheduling service (schedules-by-excel endpoint)
    "API": {
        "BASE_URL": "http://localhost:5000",
        "PREFIX": "api",
        "ENDPOINT": "ads-schedule/schedules-by-excel",
        "TIMEOUT": 30,
        "USER_AGENT": "Mozilla/5.0 (ScheduleMatrix/1.0)",
    },

    # Template download
    "TEMPLATE": {
        "LABEL": sm.TEMPLATE_LABEL,
        "SHEET_NAME": "Schedule Template",
        "FILENAME": "ad_schedule_template.xlsx",
        "JOINER": sm.TEMPLATE_JOINER,
    },

    # Import outputs
    "IMPORT": {
        "ERRORS_OUT": "schedule_errors.csv",
        "SUMMARY_OUT": "schedule_import_summary.txt",
        "PAYLOAD_OUT": "schedule_payload.json",
    },
}


def deep_update(dst: dict, src: dict) -> dict:
    """Recursively merge ``src`` into ``dst`` (in-place)."""

    for key, value in (src or {}).items():
        if isinstance(value, dict) and isinstance(dst.get(key), dict):
            deep_update(dst[key], value)
        else:
            dst[key] = copy.deepcopy(value)
    return dst


def build_config(overrides: dict | None = None) -> dict:
    unknown = sorted(k for k in (overrides or {}) if k not in DEFAULT_CONFIG)
    if unknown:
        raise KeyError(f"Unknown CONFIG section(s): {', '.join(unknown)}")
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        deep_update(cfg, overrides)
    return cfg


def resolve_data_path(path: Path) -> Path:
    """Locate a file relative to CWD, falling back to the script directory."""

    if path.exists():
        return path
    if not path.is_absolute():
        alt = SCRIPT_DIR / path
        if alt.exists():
            return alt
    return path


def load_config(path: Path | None) -> dict:
    if path is None:
        return build_config()
    cfg_path = resolve_data_path(Path(path))
    overrides = json.loads(cfg_path.read_text(encoding="utf-8"))
    return build_config(overrides)
