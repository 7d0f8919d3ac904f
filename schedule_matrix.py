#!/usr/bin/env python3
"""
TV x Ad schedule matrix: validation, compilation and templates.

Grid convention (row 0 = header):
  - row 0, col 0      : label cell (ignored)
  - row 0, cols 1..N  : ad (content) IDs
  - rows 1.., col 0   : TV (device) IDs
  - rows 1.., cols 1..: play times, e.g. "8:00; 12:30" or "8:00, 12:30"

Times are 24-hour H:MM or HH:MM (hour 0-23, minute 00-59).

Pipeline:
  build_matrix(grid) -> BuildResult(matrix, errors, skipped_rows)
  flatten(matrix)    -> [Assignment(...)]         (only when errors is empty)
  generate_template  -> grid in the same convention (round-trips through build_matrix)

Notes
  * Rows with an empty TV ID and columns past the last ad ID are skipped, not errors.
  * Duplicate times inside one cell are kept. Duplicate TV/ad IDs keep their first
    position; the later cell wins for the (tv, ad) times.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

TIME_TOKEN_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
CELL_SEPARATORS = re.compile(r"[;,]")

TEMPLATE_LABEL = "TV ID / Ad ID"
TEMPLATE_JOINER = "; "

# Displayed spreadsheet coordinates are 1-based; header row and TV ID column take slot 1.
FIRST_DATA_ROW_1B = 2
FIRST_CONTENT_COL_1B = 2

SAMPLE_ADS = ["adID1", "adID2", "adID3"]
SAMPLE_TVS = ["tvID1", "tvID2", "tvID3"]
SAMPLE_SCHEDULE: Dict[Tuple[str, str], List[str]] = {
    ("tvID1", "adID1"): ["8:00", "12:30"],
    ("tvID1", "adID2"): ["18:00", "20:15"],
    ("tvID2", "adID1"): ["9:15"],
    ("tvID2", "adID2"): ["19:30"],
    ("tvID2", "adID3"): ["21:45"],
    ("tvID3", "adID2"): ["17:00"],
    ("tvID3", "adID3"): ["14:20", "16:45"],
}

Grid = List[List[object]]
PairKey = Tuple[str, str]


class MalformedGridError(ValueError):
    """Grid cannot be compiled at all (no data rows, no ad IDs, no TV IDs)."""

    MESSAGES = {
        "not_enough_rows": "Invalid file format: Not enough data",
        "no_content_ids": "No ad IDs found in the first row",
        "no_device_ids": "No TV IDs found in the first column",
    }

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self.MESSAGES.get(reason, reason))


@dataclass
class ParsedCell:
    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)


@dataclass
class Matrix:
    devices: List[str] = field(default_factory=list)
    contents: List[str] = field(default_factory=list)
    times: Dict[PairKey, List[str]] = field(default_factory=dict)

    def times_for(self, device: str, content: str) -> List[str]:
        return list(self.times.get((device, content), []))


@dataclass
class ErrorEntry:
    row_index: int
    col_index: int
    device_id: str
    content_id: str
    invalid_tokens: List[str]

    @property
    def message(self) -> str:
        return f"Invalid time format: {', '.join(self.invalid_tokens)} (use HH:MM format)"


@dataclass
class BuildResult:
    matrix: Matrix
    errors: List[ErrorEntry] = field(default_factory=list)
    skipped_rows: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class Assignment:
    content_id: str
    device_id: str
    times: List[str]

    def to_payload(self) -> Dict[str, object]:
        """Shape used by the schedules-by-excel endpoint."""
        return {"ad": self.content_id, "tv": self.device_id, "playTimes": list(self.times)}


# ---------------------------- Cells -----------------------------------

def coerce_cell(value: object) -> str:
    """Spreadsheet cell value -> text.

    Readers hand back None, str, int, float, bool or time/datetime objects
    (openpyxl turns a typed "8:00" into ``datetime.time(8, 0)``).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    # datetime first: it is also a date, and a date cell must not pass as midnight.
    if isinstance(value, dt.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, dt.time):
        if value.second or value.microsecond:
            return value.isoformat()
        return f"{value.hour}:{value.minute:02d}"
    return str(value)


def is_valid_time_token(token: object) -> bool:
    if not isinstance(token, str):
        return False
    return TIME_TOKEN_RE.fullmatch(token) is not None


def split_cell(raw: object) -> List[str]:
    """Split on ';' or ',' and drop pieces that are blank after trimming."""
    text = coerce_cell(raw)
    return [piece.strip() for piece in CELL_SEPARATORS.split(text) if piece.strip()]


def parse_cell(raw: object) -> ParsedCell:
    parsed = ParsedCell()
    for token in split_cell(raw):
        if is_valid_time_token(token):
            parsed.valid.append(token)
        else:
            parsed.invalid.append(token)
    return parsed


# ---------------------------- Matrix ----------------------------------

def _cell(row: Sequence[object], idx: int) -> object:
    return row[idx] if idx < len(row) else None


def _append_unique(seq: List[str], value: str) -> None:
    if value not in seq:
        seq.append(value)


def build_matrix(grid: Sequence[Sequence[object]]) -> BuildResult:
    """Compile a raw grid into a Matrix plus per-cell validation errors.

    Raises MalformedGridError when there is nothing to compile; otherwise every
    cell is checked so the full error list comes back in one pass, in reading
    order (row by row, left to right).
    """
    if len(grid) < 2:
        raise MalformedGridError("not_enough_rows")

    header = [coerce_cell(v).strip() for v in list(grid[0])[1:]]
    ads = [h for h in header if h]
    if not ads:
        raise MalformedGridError("no_content_ids")

    matrix = Matrix()
    for ad in ads:
        _append_unique(matrix.contents, ad)

    errors: List[ErrorEntry] = []
    skipped: List[int] = []
    for i, row in enumerate(grid[1:]):
        row = list(row or [])
        tv = coerce_cell(_cell(row, 0)).strip()
        if not tv:
            skipped.append(i + FIRST_DATA_ROW_1B)
            continue
        _append_unique(matrix.devices, tv)

        for j, ad in enumerate(ads):
            parsed = parse_cell(_cell(row, j + 1))
            matrix.times[(tv, ad)] = parsed.valid
            if parsed.invalid:
                errors.append(
                    ErrorEntry(
                        row_index=i + FIRST_DATA_ROW_1B,
                        col_index=j + FIRST_CONTENT_COL_1B,
                        device_id=tv,
                        content_id=ad,
                        invalid_tokens=parsed.invalid,
                    )
                )

    if not matrix.devices:
        raise MalformedGridError("no_device_ids")

    return BuildResult(matrix=matrix, errors=errors, skipped_rows=skipped)


# ---------------------------- Flatten ---------------------------------

def flatten(matrix: Matrix) -> List[Assignment]:
    """One Assignment per (tv, ad) with at least one time, in tv-then-ad order."""
    out: List[Assignment] = []
    for tv in matrix.devices:
        for ad in matrix.contents:
            times = matrix.times.get((tv, ad)) or []
            if times:
                out.append(Assignment(content_id=ad, device_id=tv, times=list(times)))
    return out


# ---------------------------- Templates -------------------------------

def generate_template(
    contents: Iterable[str],
    devices: Iterable[str],
    sample: Optional[Mapping[PairKey, Sequence[str]]] = None,
    *,
    label: str = TEMPLATE_LABEL,
    joiner: str = TEMPLATE_JOINER,
) -> Grid:
    contents = list(contents)
    sample = sample or {}
    grid: Grid = [[label, *contents]]
    for tv in devices:
        grid.append([tv, *(joiner.join(sample.get((tv, ad)) or []) for ad in contents)])
    return grid


def sample_template(*, label: str = TEMPLATE_LABEL, joiner: str = TEMPLATE_JOINER) -> Grid:
    """The example sheet offered for download next to the importer."""
    return generate_template(SAMPLE_ADS, SAMPLE_TVS, SAMPLE_SCHEDULE, label=label, joiner=joiner)
