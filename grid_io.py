"""Read/write schedule grids as CSV or Excel (.xlsx).

Grids are plain lists of rows. CSV cells come back as text; Excel cells come
back as whatever openpyxl reports (str, int, float, datetime.time, None) and are
coerced later by ``schedule_matrix.coerce_cell``.
"""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable, List, Sequence

import openpyxl
from openpyxl.styles import Font

CSV_SUFFIXES = {".csv"}
XLSX_SUFFIXES = {".xlsx", ".xlsm"}
DEFAULT_SHEET_NAME = "Schedule Template"


class GridFormatError(ValueError):
    pass


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in CSV_SUFFIXES | XLSX_SUFFIXES:
        raise GridFormatError(
            f"Please upload only Excel or CSV files (.xlsx or .csv), got '{path.name}'"
        )
    return suffix


def _trim_trailing_empty(row: Sequence[object]) -> List[object]:
    cells = list(row)
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return cells


# ---------------------------- CSV -------------------------------------

def read_csv_matrix(path: Path) -> List[List[str]]:
    raw = path.read_bytes()
    text = raw.decode("utf-8-sig", errors="replace")
    rdr = csv.reader(io.StringIO(text))
    return [list(row) for row in rdr]


def write_csv_matrix(grid: Iterable[Sequence[object]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        for row in grid:
            writer.writerow(["" if v is None else v for v in row])


# ---------------------------- Excel -----------------------------------

def read_xlsx_matrix(path: Path) -> List[List[object]]:
    """First worksheet as rows of raw values (trailing blanks trimmed)."""
    wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = [_trim_trailing_empty(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    while rows and not rows[-1]:
        rows.pop()
    return rows


def write_xlsx_matrix(
    grid: Iterable[Sequence[object]],
    path: Path,
    *,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> None:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]
    for row in grid:
        ws.append(list(row))
        # openpyxl stores "=..." text as a formula; IDs and cells are always literal text.
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"
    bold = Font(bold=True)
    for cell in ws[1]:
        cell.font = bold
    for cell in ws["A"]:
        cell.font = bold
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))


# ---------------------------- Dispatch --------------------------------

def read_grid(path: Path) -> List[List[object]]:
    path = Path(path)
    suffix = _suffix(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    if suffix in CSV_SUFFIXES:
        return read_csv_matrix(path)
    return read_xlsx_matrix(path)


def write_grid(
    grid: Iterable[Sequence[object]],
    path: Path,
    *,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> Path:
    path = Path(path)
    if _suffix(path) in CSV_SUFFIXES:
        write_csv_matrix(grid, path)
    else:
        write_xlsx_matrix(grid, path, sheet_name=sheet_name)
    return path
