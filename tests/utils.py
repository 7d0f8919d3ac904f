"""Fixtures and helpers for schedule matrix tests."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from schedule_matrix import TEMPLATE_LABEL

# Grid used throughout: one bad cell (TV1/AD2), one empty pair, one duplicated time.
EXAMPLE_GRID: List[List[str]] = [
    ["", "AD1", "AD2"],
    ["TV1", "8:00", "25:61"],
    ["TV2", "", "9:15;9:15"],
]

CLEAN_GRID: List[List[str]] = [
    [TEMPLATE_LABEL, "AD1", "AD2", "AD3"],
    ["TV1", "8:00; 12:30", "", "23:59"],
    ["TV2", "", "9:15, 18:00", ""],
    ["TV3", "0:00", "", ""],
]


def grid_row(tv: str, cells: Dict[str, str], ads: Sequence[str]) -> List[str]:
    """Build a data row for ``ads`` from a {ad: cell text} dict."""
    return [tv, *(cells.get(ad, "") for ad in ads)]


def build_grid(
    ads: Sequence[str],
    rows: Iterable[Tuple[str, Dict[str, str]]],
    *,
    label: str = TEMPLATE_LABEL,
) -> List[List[str]]:
    return [[label, *ads], *(grid_row(tv, cells, ads) for tv, cells in rows)]


def write_grid_csv(path: Path, rows: Iterable[Sequence[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        for row in rows:
            writer.writerow(list(row))
    return path


def read_csv_dicts(path: Path) -> List[Dict[str, str]]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))
