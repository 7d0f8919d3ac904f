#!/usr/bin/env python3
"""Render a preview heatmap of a schedule sheet: play times per TV x Ad, invalid cells marked."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from grid_io import GridFormatError, read_grid
from schedule_matrix import ErrorEntry, MalformedGridError, Matrix, build_matrix


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Preview a schedule sheet as a heatmap",
                                 formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--grid", required=True, type=Path, help="Schedule sheet (.xlsx or .csv)")
    ap.add_argument("--out", default=Path("schedule_preview.png"), type=Path)
    ap.add_argument("--dpi", type=int, default=150, help="Output DPI")
    return ap.parse_args(argv)


def count_matrix(matrix: Matrix) -> List[List[int]]:
    return [[len(matrix.times.get((tv, ad), [])) for ad in matrix.contents] for tv in matrix.devices]


def error_cells(matrix: Matrix, errors: Iterable[ErrorEntry]) -> Set[Tuple[int, int]]:
    """(y, x) plot coordinates of cells with invalid times."""
    tv_idx = {tv: i for i, tv in enumerate(matrix.devices)}
    ad_idx = {ad: j for j, ad in enumerate(matrix.contents)}
    return {(tv_idx[e.device_id], ad_idx[e.content_id]) for e in errors}


def plot_matrix_heatmap(
    matrix: Matrix,
    errors: Sequence[ErrorEntry],
    out_path: Path,
    *,
    dpi: int = 150,
) -> Optional[Path]:
    if not matrix.devices or not matrix.contents:
        return None
    counts = count_matrix(matrix)
    bad = error_cells(matrix, errors)

    fig, ax = plt.subplots(figsize=(max(6, len(matrix.contents) * 0.9), max(3, len(matrix.devices) * 0.5)))
    cmap = plt.get_cmap("YlGnBu")
    cax = ax.imshow(counts, aspect="auto", cmap=cmap, vmin=0)
    top = max(max(row) for row in counts) or 1
    for y, row in enumerate(counts):
        for x, value in enumerate(row):
            if (y, x) in bad:
                ax.add_patch(Rectangle((x - 0.5, y - 0.5), 1, 1, fill=False, hatch="xx",
                                       edgecolor="#cb181d", linewidth=1.5))
            if value:
                ax.text(x, y, str(value), ha="center", va="center", fontsize=8,
                        color="#000000" if value < top * 0.6 else "#ffffff")
    ax.set_xticks(range(len(matrix.contents)), matrix.contents, rotation=30, ha="right")
    ax.set_yticks(range(len(matrix.devices)), matrix.devices)
    ax.set_xlabel("Ad ID")
    ax.set_ylabel("TV ID")
    ax.set_title(f"Play times per TV/Ad ({len(errors)} invalid cell(s) hatched)")
    fig.colorbar(cax, ax=ax, label="Play times")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)
    return out_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        result = build_matrix(read_grid(args.grid))
    except (GridFormatError, MalformedGridError, FileNotFoundError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2
    out = plot_matrix_heatmap(result.matrix, result.errors, args.out, dpi=args.dpi)
    if out is None:
        print("[warn] Nothing to plot", file=sys.stderr)
        return 0
    print(f"Wrote preview → {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
