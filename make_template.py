#!/usr/bin/env python3
"""Write a schedule sheet template (.xlsx or .csv).

Without --tvs/--ads the built-in sample (tvID1..3 x adID1..3, with example
times) is written, the same one the importer's download button offers.
With --tvs/--ads the grid is blank unless --from-grid supplies times for
matching (TV, ad) pairs.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import schedule_config
from grid_io import GridFormatError, read_grid, write_grid
from schedule_matrix import MalformedGridError, build_matrix, generate_template, sample_template


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Generate a TV x Ad schedule template",
                                 formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--out", type=Path, help="Output file (.xlsx or .csv; default from CONFIG TEMPLATE.FILENAME)")
    ap.add_argument("--tvs", nargs="+", default=[], help="TV IDs (one row each)")
    ap.add_argument("--ads", nargs="+", default=[], help="Ad IDs (one column each)")
    ap.add_argument("--from-grid", type=Path, help="Existing sheet whose valid times pre-fill the template")
    ap.add_argument("--config", type=Path, help="Optional JSON file with CONFIG overrides")
    return ap.parse_args(argv)


def split_ids(values: Sequence[str]) -> List[str]:
    """Accept both '--tvs a b' and '--tvs a,b'."""
    out: List[str] = []
    for v in values:
        for part in str(v).split(","):
            part = part.strip()
            if part and part not in out:
                out.append(part)
    return out


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    cfg = schedule_config.load_config(args.config)
    tpl = cfg["TEMPLATE"]
    out = args.out or Path(tpl["FILENAME"])

    tvs, ads = split_ids(args.tvs), split_ids(args.ads)
    if bool(tvs) != bool(ads):
        raise SystemExit("Pass both --tvs and --ads, or neither for the sample template")

    if not tvs:
        grid = sample_template(label=tpl["LABEL"], joiner=tpl["JOINER"])
    else:
        sample = {}
        if args.from_grid:
            try:
                built = build_matrix(read_grid(args.from_grid))
            except (GridFormatError, MalformedGridError, FileNotFoundError) as e:
                print(f"[error] {e}", file=sys.stderr)
                return 2
            if built.errors:
                print(f"[warn] {len(built.errors)} invalid cell(s) in {args.from_grid}; only valid times copied",
                      file=sys.stderr)
            sample = built.matrix.times
        grid = generate_template(ads, tvs, sample, label=tpl["LABEL"], joiner=tpl["JOINER"])

    write_grid(grid, out, sheet_name=tpl["SHEET_NAME"])
    print(f"Wrote template ({len(grid) - 1} TVs x {len(grid[0]) - 1} ads) → {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
