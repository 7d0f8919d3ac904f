#!/usr/bin/env python3
"""Import a TV x Ad schedule sheet and hand the compiled schedules to the service.

Inputs:
  - --grid              .xlsx or .csv (row 1 = ad IDs, column A = TV IDs)
  - --start / --end     date range for the schedules (YYYY-MM-DD)

Outputs:
  - schedule_errors.csv            one row per cell with invalid times (always written)
  - schedule_import_summary.txt    plaintext summary (set to '-' to skip)
  - schedule_payload.json          request body, written when there are no errors and --start/--end are set

Cells hold times as H:MM or HH:MM (24-hour), several per cell separated by ';' or ','.
Any invalid cell blocks the whole import; fix the sheet and run again.

Exit codes: 0 ok, 1 invalid cells / submission failed, 2 unreadable sheet.
"""

from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import schedule_config
import submit_schedule
from grid_io import GridFormatError, read_grid
from schedule_matrix import Assignment, BuildResult, ErrorEntry, MalformedGridError, build_matrix, flatten

ERROR_FIELDS = ["Row", "Column", "TvId", "AdId", "InvalidTimes", "Error"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Validate a TV x Ad schedule sheet and import it (times: H:MM or HH:MM, separated by ';' or ',')",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--grid", required=True, type=Path, help="Schedule sheet (.xlsx or .csv)")
    ap.add_argument("--start", help="First day of the schedule (YYYY-MM-DD)")
    ap.add_argument("--end", help="Last day of the schedule (YYYY-MM-DD)")
    ap.add_argument("--config", type=Path, help="Optional JSON file with CONFIG overrides")
    ap.add_argument("--errors-out", type=Path, help="Error log CSV (default from CONFIG)")
    ap.add_argument("--summary", type=Path, help="Plaintext summary (default from CONFIG; '-' to skip)")
    ap.add_argument("--payload-out", type=Path, help="Where to write the request body JSON (default from CONFIG)")
    ap.add_argument("--submit", action="store_true", help="POST the schedules to the scheduling service")
    ap.add_argument("--token", default="", help="Bearer token for --submit")
    ap.add_argument("--base-url", help="Override CONFIG API.BASE_URL")
    return ap.parse_args(argv)


def compile_grid(grid) -> tuple[BuildResult, List[Assignment]]:
    """Build the matrix; assignments are only produced for an error-free sheet."""
    result = build_matrix(grid)
    if result.errors:
        return result, []
    return result, flatten(result.matrix)


def write_error_log(errors: Sequence[ErrorEntry], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=ERROR_FIELDS)
        writer.writeheader()
        for e in errors:
            writer.writerow(
                {
                    "Row": e.row_index,
                    "Column": e.col_index,
                    "TvId": e.device_id,
                    "AdId": e.content_id,
                    "InvalidTimes": "; ".join(e.invalid_tokens),
                    "Error": e.message,
                }
            )


def summary_lines(result: BuildResult, assignments: Sequence[Assignment]) -> List[str]:
    m = result.matrix
    lines = ["Schedule import"]
    lines.append(f"TVs: {len(m.devices)} | Ads: {len(m.contents)} | Errors: {len(result.errors)}")
    if result.skipped_rows:
        lines.append("Skipped rows without TV ID: " + ", ".join(str(r) for r in result.skipped_rows))
    if result.errors:
        lines.append(f"Please fix {len(result.errors)} error(s) before importing")
        for e in result.errors:
            lines.append(f"  row {e.row_index}, col {e.col_index} ({e.device_id} / {e.content_id}): {e.message}")
    else:
        n_times = sum(len(a.times) for a in assignments)
        lines.append(f"Ready to schedule {len(m.devices)} TVs with {len(m.contents)} ads")
        lines.append(f"Schedules: {len(assignments)} (play times={n_times})")
    return lines


def write_summary(result: BuildResult, assignments: Sequence[Assignment], path: Path) -> None:
    if str(path) == "-":
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(summary_lines(result, assignments)) + "\n", encoding="utf-8")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    cfg = schedule_config.load_config(args.config)
    if args.base_url:
        cfg["API"]["BASE_URL"] = args.base_url
    errors_out = args.errors_out or Path(cfg["IMPORT"]["ERRORS_OUT"])
    summary_out = args.summary or Path(cfg["IMPORT"]["SUMMARY_OUT"])
    payload_out = args.payload_out or Path(cfg["IMPORT"]["PAYLOAD_OUT"])

    try:
        grid = read_grid(args.grid)
        result, assignments = compile_grid(grid)
    except (GridFormatError, MalformedGridError, FileNotFoundError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    write_error_log(result.errors, errors_out)
    write_summary(result, assignments, summary_out)
    if result.skipped_rows:
        print(f"[info] Skipped {len(result.skipped_rows)} row(s) without TV ID: "
              + ", ".join(str(r) for r in result.skipped_rows), file=sys.stderr)

    if result.errors:
        print(f"Found {len(result.errors)} error(s) in the spreadsheet → {errors_out}", file=sys.stderr)
        return 1
    print("File parsed successfully")

    if args.start is None and args.end is None and not args.submit:
        return 0

    try:
        payload = submit_schedule.build_submission(args.start, args.end, assignments)
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    payload_out.parent.mkdir(parents=True, exist_ok=True)
    payload_out.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    print(f"Wrote {len(assignments)} schedule(s) → {payload_out}")

    if args.submit:
        try:
            submit_schedule.submit_schedules(payload, cfg["API"], args.token)
        except submit_schedule.SubmissionError as e:
            print(f"Failed to import schedule: {e}", file=sys.stderr)
            return 1
        print(f"Schedule imported successfully ({len(result.matrix.devices)} TVs, "
              f"{payload['startDate']} → {payload['endDate']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
