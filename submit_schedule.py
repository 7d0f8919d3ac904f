"""Client for the scheduling service's schedules-by-excel endpoint.

Payload:
  {"startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD",
   "schedules": [{"ad": <ad id>, "tv": <tv id>, "playTimes": ["8:00", ...]}, ...]}
"""
from __future__ import annotations

import datetime as dt
import json
import ssl
import urllib.error
import urllib.request
from typing import Dict, Iterable, Optional, Union

import certifi

from schedule_matrix import Assignment

DateLike = Union[str, dt.date, None]


class SubmissionError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


def _to_date(value: DateLike) -> Optional[dt.date]:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"Invalid date '{value}' (use YYYY-MM-DD)") from None


def build_submission(start: DateLike, end: DateLike, assignments: Iterable[Assignment]) -> Dict[str, object]:
    start_d, end_d = _to_date(start), _to_date(end)
    if start_d is None or end_d is None:
        raise ValueError("Please select a date range")
    if start_d > end_d:
        raise ValueError("End date must be after start date")
    return {
        "startDate": start_d.isoformat(),
        "endDate": end_d.isoformat(),
        "schedules": [a.to_payload() for a in assignments],
    }


def submission_url(api_cfg: dict) -> str:
    base = str(api_cfg.get("BASE_URL") or "").rstrip("/")
    prefix = str(api_cfg.get("PREFIX") or "").strip("/")
    endpoint = str(api_cfg.get("ENDPOINT") or "").strip("/")
    return "/".join(p for p in (base, prefix, endpoint) if p)


def _error_message(err: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(err.read().decode("utf-8") or "{}")
    except (ValueError, UnicodeDecodeError):
        body = {}
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {err.code}: {err.reason}"


def submit_schedules(payload: Dict[str, object], api_cfg: dict, token: str) -> dict:
    """POST ``payload`` with a bearer token; return the decoded JSON response."""
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        submission_url(api_cfg),
        data=data,
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
            "User-Agent": api_cfg.get("USER_AGENT", "ScheduleMatrix"),
        },
    )
    ctx = ssl.create_default_context(cafile=certifi.where())
    try:
        with urllib.request.urlopen(req, context=ctx, timeout=api_cfg.get("TIMEOUT", 30)) as resp:
            raw = resp.read()
    except urllib.error.HTTPError as err:
        raise SubmissionError(_error_message(err), status=err.code) from err
    except urllib.error.URLError as err:
        raise SubmissionError(str(err.reason)) from err
    if not raw:
        return {}
    return json.loads(raw.decode("utf-8"))
