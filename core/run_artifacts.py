"""Run artifact helpers for inventory reporting."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Iterable


def build_run_report(
    *,
    run_id: str,
    input_path: str | None,
    status: str,
    records: Iterable[Any] = (),
    stats: dict[str, int] | None = None,
    failed_projects: list[str] | None = None,
    failed_documents: list[str] | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Assemble the JSON-serializable payload of one inventory run.

    ``records`` are objects exposing ``to_dict()`` (enum records).
    """
    report: dict[str, Any] = {
        "run_id": run_id,
        "input_path": input_path,
        "status": status,
        "stats": dict(stats or {}),
        "failed_projects": list(failed_projects or []),
        "failed_documents": list(failed_documents or []),
        "enums": [record.to_dict() for record in records],
    }
    if error is not None:
        report["error"] = error
    return report


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)
    return path
