"""Versioned run-summary contract printed by ``csv-clip --json``."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from csv_clip import __version__ as TOOL_VERSION

CONTRACT_VERSIONS = {
    "csv_clip.convert": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    input_path: Path | None,
    sink: str,
    status: str = "ok",
    encoding: dict[str, Any] | None = None,
    options: dict[str, Any] | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    return {
        "contract": build_contract("csv_clip.convert"),
        "tool": "csv-clip",
        "tool_version": TOOL_VERSION,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_file": str(input_path) if input_path else None,
        "sink": sink,
        "encoding": encoding or {},
        "options": options or {},
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
        "error": error,
    }
