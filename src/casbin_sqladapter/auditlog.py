"""Audit log of policy writes: daily JSONL files per project, with retention cleanup."""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".casbin_sqladapter" / "audit"


def _project_slug() -> str:
    """Encode cwd into a directory-safe slug."""
    cwd = os.getcwd()
    return cwd.replace("/", "-").lstrip("-")


def _log_dir() -> Path:
    return _LOG_ROOT / _project_slug()


def _today_file() -> Path:
    today = datetime.now(UTC).strftime("%Y-%m-%d")
    return _log_dir() / f"{today}.jsonl"


def log_change(
    *,
    action: str,
    table: str,
    dialect: str,
    ptype: str | None = None,
    rule_count: int | None = 0,
    duration_ms: float | None = None,
    error_code: str | None = None,
    error: str | None = None,
) -> None:
    """Append one write operation to today's JSONL file."""
    entry = {
        "ts": datetime.now(UTC).isoformat(),
        "action": action,
        "table": table,
        "dialect": dialect,
        "ptype": ptype,
        "rule_count": rule_count,
        "duration_ms": duration_ms,
        "ok": error is None and error_code is None,
        "error_code": error_code,
        "error": error,
    }

    log_file = _today_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a") as f:
        f.write(json.dumps(entry, default=str) + "\n")


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete log files older than retention_days. Returns count of deleted files."""
    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    log_dir = _log_dir()
    if not log_dir.exists():
        return 0

    for log_file in log_dir.glob("*.jsonl"):
        try:
            file_date = datetime.strptime(log_file.stem, "%Y-%m-%d").replace(tzinfo=UTC)
        except ValueError:
            continue
        if file_date < cutoff:
            log_file.unlink()
            deleted += 1

    # Only succeeds when the directory is empty.
    with contextlib.suppress(OSError):
        log_dir.rmdir()

    return deleted
