"""JSON-lines event log for projection runs, rejected inputs and crashes.

Every record names the model it belongs to (``cash_flow``, ``financial_model``
or empty for app-level events) and the session that wrote it, so the
diagnostics view can show one model's history without mixing runs.
"""

from __future__ import annotations

import json
import os
import sys
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from streamlit.runtime.scriptrunner import get_script_run_ctx


_DEFAULT_LOG_DIR = Path(".local_store")
_STORAGE_ENV_VAR = "FOUNDER_FINANCE_STORAGE_ROOT"
_LOG_FILE_NAME = "runtime_events.jsonl"

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

# Headline figures copied into run records so a log line is readable on its own.
SUMMARY_FIELDS = [
    "final_balance",
    "lowest_balance",
    "negative_balance_months",
    "three_year_revenue",
    "year3_net_income",
]

LOG_DIR = _DEFAULT_LOG_DIR
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME
SESSION_ID = uuid.uuid4().hex[:12]

_EXCEPTION_HOOK_INSTALLED = False


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the log at ``path_value`` (``~`` and env vars expanded); blank means the default."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    text = str(path_value).strip() if path_value is not None else ""
    LOG_DIR = Path(os.path.expandvars(os.path.expanduser(text))) if text else _DEFAULT_LOG_DIR
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _normalize_level(level: str) -> str:
    text = str(level).strip().upper()
    return text if text in LEVELS else "INFO"


def _json_default(value: Any):
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


def build_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    model: str = "",
    exc: BaseException | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "session_id": SESSION_ID,
        "level": _normalize_level(level),
        "model": str(model or ""),
        "event": str(event),
        "message": str(message),
        "context": dict(context or {}),
    }
    if exc is not None:
        record["exception_type"] = type(exc).__name__
        record["exception_message"] = str(exc)
        record["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return record


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
    model: str = "",
) -> dict[str, Any] | None:
    """Write one record and return it; returns None when the log directory is not writable."""
    record = build_event(level, event, message, context=context, model=model, exc=exc)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=_json_default, ensure_ascii=False) + "\n")
    except OSError:
        return None
    return record


def log_model_run(
    model: str,
    warnings: list[str],
    findings: list[dict[str, Any]],
    summary: dict[str, Any] | None = None,
) -> None:
    """Record integrity findings and input warnings for one run; clean runs write nothing."""
    headline = {k: summary[k] for k in SUMMARY_FIELDS if summary and k in summary}
    if findings:
        append_runtime_event(
            level="ERROR",
            event="integrity_findings",
            message=f"{len(findings)} integrity check(s) failed.",
            context={"findings": findings, "checks": sorted({f["Check"] for f in findings}), "summary": headline},
            model=model,
        )
    if warnings:
        append_runtime_event(
            level="WARNING",
            event="input_warnings",
            message=f"{len(warnings)} input warning(s).",
            context={"warnings": warnings, "summary": headline},
            model=model,
        )


def _parse_line(line: str) -> dict[str, Any]:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return build_event("ERROR", "log_parse_error", "Malformed log line encountered.", context={"line": line})


def read_runtime_events(limit: int = 200, model: str | None = None, min_level: str | None = None) -> list[dict[str, Any]]:
    """Most recent ``limit`` records, optionally restricted to one model and a minimum level."""
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []

    events = [_parse_line(line) for line in lines if line.strip()]
    if model is not None:
        events = [e for e in events if e.get("model", "") == model]
    if min_level is not None:
        floor = LEVELS.index(_normalize_level(min_level))
        events = [e for e in events if LEVELS.index(_normalize_level(e.get("level", "INFO"))) >= floor]
    return events[-int(limit) :]


def install_global_exception_logging() -> None:
    """Capture uncaught exceptions raised inside a Streamlit script run."""
    global _EXCEPTION_HOOK_INSTALLED
    if _EXCEPTION_HOOK_INSTALLED:
        return
    previous_hook = sys.excepthook

    def _hook(exc_type, exc, exc_tb):
        if get_script_run_ctx() is not None:
            append_runtime_event("ERROR", "uncaught_exception", str(exc), exc=exc)
        previous_hook(exc_type, exc, exc_tb)

    sys.excepthook = _hook
    _EXCEPTION_HOOK_INSTALLED = True


configure_log_root(os.getenv(_STORAGE_ENV_VAR, ""))
