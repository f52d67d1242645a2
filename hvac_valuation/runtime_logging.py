"""Structured runtime event log for the valuation app (JSON lines on local disk)."""

from __future__ import annotations

import json
import os
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from streamlit.runtime.scriptrunner import get_script_run_ctx


_DEFAULT_LOG_DIR = Path(".local_store")
_STORAGE_ENV_VAR = "HVAC_VALUATION_STORAGE_ROOT"
_LOG_FILE_NAME = "valuation_events.jsonl"

LOG_DIR = _DEFAULT_LOG_DIR
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME

_EXCEPTION_HOOK_INSTALLED = False


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the event log at path_value, or the default store when it is blank."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    text = str(path_value or "").strip()
    LOG_DIR = Path(text) if text else _DEFAULT_LOG_DIR
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Append one event record. Write failures are dropped so logging never breaks a valuation."""
    record: dict[str, Any] = {
        "timestamp_utc": _now_iso(),
        "level": str(level).upper(),
        "event": str(event),
        "message": str(message),
        "context": context or {},
    }
    if exc is not None:
        record["exception_type"] = type(exc).__name__
        record["exception_message"] = str(exc)
        record["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str, ensure_ascii=False) + "\n")
    except OSError:
        pass


def log_profile_applied(profile_requested: Any, profile_applied: str) -> None:
    level = "INFO" if profile_requested == profile_applied else "WARNING"
    append_runtime_event(
        level=level,
        event="profile_applied",
        message=f"Applied profile '{profile_applied}'.",
        context={"requested": profile_requested, "applied": profile_applied},
    )


def log_advisory_warnings(warnings: list[str]) -> None:
    """Record how many advisory warnings fired and for which fields (values are not logged)."""
    if not warnings:
        return
    fields = sorted({w.split("=", 1)[0] for w in warnings if "=" in w})
    append_runtime_event(
        level="INFO",
        event="advisory_warnings",
        message=f"{len(warnings)} advisory warning(s) on current inputs.",
        context={"count": len(warnings), "fields": fields},
    )


def read_runtime_events(limit: int = 200) -> list[dict[str, Any]]:
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    out: list[dict[str, Any]] = []
    for line in lines[-int(limit) :]:
        if not line.strip():
            continue
        try:
            out.append(json.loads(line))
        except json.JSONDecodeError:
            out.append(
                {
                    "timestamp_utc": _now_iso(),
                    "level": "ERROR",
                    "event": "log_parse_error",
                    "message": "Malformed log line encountered.",
                    "context": {"line": line},
                }
            )
    return out


def install_global_exception_logging() -> None:
    """Capture uncaught exceptions raised inside a Streamlit script run."""
    global _EXCEPTION_HOOK_INSTALLED
    if _EXCEPTION_HOOK_INSTALLED:
        return
    old_hook = sys.excepthook

    def _hook(exc_type, exc, exc_tb):
        if get_script_run_ctx() is not None:
            append_runtime_event(
                level="ERROR",
                event="uncaught_exception",
                message=str(exc),
                exc=exc,
            )
        old_hook(exc_type, exc, exc_tb)

    sys.excepthook = _hook
    _EXCEPTION_HOOK_INSTALLED = True


configure_log_root(os.getenv(_STORAGE_ENV_VAR, ""))
