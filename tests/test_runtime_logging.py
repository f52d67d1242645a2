from __future__ import annotations

from pathlib import Path

import hvac_valuation.runtime_logging as runtime_logging


def _point_log_at(tmp_path, monkeypatch) -> Path:
    log_file = Path(tmp_path) / "valuation_events.jsonl"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", log_file)
    return log_file


def test_runtime_logging_append_and_read(tmp_path, monkeypatch):
    _point_log_at(tmp_path, monkeypatch)

    runtime_logging.append_runtime_event(
        level="warning",
        event="test_event",
        message="Test warning.",
        context={"case": "append_and_read"},
    )
    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 1
    assert events[0]["event"] == "test_event"
    assert events[0]["level"] == "WARNING"
    assert events[0]["context"]["case"] == "append_and_read"


def test_runtime_logging_handles_malformed_lines(tmp_path, monkeypatch):
    log_file = _point_log_at(tmp_path, monkeypatch)
    log_file.write_text('{"event":"ok","level":"INFO","timestamp_utc":"2026-01-01T00:00:00+00:00","message":"ok","context":{}}\nnot-json\n', encoding="utf-8")

    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 2
    assert events[0]["event"] == "ok"
    assert events[1]["event"] == "log_parse_error"


def test_profile_fallback_is_logged_as_warning(tmp_path, monkeypatch):
    _point_log_at(tmp_path, monkeypatch)

    runtime_logging.log_profile_applied("installHeavy", "installHeavy")
    runtime_logging.log_profile_applied("franchise", "balanced")
    events = runtime_logging.read_runtime_events()
    assert [e["level"] for e in events] == ["INFO", "WARNING"]
    assert events[1]["context"] == {"requested": "franchise", "applied": "balanced"}


def test_advisory_warning_log_omits_values(tmp_path, monkeypatch):
    _point_log_at(tmp_path, monkeypatch)

    runtime_logging.log_advisory_warnings([])
    assert runtime_logging.read_runtime_events() == []

    runtime_logging.log_advisory_warnings(["multiple=14.000 is outside the recommended range [2, 10]."])
    events = runtime_logging.read_runtime_events()
    assert events[0]["context"] == {"count": 1, "fields": ["multiple"]}
    assert "14" not in events[0]["message"]


def test_configure_log_root_uses_path_and_falls_back(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", runtime_logging.LOG_DIR)
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", runtime_logging.RUNTIME_EVENTS_LOG_FILE)

    assert runtime_logging.configure_log_root(str(tmp_path)) == Path(tmp_path)
    assert runtime_logging.RUNTIME_EVENTS_LOG_FILE == Path(tmp_path) / "valuation_events.jsonl"
    assert runtime_logging.configure_log_root("  ") == Path(".local_store")
