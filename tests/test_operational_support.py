from __future__ import annotations

import json
import logging
from datetime import date

from grant_core.domain import Severity
from grant_core.events.domain_events import domain_events
from grant_core.exceptions import ConcurrencyError
from grant_infra.operational_support import (
    REDACTED,
    REDACTED_EMAIL,
    OperationalSupport,
    TraceIdLogFilter,
    bind_trace_id,
    current_trace_id,
    redact_text,
    redact_value,
)


def test_operational_support_emits_redacted_structured_event(tmp_path):
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path, app_version="1.2.3")

    with bind_trace_id("inc-test-123"):
        trace_id = support.emit_event(
            event_type="support.test",
            message="token=abc123 alice@example.com",
            data={
                "password": "StrongPass123",
                "contact": "alice@example.com",
                "nested": {"bank_account_number": "0012345"},
            },
        )

    assert trace_id == "inc-test-123"
    rows = events_path.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 1
    payload = json.loads(rows[0])
    assert payload["trace_id"] == "inc-test-123"
    assert payload["event_type"] == "support.test"
    assert payload["app_version"] == "1.2.3"
    assert "abc123" not in payload["message"]
    assert "alice@example.com" not in payload["message"]
    assert payload["data"]["password"] == REDACTED
    assert payload["data"]["nested"]["bank_account_number"] == REDACTED
    assert payload["data"]["contact"] == REDACTED_EMAIL


def test_capture_exception_records_error_event_with_code(tmp_path):
    support = OperationalSupport(tmp_path / "events.jsonl")

    try:
        raise ConcurrencyError("token=bad-token changed underneath", code="STALE_WRITE")
    except ConcurrencyError as exc:
        support.capture_exception(exc, context="unit-test", trace_id="inc-crash-1")

    [payload] = support.read_events(trace_id="inc-crash-1")
    assert payload["event_type"] == "app.error"
    assert payload["level"] == "ERROR"
    assert "bad-token" not in payload["message"]
    assert "bad-token" not in payload["data"]["stacktrace"]
    assert payload["data"]["exception_type"] == "ConcurrencyError"
    assert payload["data"]["code"] == "STALE_WRITE"


def test_read_events_filters_by_trace_and_skips_bad_lines(tmp_path, caplog):
    events_path = tmp_path / "events.jsonl"
    support = OperationalSupport(events_path)
    support.emit_event(event_type="a", message="first", trace_id="inc-a")
    with events_path.open("a", encoding="utf-8") as handle:
        handle.write("{not json\n")
    support.emit_event(event_type="b", message="second", trace_id="inc-b")

    with caplog.at_level(logging.WARNING):
        everything = support.read_events()
        only_b = support.read_events(trace_id="inc-b")

    assert [row["event_type"] for row in everything] == ["a", "b"]
    assert [row["message"] for row in only_b] == ["second"]
    assert "unreadable" in caplog.text


def test_bind_trace_id_generates_and_restores():
    assert current_trace_id() is None
    with bind_trace_id() as outer:
        assert outer.startswith("inc-")
        with bind_trace_id("inner") as inner:
            assert current_trace_id() == inner == "inner"
        assert current_trace_id() == outer
    assert current_trace_id() is None


def test_trace_filter_stamps_records():
    record = logging.LogRecord("grants", logging.INFO, __file__, 1, "hello", None, None)
    trace_filter = TraceIdLogFilter()

    trace_filter.filter(record)
    assert record.trace_id == "-"

    with bind_trace_id("inc-log"):
        trace_filter.filter(record)
    assert record.trace_id == "inc-log"


def test_redaction_handles_urls_and_structured_values():
    assert redact_text("postgresql://grants:hunter2@db/grants") == f"postgresql://grants:{REDACTED}@db/grants"
    assert redact_text("sqlite:///tmp/grants.db") == "sqlite:///tmp/grants.db"
    assert redact_value(
        {
            "severity": Severity.HIGH,
            "due": date(2024, 3, 31),
            "tags": {"b", "a"},
            "recipient_tax_id": "12-3456789",
        }
    ) == {
        "severity": "HIGH",
        "due": "2024-03-31",
        "tags": ["a", "b"],
        "recipient_tax_id": REDACTED,
    }


def test_track_domain_events_records_grant_changes(tmp_path):
    support = OperationalSupport(tmp_path / "events.jsonl")
    detach = support.track_domain_events()
    try:
        domain_events.grant_changed.emit("g-1")
        domain_events.compliance_changed.emit("g-2")
    finally:
        detach()
    domain_events.expenditures_changed.emit("g-3")

    rows = support.read_events()
    assert [(row["event_type"], row["data"]["grant_id"]) for row in rows] == [
        ("grant.changed", "g-1"),
        ("grant.compliance_changed", "g-2"),
    ]
