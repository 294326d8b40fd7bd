"""
Unit tests for the call/response audit log.
"""

import json
import re
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from inventory_client.audit.audit_log import AuditLog
from inventory_client.models.enums import AttemptClassification, FailureKind
from inventory_client.models.invocation import (
    InvocationAttempt,
    InvocationFailure,
    InvocationSuccess,
)
from inventory_client.soap.exceptions import SoapTimeoutError

LINE = re.compile(r"^\[(?P<ts>[^\]]+)\] \[(?P<level>[A-Z]+)\] (?P<message>.*?)(?: (?P<details>\{.*\}))?$")


def read_lines(log: AuditLog) -> list[dict]:
    entries = []
    for line in log.path.read_text(encoding="utf-8").splitlines():
        match = LINE.match(line)
        assert match, f"Unexpected line format: {line!r}"
        entry = match.groupdict()
        entry["details"] = json.loads(entry["details"]) if entry["details"] else None
        entries.append(entry)
    return entries


def make_attempt(classification: AttemptClassification, raw_body=None, error=None) -> InvocationAttempt:
    now = datetime.now(timezone.utc)
    return InvocationAttempt(
        attempt=2,
        timeout_ms=20000,
        started_at=now,
        finished_at=now,
        classification=classification,
        raw_body=raw_body,
        error=error,
    )


# ============================================================================
# Line Format
# ============================================================================


def test_record_attempt(audit_log):
    audit_log.record_attempt("consultarArticulo", {"codigo": "MART-001"}, 1)

    [entry] = read_lines(audit_log)
    assert entry["level"] == "INFO"
    assert entry["message"] == "consultarArticulo attempt 1 started"
    assert entry["details"]["args"] == {"codigo": "MART-001"}
    datetime.fromisoformat(entry["ts"])


def test_creates_parent_directories(tmp_path: Path):
    log = AuditLog(tmp_path / "nested" / "dir" / "soap_calls.log")

    log.record_attempt("verificarEstado", {}, 1)

    assert log.path.exists()


def test_failed_attempt_includes_body_snippet(audit_log):
    body = "<S:Envelope>" + "x" * 2000
    attempt = make_attempt(
        AttemptClassification.TRUNCATED,
        raw_body=body,
        error=SoapTimeoutError("timed out", details={"timeout_ms": 20000}),
    )

    audit_log.record_attempt_result("consultarArticulo", attempt)

    [entry] = read_lines(audit_log)
    assert entry["level"] == "WARN"
    assert entry["message"] == "consultarArticulo attempt 2 truncated"
    assert entry["details"]["classification"] == "truncated"
    assert entry["details"]["body_length"] == len(body)
    assert len(entry["details"]["body_snippet"]) == 500
    assert entry["details"]["error"]["type"] == "SoapTimeoutError"


def test_successful_attempt_has_no_snippet(audit_log):
    audit_log.record_attempt_result(
        "consultarArticulo", make_attempt(AttemptClassification.SUCCEEDED, raw_body="<ok/>")
    )

    [entry] = read_lines(audit_log)
    assert entry["level"] == "INFO"
    assert "body_snippet" not in entry["details"]


def test_record_success_outcome(audit_log):
    outcome = InvocationSuccess(result={"codigo": "MART-001"}, recovered_from_raw_body=True, attempts=2)

    audit_log.record_outcome("consultarArticulo", outcome, 1234)

    [entry] = read_lines(audit_log)
    assert entry["message"] == "consultarArticulo succeeded"
    assert entry["details"]["recovered_from_raw_body"] is True
    assert entry["details"]["duration_ms"] == 1234
    assert entry["details"]["result"] == {"codigo": "MART-001"}


def test_record_failure_outcome(audit_log):
    outcome = InvocationFailure(
        kind=FailureKind.INCOMPLETE,
        was_truncated=True,
        attempts_exhausted=True,
        attempts=3,
    )

    audit_log.record_outcome("consultarArticulo", outcome, 50)

    [entry] = read_lines(audit_log)
    assert entry["level"] == "ERROR"
    assert entry["message"] == "consultarArticulo failed: Response incomplete after 3 attempts"
    assert entry["details"]["kind"] == "incomplete"


def test_passwords_are_masked(audit_log):
    audit_log.record_attempt("login", {"usuario": "admin", "password": "admin123"}, 1)

    text = audit_log.path.read_text(encoding="utf-8")
    assert "admin123" not in text
    assert "**********" in text


def test_record_unclassified_body(audit_log):
    body = "<S:Envelope>" + "a" * 600 + "TAIL"

    audit_log.record_unclassified_body("listarCategorias", body, "unclosed_envelope")

    [entry] = read_lines(audit_log)
    assert entry["level"] == "WARN"
    assert entry["details"]["reason"] == "unclosed_envelope"
    assert entry["details"]["body_tail"].endswith("TAIL")


# ============================================================================
# Rotation and Failure Handling
# ============================================================================


def test_resets_when_over_size_ceiling(tmp_path: Path):
    log = AuditLog(tmp_path / "soap_calls.log", max_bytes=1024)
    for i in range(30):
        log.record_attempt("consultarArticulo", {"codigo": f"ART-{i:03d}"}, 1)

    entries = read_lines(log)
    assert log.path.stat().st_size <= 1024 + 512
    assert any(entry["message"] == AuditLog.RESET_MARKER for entry in entries)


def test_reset_leaves_single_marker_line(tmp_path: Path):
    log = AuditLog(tmp_path / "soap_calls.log", max_bytes=10)
    log.path.write_text("x" * 100, encoding="utf-8")

    log.record_attempt("verificarEstado", {}, 1)

    entries = read_lines(log)
    assert [entry["message"] for entry in entries] == [
        AuditLog.RESET_MARKER,
        "verificarEstado attempt 1 started",
    ]


def test_write_errors_are_swallowed(tmp_path: Path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way", encoding="utf-8")
    log = AuditLog(blocker / "soap_calls.log")

    # Parent "directory" is a regular file: every write fails
    log.record_attempt("verificarEstado", {}, 1)
    log.record_outcome("verificarEstado", InvocationSuccess(result={}, attempts=1), 1)


def test_unserializable_details_are_replaced(audit_log):
    class Opaque:
        pass

    cyclic: dict = {"name": "loop"}
    cyclic["self"] = cyclic

    audit_log.record_attempt("op", {"handle": Opaque(), "cyclic": cyclic}, 1)

    [entry] = read_lines(audit_log)
    assert entry["details"]["args"]["handle"] == "<Opaque>"
    assert entry["details"]["args"]["cyclic"]["self"] == "[Circular]"


def test_concurrent_writes_do_not_interleave(audit_log):
    def writer(n: int) -> None:
        for i in range(50):
            audit_log.record_attempt("consultarArticulo", {"codigo": f"T{n}-{i}" * 20}, i + 1)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    entries = read_lines(audit_log)
    assert len(entries) == 200
