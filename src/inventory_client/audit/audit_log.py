"""
Append-only audit log of SOAP attempts and outcomes.

Line format:
    [<ISO8601 timestamp>] [<LEVEL>] <message> <JSON details>

The file is reset (truncated to a single marker line) once it grows past
its size ceiling. Writes are serialized with a lock so concurrent calls
never interleave inside a line.

The audit log is a side channel: a failed write is reported through
structlog and otherwise ignored, it never fails an invocation.
"""

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog

from inventory_client.audit.sanitize import to_loggable
from inventory_client.models.enums import AttemptClassification
from inventory_client.models.invocation import (
    InvocationAttempt,
    InvocationOutcome,
    InvocationSuccess,
)

logger = structlog.get_logger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
BODY_SNIPPET_CHARS = 500


class AuditLog:
    """
    Durable record of every attempt and outcome, for diagnosis only.

    Attributes:
        path: Log file location (parent directories created on demand)
        max_bytes: Size ceiling that triggers a reset
    """

    RESET_MARKER = "Log reset: size limit exceeded"

    def __init__(self, path: str | Path, max_bytes: int = DEFAULT_MAX_BYTES):
        self.path = Path(path)
        self.max_bytes = max_bytes
        self._lock = threading.Lock()

    def record_attempt(
        self, operation: str, args: Mapping[str, Any], attempt_index: int
    ) -> None:
        """Record an attempt right before its network call."""
        self._write(
            "INFO",
            f"{operation} attempt {attempt_index} started",
            {"operation": operation, "attempt": attempt_index, "args": args},
        )

    def record_attempt_result(self, operation: str, attempt: InvocationAttempt) -> None:
        """Record how an attempt ended, with a body snippet when it went wrong."""
        ok = attempt.classification in (
            AttemptClassification.SUCCEEDED,
            AttemptClassification.RECOVERED,
        )
        details: dict[str, Any] = {
            "operation": operation,
            "attempt": attempt.attempt,
            "classification": attempt.classification,
            "timeout_ms": attempt.timeout_ms,
            "duration_ms": attempt.duration_ms,
            "body_length": len(attempt.raw_body) if attempt.raw_body is not None else None,
        }
        if attempt.error is not None:
            details["error"] = attempt.error
        if not ok and attempt.raw_body:
            details["body_snippet"] = attempt.raw_body[:BODY_SNIPPET_CHARS]

        self._write(
            "INFO" if ok else "WARN",
            f"{operation} attempt {attempt.attempt} {attempt.classification.value}",
            details,
        )

    def record_outcome(
        self, operation: str, outcome: InvocationOutcome, duration_ms: int
    ) -> None:
        """Record the outcome of a logical call."""
        if isinstance(outcome, InvocationSuccess):
            self._write(
                "INFO",
                f"{operation} succeeded",
                {
                    "operation": operation,
                    "attempts": outcome.attempts,
                    "recovered_from_raw_body": outcome.recovered_from_raw_body,
                    "duration_ms": duration_ms,
                    "result": outcome.result,
                },
            )
            return

        self._write(
            "ERROR",
            f"{operation} failed: {outcome.user_message}",
            {
                "operation": operation,
                "kind": outcome.kind,
                "attempts": outcome.attempts,
                "attempts_exhausted": outcome.attempts_exhausted,
                "was_truncated": outcome.was_truncated,
                "server_message": outcome.server_message,
                "last_error": outcome.last_error,
                "duration_ms": duration_ms,
            },
        )

    def record_unclassified_body(
        self, operation: str, raw_body: Optional[str], reason: str
    ) -> None:
        """Keep bodies the heuristics could not place, for later refinement."""
        self._write(
            "WARN",
            f"{operation} body not classified by heuristics ({reason})",
            {
                "operation": operation,
                "reason": reason,
                "body_length": len(raw_body) if raw_body is not None else None,
                "body_head": (raw_body or "")[:BODY_SNIPPET_CHARS],
                "body_tail": (raw_body or "")[-BODY_SNIPPET_CHARS:],
            },
        )

    def _write(self, level: str, message: str, details: Mapping[str, Any]) -> None:
        try:
            line = self._format_line(level, message, details)
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._reset_if_oversized()
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line)
        except Exception as e:
            logger.warning(
                "Audit log write failed",
                path=str(self.path),
                error=str(e),
                error_type=type(e).__name__,
            )

    def _reset_if_oversized(self) -> None:
        if not self.path.exists() or self.path.stat().st_size <= self.max_bytes:
            return
        with self.path.open("w", encoding="utf-8") as fh:
            fh.write(self._format_line("INFO", self.RESET_MARKER, None))
        logger.info("Audit log reset", path=str(self.path), max_bytes=self.max_bytes)

    @staticmethod
    def _format_line(level: str, message: str, details: Optional[Mapping[str, Any]]) -> str:
        timestamp = datetime.now(timezone.utc).isoformat()
        line = f"[{timestamp}] [{level}] {message}"
        if details:
            line += " " + json.dumps(to_loggable(details), ensure_ascii=False, default=str)
        return line + "\n"
