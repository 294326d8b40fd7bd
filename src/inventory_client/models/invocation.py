"""
Invocation data models for the request/attempt/outcome cycle.

A logical call is realized through one or more physical attempts. Attempts
are short-lived (they only survive in the audit log); the outcome is handed
to the caller and never referenced again by the engine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from inventory_client.models.enums import AttemptClassification, FailureKind


class Credentials(BaseModel):
    """HTTP Basic credentials passed explicitly into each invocation."""
    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1, description="Service user name")
    password: SecretStr = Field(..., description="Service password (masked in logs)")


@dataclass(frozen=True)
class InvocationAttempt:
    """
    One physical network exchange for a logical call.

    Attributes:
        attempt: Attempt index (1-based)
        timeout_ms: Timeout budget granted to this attempt
        started_at: Wall-clock start
        finished_at: Wall-clock end
        classification: How the attempt ended
        raw_body: Raw response body, if any arrived
        error: Transport error, if one was reported
    """

    attempt: int
    timeout_ms: int
    started_at: datetime
    finished_at: datetime
    classification: AttemptClassification
    raw_body: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def duration_ms(self) -> int:
        return int((self.finished_at - self.started_at).total_seconds() * 1000)


class ExtractionResult(BaseModel):
    """
    Best-effort structured result recovered from a raw response body.

    Produced by the tolerant extractor; lives only while one body is processed.
    """
    model_config = ConfigDict(frozen=True)

    success: bool = Field(..., description="Whether an identifying field was recovered")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Recovered field values")
    message: Optional[str] = Field(default=None, description="Server message, if any")


class InvocationSuccess(BaseModel):
    """Logical call succeeded, either by clean decode or tolerant recovery."""
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    result: Any = Field(..., description="Decoded (or recovered) structured result")
    recovered_from_raw_body: bool = Field(
        default=False,
        description="True when the result came from the tolerant extractor"
    )
    attempts: int = Field(..., ge=1, description="Physical attempts used")
    duration_ms: int = Field(default=0, ge=0, description="Wall time of the logical call")

    @property
    def ok(self) -> bool:
        return True


class InvocationFailure(BaseModel):
    """Logical call failed after its attempt budget or on a non-retriable error."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["failure"] = "failure"
    kind: FailureKind = Field(..., description="Failure reason for operator messaging")
    last_error: Optional[Exception] = Field(default=None, description="Last error observed")
    attempts_exhausted: bool = Field(default=False, description="Attempt budget fully used")
    was_truncated: bool = Field(default=False, description="Last attempt returned a truncated body")
    attempts: int = Field(default=0, ge=0, description="Physical attempts made")
    server_message: Optional[str] = Field(
        default=None,
        description="Message recovered from the server's response, if any"
    )
    duration_ms: int = Field(default=0, ge=0, description="Wall time of the logical call")

    @property
    def ok(self) -> bool:
        return False

    @property
    def user_message(self) -> str:
        """Human-readable message for the operator."""
        if self.kind == FailureKind.INCOMPLETE:
            return f"Response incomplete after {self.attempts} attempts"
        if self.kind == FailureKind.REJECTED:
            return f"Operation rejected by server: {self.server_message or 'no reason given'}"
        if self.kind == FailureKind.UNREACHABLE:
            return f"Server unreachable after {self.attempts} attempts"
        if self.kind == FailureKind.INVALID_ARGUMENTS:
            return f"Invalid arguments: {_error_text(self.last_error)}"
        if self.kind == FailureKind.DEADLINE_EXCEEDED:
            return f"Deadline exceeded after {self.attempts} attempts"
        return f"Call failed after {self.attempts} attempts: {_error_text(self.last_error)}"


InvocationOutcome = Union[InvocationSuccess, InvocationFailure]


def _error_text(error: Optional[Exception]) -> str:
    if error is None:
        return "unknown error"
    return getattr(error, "message", None) or str(error) or type(error).__name__
