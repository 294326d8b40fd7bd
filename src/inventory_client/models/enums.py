"""
Enumerations for Inventory SOAP Client data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class CompletenessVerdict(str, Enum):
    """
    Classification of a raw response body.

    Computed fresh on every attempt; never persisted.
    """

    COMPLETE = "complete"
    TRUNCATED = "truncated"
    NOT_APPLICABLE = "not_applicable"  # Not a SOAP envelope, opaque payload


class AttemptClassification(str, Enum):
    """How a single physical attempt ended."""

    SUCCEEDED = "succeeded"
    RECOVERED = "recovered"  # Decoder failed, tolerant extractor succeeded
    TRUNCATED = "truncated"
    TRANSPORT_ERROR = "transport_error"  # Timeout/network error, no body
    EXTRACTION_FAILED = "extraction_failed"  # Complete body, nothing recoverable
    UNUSABLE_BODY = "unusable_body"  # Error with a non-envelope body
    INVALID_ARGUMENTS = "invalid_arguments"


class FailureKind(str, Enum):
    """
    Reason behind a terminal InvocationFailure.

    Drives the human-readable message shown to the operator.
    """

    UNREACHABLE = "unreachable"
    INCOMPLETE = "incomplete"
    REJECTED = "rejected"
    INVALID_ARGUMENTS = "invalid_arguments"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    TRANSPORT = "transport"
