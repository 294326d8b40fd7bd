"""
Envelope completeness detection.

Classifies a raw response body as COMPLETE, TRUNCATED or NOT_APPLICABLE.
The inventory service has been seen cutting responses off under load;
this check runs on every attempt before any result is trusted.

Only SOAP envelopes are judged. Anything without an envelope opening
marker is an opaque payload and bypasses the truncation heuristics.
"""

import re
from functools import lru_cache
from typing import Optional

import structlog

from inventory_client.models.enums import CompletenessVerdict

logger = structlog.get_logger(__name__)

DEFAULT_MIN_ENVELOPE_BYTES = 200

# Prefix spellings the service (and its proxies) use for the envelope namespace
ENVELOPE_PREFIXES = ("soap", "soapenv", "S", "env", "SOAP-ENV")

_PREFIXES = "|".join(re.escape(prefix) for prefix in ENVELOPE_PREFIXES)

_ENVELOPE_OPEN = re.compile(r"<\s*([\w.-]+):envelope\b", re.IGNORECASE)


def _prefix_pattern(opening_prefix: str) -> str:
    """Conventional prefixes plus the one the envelope actually opened with."""
    return f"{_PREFIXES}|{re.escape(opening_prefix)}"


@lru_cache(maxsize=32)
def _closing_marker(opening_prefix: str) -> re.Pattern:
    return re.compile(
        rf"</\s*(?:{_prefix_pattern(opening_prefix)}):(?:envelope|body)\s*>", re.IGNORECASE
    )


@lru_cache(maxsize=32)
def _body_open_at_end(opening_prefix: str) -> re.Pattern:
    return re.compile(
        rf"<\s*(?:{_prefix_pattern(opening_prefix)}):body\b[^>]*>\s*$", re.IGNORECASE
    )


class CompletenessDetector:
    """
    Pure classifier for raw response bodies.

    Rules, in order:
    1. Empty body -> TRUNCATED
    2. No '<prefix:Envelope' marker -> NOT_APPLICABLE
    3. Closing Envelope or Body tag, with a conventional prefix or the
       envelope's own, present -> COMPLETE (wins over length)
    4. Otherwise TRUNCATED, with the reason that fired: too_short,
       open_tag, empty_body, or unclosed_envelope when no heuristic fired
       but the envelope was never closed either
    """

    def __init__(self, min_envelope_bytes: int = DEFAULT_MIN_ENVELOPE_BYTES):
        self.min_envelope_bytes = min_envelope_bytes

    def classify(self, raw_body: Optional[str | bytes]) -> CompletenessVerdict:
        """Classify a raw body."""
        verdict, _ = self.classify_with_reason(raw_body)
        return verdict

    def classify_with_reason(
        self, raw_body: Optional[str | bytes]
    ) -> tuple[CompletenessVerdict, str]:
        """
        Classify a raw body and name the rule that decided.

        Returns:
            Tuple of (verdict, reason)
        """
        if raw_body is None or len(raw_body) == 0:
            return CompletenessVerdict.TRUNCATED, "empty"

        if isinstance(raw_body, bytes):
            size = len(raw_body)
            text = raw_body.decode("utf-8", errors="replace")
        else:
            text = raw_body
            size = len(raw_body.encode("utf-8", errors="replace"))

        opening = _ENVELOPE_OPEN.search(text)
        if opening is None:
            return CompletenessVerdict.NOT_APPLICABLE, "no_envelope"
        prefix = opening.group(1)

        if _closing_marker(prefix).search(text):
            return CompletenessVerdict.COMPLETE, "closing_marker"

        if size < self.min_envelope_bytes:
            return CompletenessVerdict.TRUNCATED, "too_short"

        if text.rfind("<") > text.rfind(">"):
            return CompletenessVerdict.TRUNCATED, "open_tag"

        if _body_open_at_end(prefix).search(text):
            return CompletenessVerdict.TRUNCATED, "empty_body"

        logger.debug(
            "Envelope never closed but no truncation heuristic fired",
            body_length=size,
            tail=text[-80:],
        )
        return CompletenessVerdict.TRUNCATED, "unclosed_envelope"


_default_detector = CompletenessDetector()


def classify(raw_body: Optional[str | bytes]) -> CompletenessVerdict:
    """Classify a raw body with the default size threshold (200 bytes)."""
    return _default_detector.classify(raw_body)
