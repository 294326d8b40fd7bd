"""
Tolerant field extraction from raw response bodies.

Best-effort degradation path for bodies the strict decoder rejected
(malformed XML, inconsistent namespace prefixes, SOAP Faults carried in
HTTP 500 responses). Recovers the fields callers need (code, name, price,
stock) with per-field regular expressions.

Pure and idempotent: the same body and operation always give the same
ExtractionResult.
"""

import html
import math
import re
from typing import Any, Optional, Sequence

import structlog

from inventory_client.models.invocation import ExtractionResult
from inventory_client.parsing.strategies import (
    CONTAINER_FALLBACK_STRATEGIES,
    DEFAULT_STRATEGIES,
    TagStrategy,
    find_first,
)

logger = structlog.get_logger(__name__)

SUCCESS_FLAG_TAGS = ("exitoso", "success")
MESSAGE_TAGS = ("mensaje", "message", "faultstring")
DATA_CONTAINER_TAGS = ("articulo", "data")

IDENTIFYING_FIELDS = ("codigo", "nombre")
TEXT_FIELDS = ("codigo", "nombre", "descripcion", "categoriaNombre", "proveedorNombre")
NUMERIC_FIELDS: dict[str, type] = {
    "id": int,
    "categoriaId": int,
    "proveedorId": int,
    "precioCompra": float,
    "precioVenta": float,
    "stockActual": int,
    "stockMinimo": int,
}
# Reported next to the data container, not inside it (actualizarStock)
RESPONSE_LEVEL_FIELDS: dict[str, type] = {
    "stockAnterior": int,
    "stockNuevo": int,
}

NO_DATA_MESSAGE = "No data found in response"

_FALSE_FLAGS = {"false", "0", "no"}
_CDATA = re.compile(r"^<!\[CDATA\[(.*)\]\]>$", re.DOTALL)


def clean_text(raw: str) -> str:
    """Strip whitespace, unwrap CDATA and unescape XML entities."""
    text = raw.strip()
    cdata = _CDATA.match(text)
    if cdata:
        return cdata.group(1)
    return html.unescape(text)


def lenient_number(raw: Optional[str], kind: type = float) -> int | float:
    """
    Parse a number, defaulting to zero instead of failing.

    Accepts a decimal comma ("12,50"). Integers are parsed through float so
    "5.0" gives 5. NaN and infinities count as unparseable.
    """
    if raw is None:
        return kind(0)
    text = clean_text(raw).replace(",", ".")
    try:
        value = float(text)
        if not math.isfinite(value):
            return kind(0)
        return int(value) if kind is int else value
    except (TypeError, ValueError, OverflowError):
        return kind(0)


class TolerantExtractor:
    """
    Recover a result from a raw body with prioritized tag strategies.

    Steps:
    1. Narrow to the '<operation>Response' wrapper (else the whole body)
    2. Read the success flag and message; an explicit false flag ends here
    3. Narrow to the data container (articulo, data, then generic <return>)
    4. Pull known fields, text first-match, numbers leniently
    5. Succeed only if an identifying field (codigo or nombre) was found
    """

    def __init__(
        self,
        strategies: Sequence[TagStrategy] = DEFAULT_STRATEGIES,
        container_fallbacks: Sequence[TagStrategy] = CONTAINER_FALLBACK_STRATEGIES,
    ):
        self.strategies = tuple(strategies)
        self.container_fallbacks = tuple(container_fallbacks)

    def extract(self, raw_body: Optional[str | bytes], operation: str) -> ExtractionResult:
        """
        Extract a best-effort result.

        Args:
            raw_body: Raw response body (may be malformed)
            operation: Operation name, used to find the response wrapper

        Returns:
            ExtractionResult (never raises)
        """
        if not raw_body:
            return ExtractionResult(success=False, message=NO_DATA_MESSAGE)
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8", errors="replace")

        content = find_first(self.strategies, raw_body, (f"{operation}Response",))
        if content is None:
            content = raw_body

        message = self._text(content, MESSAGE_TAGS)
        flag = self._text(content, SUCCESS_FLAG_TAGS)
        if flag is not None and flag.lower() in _FALSE_FLAGS:
            logger.debug("Server flagged operation as failed", operation=operation, message=message)
            return ExtractionResult(success=False, message=message)

        container = find_first(self.strategies, content, DATA_CONTAINER_TAGS)
        if container is None:
            container = find_first(self.container_fallbacks, content, ("return",))
        if container is None:
            container = content

        fields: dict[str, Any] = {}
        for name in TEXT_FIELDS:
            value = self._text(container, (name,))
            if value is not None:
                fields[name] = value
        for name, kind in NUMERIC_FIELDS.items():
            raw = find_first(self.strategies, container, (name,))
            if raw is not None:
                fields[name] = lenient_number(raw, kind)
        for name, kind in RESPONSE_LEVEL_FIELDS.items():
            raw = find_first(self.strategies, content, (name,))
            if raw is not None:
                fields[name] = lenient_number(raw, kind)

        if not any(fields.get(name) for name in IDENTIFYING_FIELDS):
            logger.debug(
                "No identifying field recovered",
                operation=operation,
                recovered=sorted(fields),
            )
            return ExtractionResult(success=False, fields=fields, message=message or NO_DATA_MESSAGE)

        logger.debug("Recovered fields from raw body", operation=operation, fields=sorted(fields))
        return ExtractionResult(success=True, fields=fields, message=message)

    def _text(self, content: str, tags: Sequence[str]) -> Optional[str]:
        raw = find_first(self.strategies, content, tags)
        return clean_text(raw) if raw is not None else None


_default_extractor = TolerantExtractor()


def extract(raw_body: Optional[str | bytes], operation: str) -> ExtractionResult:
    """Extract with the default strategy list."""
    return _default_extractor.extract(raw_body, operation)
