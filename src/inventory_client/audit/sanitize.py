"""
Conversion of arbitrary values into JSON-safe audit details.

Transport internals (clients, sockets, responses) are not serializable and
some hold reference cycles. Everything written to the audit log passes
through to_loggable() first.
"""

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, SecretStr

MASK = "**********"
CIRCULAR = "[Circular]"
MAX_DEPTH = 20

_SENSITIVE_KEYS = ("password", "secret", "authorization", "token")


def to_loggable(value: Any) -> Any:
    """
    Return a JSON-serializable rendition of `value`.

    - Primitives pass through; enums become their value; dates become ISO text
    - Mappings, sequences, dataclasses and pydantic models are walked
    - Values under sensitive keys (password, token, ...) and SecretStr are masked
    - Exceptions become {"type", "message"} (+ "details" when present)
    - A reference cycle becomes "[Circular]"
    - Anything else becomes "<TypeName>"
    """
    return _convert(value, set(), 0)


def _convert(value: Any, active: set[int], depth: int) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return _convert(value.value, active, depth)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, SecretStr):
        return MASK
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")

    if depth >= MAX_DEPTH:
        return f"<{type(value).__name__}>"

    # Containers: guard against cycles along the current path only
    marker = id(value)
    if marker in active:
        return CIRCULAR
    active.add(marker)
    try:
        if isinstance(value, BaseException):
            converted = {"type": type(value).__name__, "message": str(value)}
            details = getattr(value, "details", None)
            if details:
                converted["details"] = _convert(details, active, depth + 1)
            return converted
        if isinstance(value, BaseModel):
            return _convert_mapping(
                {name: getattr(value, name) for name in type(value).model_fields},
                active,
                depth,
            )
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return _convert_mapping(
                {f.name: getattr(value, f.name) for f in dataclasses.fields(value)},
                active,
                depth,
            )
        if isinstance(value, Mapping):
            return _convert_mapping(value, active, depth)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [_convert(item, active, depth + 1) for item in value]
        return f"<{type(value).__name__}>"
    finally:
        active.discard(marker)


def _convert_mapping(mapping: Mapping[Any, Any], active: set[int], depth: int) -> dict[str, Any]:
    converted: dict[str, Any] = {}
    for key, item in mapping.items():
        name = str(key)
        if any(word in name.lower() for word in _SENSITIVE_KEYS):
            converted[name] = MASK
        else:
            converted[name] = _convert(item, active, depth + 1)
    return converted
