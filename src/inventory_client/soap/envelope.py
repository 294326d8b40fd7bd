"""
SOAP 1.1 envelope codec (primary structured decoder).

Builds document/literal wrapped request envelopes and decodes response
envelopes into plain dicts keyed by local element names. Namespaces are
stripped on decode: the inventory service is inconsistent about prefixes,
and callers only care about element names.

This decoder is strict. Bodies it rejects are handed to the tolerant
extractor (inventory_client.parsing.extractor) by the retrying invoker.
"""

import xml.etree.ElementTree as ET
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

import structlog

from inventory_client.soap.exceptions import (
    ArgumentValidationError,
    SoapDecodeError,
    SoapFaultError,
)


logger = structlog.get_logger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"

ET.register_namespace("soapenv", SOAP_ENV_NS)


def local_name(tag: str) -> str:
    """Strip the '{namespace}' part ElementTree puts in front of a tag."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def build_request_envelope(operation: str, args: Mapping[str, Any], namespace: str) -> str:
    """
    Build a request envelope for a document/literal wrapped operation.

    The operation wrapper is qualified with the service namespace; argument
    elements are unqualified (JAX-WS default). None values are omitted,
    nested mappings become nested elements and sequences become repeated
    elements.

    Args:
        operation: Remote operation name (e.g., "consultarArticulo")
        args: Argument mapping
        namespace: Target namespace of the service

    Returns:
        Serialized envelope (unicode string, no XML declaration)

    Raises:
        ArgumentValidationError: If an argument value cannot be serialized
    """
    ET.register_namespace("tns", namespace)

    envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
    ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Header")
    body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
    wrapper = ET.SubElement(body, f"{{{namespace}}}{operation}")

    for name, value in args.items():
        _append_value(wrapper, name, value)

    return ET.tostring(envelope, encoding="unicode")


def _append_value(parent: ET.Element, name: str, value: Any) -> None:
    if value is None:
        return
    if not isinstance(name, str) or not name:
        raise ArgumentValidationError(
            f"Argument names must be non-empty strings, got {name!r}",
            details={"argument": repr(name)}
        )
    if isinstance(value, Mapping):
        child = ET.SubElement(parent, name)
        for key, item in value.items():
            _append_value(child, key, item)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _append_value(parent, name, item)
        return

    child = ET.SubElement(parent, name)
    child.text = _format_scalar(name, value)


def _format_scalar(name: str, value: Any) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise ArgumentValidationError(
        f"Argument '{name}' has unsupported type {type(value).__name__}",
        details={"argument": name, "type": type(value).__name__}
    )


def decode_response(raw_body: str | bytes, operation: str) -> dict[str, Any]:
    """
    Decode a response envelope into a dict.

    Returns the content of the first Body child (normally
    '<operation>Response'), converted with element_to_value().

    Raises:
        SoapDecodeError: Body is not well-formed XML or not an envelope
        SoapFaultError: Body carries a SOAP Fault
    """
    try:
        root = ET.fromstring(raw_body)
    except ET.ParseError as e:
        raise SoapDecodeError(
            f"Malformed XML in response to {operation}: {e}",
            details={"operation": operation, "parse_error": str(e)}
        ) from e

    if local_name(root.tag) != "Envelope":
        raise SoapDecodeError(
            f"Response to {operation} is not a SOAP envelope (root: {local_name(root.tag)})",
            details={"operation": operation, "root": local_name(root.tag)}
        )

    body = next((child for child in root if local_name(child.tag) == "Body"), None)
    if body is None:
        raise SoapDecodeError(
            f"SOAP envelope for {operation} has no Body",
            details={"operation": operation}
        )

    payload = list(body)
    if not payload:
        raise SoapDecodeError(
            f"SOAP Body for {operation} is empty",
            details={"operation": operation}
        )

    first = payload[0]
    if local_name(first.tag) == "Fault":
        raise _fault_error(first, operation)

    expected = f"{operation}Response"
    if local_name(first.tag) != expected:
        logger.debug(
            "Unexpected response wrapper",
            operation=operation,
            expected=expected,
            actual=local_name(first.tag),
        )

    value = element_to_value(first)
    return value if isinstance(value, dict) else {}


def element_to_value(element: ET.Element) -> Any:
    """
    Convert an element to plain Python values.

    Leaf elements become their stripped text (None when empty). Elements
    with children become dicts keyed by local name; repeated children are
    collected into lists. Text stays text: the caller knows the shape.
    """
    children = list(element)
    if not children:
        text = (element.text or "").strip()
        return text or None

    result: dict[str, Any] = {}
    for child in children:
        key = local_name(child.tag)
        value = element_to_value(child)
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def _fault_error(fault: ET.Element, operation: str) -> SoapFaultError:
    fault_code = None
    fault_string = None
    for element in fault.iter():
        name = local_name(element.tag)
        text = (element.text or "").strip() or None
        # SOAP 1.1: faultcode/faultstring; SOAP 1.2: Code/Value, Reason/Text
        if name in ("faultcode", "Value") and fault_code is None:
            fault_code = text
        elif name in ("faultstring", "Text") and fault_string is None:
            fault_string = text

    return SoapFaultError(
        f"SOAP Fault in response to {operation}: {fault_string or 'no fault string'}",
        fault_code=fault_code,
        fault_string=fault_string,
        details={"operation": operation, "fault_code": fault_code},
    )


def parse_wsdl_operations(wsdl_text: str | bytes) -> list[str]:
    """
    List operation names declared in a WSDL's portType elements.

    Order of declaration is preserved; duplicates are dropped.

    Raises:
        SoapDecodeError: If the WSDL is not well-formed XML
    """
    try:
        root = ET.fromstring(wsdl_text)
    except ET.ParseError as e:
        raise SoapDecodeError(
            f"Malformed WSDL: {e}", details={"parse_error": str(e)}
        ) from e

    operations: list[str] = []
    for port_type in root.iter():
        if local_name(port_type.tag) != "portType":
            continue
        for child in port_type:
            name = child.get("name")
            if local_name(child.tag) == "operation" and name and name not in operations:
                operations.append(name)
    return operations
