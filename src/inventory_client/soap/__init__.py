"""
SOAP transport layer for the inventory service.

Provides:
- HttpSoapTransport: httpx-based transport returning TransportReply
- Envelope codec (build_request_envelope, decode_response)
- Operation catalog with client-side argument validation
- is_reachable(): advisory pre-flight probe
- Exception hierarchy (SoapClientError and subclasses)
"""

from inventory_client.soap.base_transport import BaseSoapTransport, TransportReply
from inventory_client.soap.envelope import (
    build_request_envelope,
    decode_response,
    parse_wsdl_operations,
)
from inventory_client.soap.exceptions import (
    ArgumentValidationError,
    SoapClientError,
    SoapConnectionError,
    SoapDecodeError,
    SoapFaultError,
    SoapHttpError,
    SoapTimeoutError,
    SoapTruncatedResponseError,
)
from inventory_client.soap.http_transport import HttpSoapTransport
from inventory_client.soap.operations import OPERATION_ARGUMENTS, validate_arguments
from inventory_client.soap.probe import is_reachable

__all__ = [
    "BaseSoapTransport",
    "TransportReply",
    "HttpSoapTransport",
    "build_request_envelope",
    "decode_response",
    "parse_wsdl_operations",
    "OPERATION_ARGUMENTS",
    "validate_arguments",
    "is_reachable",
    "ArgumentValidationError",
    "SoapClientError",
    "SoapConnectionError",
    "SoapDecodeError",
    "SoapFaultError",
    "SoapHttpError",
    "SoapTimeoutError",
    "SoapTruncatedResponseError",
]
