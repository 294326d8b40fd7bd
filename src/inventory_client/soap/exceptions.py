"""
Custom exceptions for the SOAP transport layer.

These exceptions let the retrying invoker distinguish failure modes:
network problems and timeouts are retried, server faults and undecodable
bodies go through tolerant recovery, and argument errors fail immediately.
"""


class SoapClientError(Exception):
    """
    Base exception for all SOAP client errors.

    All transport-specific exceptions inherit from this to allow catching
    any SOAP-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SoapConnectionError(SoapClientError):
    """
    Raised when unable to reach the SOAP service.

    Includes refused connections, DNS failures, dropped sockets.
    Retriable.
    """
    pass


class SoapTimeoutError(SoapConnectionError):
    """
    Raised when an attempt exceeds its timeout budget.

    Separate from generic connection errors so the audit trail can tell
    a slow service from an absent one. Retriable.
    """
    pass


class SoapHttpError(SoapClientError):
    """
    Raised when the service answers with an HTTP error status.

    The response body (if any) travels alongside in the TransportReply and
    may still hold a recoverable envelope.
    """
    def __init__(self, message: str, status_code: int, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class SoapFaultError(SoapClientError):
    """
    Raised when the response envelope carries a SOAP Fault.

    fault_string holds the server's explanation, used as the rejection
    message shown to the operator.
    """
    def __init__(
        self,
        message: str,
        fault_code: str | None = None,
        fault_string: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.fault_code = fault_code
        self.fault_string = fault_string


class SoapDecodeError(SoapClientError):
    """
    Raised when the primary XML decoder rejects a response body.

    Triggers tolerant extraction when the body is otherwise complete.
    """
    pass


class ArgumentValidationError(SoapClientError):
    """
    Raised when call arguments are invalid before anything is sent.

    Never retried and never consumes attempt budget.
    """
    pass


class SoapTruncatedResponseError(SoapClientError):
    """
    Raised (recorded) when a response envelope arrived incomplete.

    Retriable; terminal only on the final attempt.
    """
    pass
