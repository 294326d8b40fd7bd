"""
SOAP transport over HTTP using httpx.

Each exchange opens a fresh AsyncClient with keep-alive disabled, so a
previous attempt's half-read socket can never leak into a retry. The
response body is streamed and kept even when the connection drops halfway:
a partial body is exactly what truncation detection needs to see.
"""

from typing import Any, Mapping, Optional

import httpx
import structlog

from inventory_client.models.invocation import Credentials
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
)


logger = structlog.get_logger(__name__)


class HttpSoapTransport(BaseSoapTransport):
    """
    httpx-based SOAP 1.1 transport.

    Endpoints:
    - POST <endpoint>: document/literal wrapped operation call
    - GET <endpoint>?wsdl: service description (operation listing)

    Features:
    - Non-persistent connections (one client per exchange, Connection: close)
    - HTTP Basic auth from explicit per-call Credentials
    - Partial bodies preserved on dropped connections and read timeouts
    - SOAP Faults in HTTP error bodies surfaced as SoapFaultError
    """

    def __init__(
        self,
        endpoint_url: str = "http://localhost:8080/InventarioService",
        namespace: str = "http://ws.inventario.ferreteria.com/",
        wsdl_timeout_ms: int = 10000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize HTTP SOAP transport.

        Args:
            endpoint_url: Service endpoint URL
            namespace: Target namespace of the service
            wsdl_timeout_ms: Timeout for fetching the WSDL
            transport: Optional httpx transport (e.g., httpx.MockTransport in tests)
            **kwargs: Additional config
        """
        super().__init__(endpoint_url, namespace, **kwargs)
        self.wsdl_timeout_ms = wsdl_timeout_ms
        self._transport = transport

    def _new_client(
        self, timeout_ms: int, credentials: Optional[Credentials] = None
    ) -> httpx.AsyncClient:
        """Create a single-use client; no connection survives the exchange."""
        auth = None
        if credentials is not None:
            auth = httpx.BasicAuth(
                credentials.username, credentials.password.get_secret_value()
            )
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000.0),
            limits=httpx.Limits(max_keepalive_connections=0, max_connections=1),
            headers={"Connection": "close", "User-Agent": "inventory-client"},
            auth=auth,
            transport=self._transport,
            follow_redirects=True,
        )

    def prepare(self, operation: str, args: Mapping[str, Any]) -> None:
        """Build the request envelope once so unserializable arguments fail early."""
        build_request_envelope(operation, args, self.namespace)

    async def call(
        self,
        operation: str,
        args: Mapping[str, Any],
        timeout_ms: int,
        credentials: Optional[Credentials] = None,
    ) -> TransportReply:
        """
        POST a request envelope and interpret the response.

        Never raises for network, HTTP or decode problems; see TransportReply.
        """
        try:
            envelope = build_request_envelope(operation, args, self.namespace)
        except ArgumentValidationError as e:
            return TransportReply(error=e)

        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{self.namespace}{operation}"',
        }

        logger.debug(
            "Sending SOAP request",
            operation=operation,
            endpoint_url=self.endpoint_url,
            timeout_ms=timeout_ms,
            envelope_length=len(envelope),
        )

        chunks: list[bytes] = []
        status_code: Optional[int] = None
        encoding = "utf-8"
        try:
            async with self._new_client(timeout_ms, credentials) as client:
                async with client.stream(
                    "POST",
                    self.endpoint_url,
                    content=envelope.encode("utf-8"),
                    headers=headers,
                ) as response:
                    status_code = response.status_code
                    encoding = response.charset_encoding or "utf-8"
                    async for chunk in response.aiter_bytes():
                        chunks.append(chunk)

        except httpx.TimeoutException as e:
            logger.warning(
                "SOAP request timeout",
                operation=operation,
                timeout_ms=timeout_ms,
                bytes_received=sum(len(c) for c in chunks),
                error=str(e),
            )
            error = SoapTimeoutError(
                f"{operation} timed out after {timeout_ms} ms",
                details={"operation": operation, "timeout_ms": timeout_ms},
            )
            return self._broken_exchange(error, chunks, encoding, status_code)

        except httpx.TransportError as e:
            logger.warning(
                "SOAP network error",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                bytes_received=sum(len(c) for c in chunks),
            )
            error = SoapConnectionError(
                f"Network error during {operation}: {e}",
                details={"operation": operation, "error_type": type(e).__name__},
            )
            return self._broken_exchange(error, chunks, encoding, status_code)

        raw_body = b"".join(chunks).decode(encoding, errors="replace")
        return self._interpret(operation, status_code, raw_body)

    def _broken_exchange(
        self,
        error: SoapClientError,
        chunks: list[bytes],
        encoding: str,
        status_code: Optional[int],
    ) -> TransportReply:
        raw_body = b"".join(chunks).decode(encoding, errors="replace") if chunks else None
        return TransportReply(error=error, raw_body=raw_body, status_code=status_code)

    def _interpret(self, operation: str, status_code: int, raw_body: str) -> TransportReply:
        if status_code >= 400:
            error: SoapClientError = SoapHttpError(
                f"HTTP {status_code} from service for {operation}",
                status_code=status_code,
                details={"operation": operation, "status_code": status_code},
            )
            if not raw_body.strip():
                return TransportReply(error=error, status_code=status_code)
            try:
                decode_response(raw_body, operation)
            except SoapFaultError as fault:
                fault.details["status_code"] = status_code
                error = fault
            except SoapDecodeError:
                pass

            logger.warning(
                "SOAP HTTP error",
                operation=operation,
                status_code=status_code,
                error_type=type(error).__name__,
                body_length=len(raw_body),
            )
            return TransportReply(error=error, raw_body=raw_body, status_code=status_code)

        try:
            result = decode_response(raw_body, operation)
        except SoapClientError as e:
            logger.warning(
                "SOAP response could not be decoded",
                operation=operation,
                status_code=status_code,
                error_type=type(e).__name__,
                body_length=len(raw_body),
            )
            return TransportReply(error=e, raw_body=raw_body, status_code=status_code)

        logger.debug(
            "SOAP response decoded",
            operation=operation,
            status_code=status_code,
            body_length=len(raw_body),
        )
        return TransportReply(result=result, raw_body=raw_body, status_code=status_code)

    async def list_operations(self) -> list[str]:
        """
        Fetch <endpoint>?wsdl and list its portType operations.

        Raises:
            SoapTimeoutError: WSDL fetch timed out
            SoapConnectionError: Service unreachable
            SoapHttpError: Service answered with an error status
            SoapDecodeError: WSDL is not well-formed
        """
        url = f"{self.endpoint_url}?wsdl"
        try:
            async with self._new_client(self.wsdl_timeout_ms) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise SoapTimeoutError(
                f"WSDL fetch timed out after {self.wsdl_timeout_ms} ms",
                details={"url": url},
            ) from e
        except httpx.TransportError as e:
            raise SoapConnectionError(
                f"Unable to fetch WSDL: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            raise SoapHttpError(
                f"HTTP {response.status_code} fetching WSDL",
                status_code=response.status_code,
                details={"url": url},
            )

        operations = parse_wsdl_operations(response.content)
        logger.info("Discovered service operations", count=len(operations), operations=operations)
        return operations
