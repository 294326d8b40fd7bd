"""
Abstract base transport for SOAP invocation.

Defines the interface the retrying invoker consumes. This abstraction
allows swapping the HTTP layer (or a test double) without changing the
retry, detection, or extraction logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import structlog

from inventory_client.models.invocation import Credentials
from inventory_client.soap.exceptions import SoapClientError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransportReply:
    """
    Result of one physical exchange: (error, decoded result, raw body).

    Any combination may be present. In particular a reply can carry an
    error AND a raw body (HTTP 500 with an envelope, decode failure,
    connection dropped mid-body), which is what tolerant recovery feeds on.
    """

    error: Optional[SoapClientError] = None
    result: Optional[dict[str, Any]] = None
    raw_body: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseSoapTransport(ABC):
    """
    Abstract base class for SOAP transports.

    Responsibilities:
    - Serialize the request envelope and send it
    - Report network, HTTP and decode problems inside TransportReply
    - Enumerate the service's operations

    Does NOT handle:
    - Retries, backoff or timeout escalation (RetryingInvoker's job)
    - Truncation detection (parsing.completeness)
    - Tolerant recovery of malformed bodies (parsing.extractor)
    """

    def __init__(self, endpoint_url: str, namespace: str, **kwargs):
        """
        Initialize base transport.

        Args:
            endpoint_url: Service endpoint (e.g., http://localhost:8080/InventarioService)
            namespace: Target namespace of the service operations
            **kwargs: Additional transport-specific config
        """
        self.endpoint_url = endpoint_url.rstrip("/")
        self.namespace = namespace
        self.extra_config = kwargs

        logger.debug(
            "Initialized SOAP transport",
            transport_class=self.__class__.__name__,
            endpoint_url=self.endpoint_url,
            namespace=namespace,
        )

    def prepare(self, operation: str, args: Mapping[str, Any]) -> None:
        """
        Check that a call can be serialized, before any attempt is made.

        Default implementation accepts everything.

        Raises:
            ArgumentValidationError: Arguments cannot be put on the wire
        """
        pass

    @abstractmethod
    async def call(
        self,
        operation: str,
        args: Mapping[str, Any],
        timeout_ms: int,
        credentials: Optional[Credentials] = None,
    ) -> TransportReply:
        """
        Issue one named call.

        Implementations must not raise for network, HTTP or decode
        problems: those are reported through TransportReply.error, with
        whatever raw body arrived. Cancellation is allowed to propagate.

        Args:
            operation: Remote operation name
            args: Validated argument mapping
            timeout_ms: Timeout budget for this exchange
            credentials: Optional HTTP Basic credentials

        Returns:
            TransportReply for this exchange
        """
        pass

    @abstractmethod
    async def list_operations(self) -> list[str]:
        """
        Enumerate available operation names.

        Raises:
            SoapClientError: Service description could not be fetched or parsed
        """
        pass

    async def close(self) -> None:
        """
        Release resources. Default implementation does nothing.

        Subclasses holding persistent resources should override.
        """
        logger.debug("Closing SOAP transport", transport_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint_url={self.endpoint_url})"
