"""
Client facade for the inventory SOAP service.

Wires the transport, probe, audit log and retry policy from Settings so
callers only deal with operation names and arguments.

Usage:
    async with InventoryServiceClient() as client:
        articulo = await client.call("consultarArticulo", {"codigo": "MART-001"})
"""

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx
import structlog

from inventory_client.audit.audit_log import AuditLog
from inventory_client.config import Settings, settings as default_settings
from inventory_client.models.invocation import Credentials, InvocationFailure, InvocationOutcome
from inventory_client.parsing.completeness import CompletenessDetector
from inventory_client.retry.backoff import RetryPolicy
from inventory_client.retry.engine import RetryingInvoker
from inventory_client.retry.exceptions import InvocationFailed
from inventory_client.retry.observer import InvocationObserver
from inventory_client.soap.base_transport import BaseSoapTransport
from inventory_client.soap.http_transport import HttpSoapTransport
from inventory_client.soap.probe import is_reachable

logger = structlog.get_logger(__name__)


class InventoryServiceClient:
    """
    High-level entry point used by the command line and by scripts.

    Attributes:
        settings: Settings the client was built from
        transport: SOAP transport
        invoker: Retrying invoker doing the actual work
        credentials: Default credentials (from SOAP_USERNAME/SOAP_PASSWORD)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[BaseSoapTransport] = None,
        observer: Optional[InvocationObserver] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Build a client.

        Args:
            settings: Settings (defaults to the module-level instance)
            transport: SOAP transport (defaults to HttpSoapTransport)
            observer: Presentation hooks passed to the invoker
            http_transport: Optional httpx transport shared by the SOAP
                transport and the probe (httpx.MockTransport in tests)
            sleep: Backoff sleep, injectable for tests
        """
        self.settings = settings or default_settings
        cfg = self.settings

        self.transport = transport or HttpSoapTransport(
            endpoint_url=cfg.SOAP_ENDPOINT_URL,
            namespace=cfg.SOAP_NAMESPACE,
            transport=http_transport,
        )
        self._http_transport = http_transport

        self.credentials: Optional[Credentials] = None
        if cfg.SOAP_USERNAME:
            self.credentials = Credentials(
                username=cfg.SOAP_USERNAME,
                password=cfg.SOAP_PASSWORD or "",
            )

        self.invoker = RetryingInvoker(
            transport=self.transport,
            policy=RetryPolicy.from_settings(cfg),
            detector=CompletenessDetector(cfg.MIN_ENVELOPE_BYTES),
            audit_log=AuditLog(cfg.AUDIT_LOG_PATH, cfg.AUDIT_LOG_MAX_BYTES),
            observer=observer,
            probe=self.check_reachability,
            sleep=sleep,
            metrics_enabled=cfg.PROMETHEUS_ENABLED,
        )

        logger.debug(
            "Inventory client ready",
            endpoint_url=cfg.SOAP_ENDPOINT_URL,
            authenticated=self.credentials is not None,
            audit_log_path=cfg.AUDIT_LOG_PATH,
        )

    async def check_reachability(self) -> bool:
        """Probe the endpoint (advisory, never raises)."""
        return await is_reachable(
            self.settings.SOAP_ENDPOINT_URL,
            timeout_ms=self.settings.PROBE_TIMEOUT_MS,
            transport=self._http_transport,
        )

    async def list_operations(self) -> list[str]:
        """Operation names published in the service WSDL."""
        return await self.transport.list_operations()

    async def invoke(
        self,
        operation: str,
        args: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
        retries: Optional[int] = None,
        credentials: Optional[Credentials] = None,
    ) -> InvocationOutcome:
        """
        Run one logical call and return its outcome.

        Args:
            operation: Remote operation name
            args: Operation arguments
            timeout_ms: Overall deadline for the call, all attempts included
            retries: Attempt budget (defaults to MAX_ATTEMPTS)
            credentials: Overrides the default credentials
        """
        return await self.invoker.invoke(
            operation,
            args,
            max_attempts=retries,
            credentials=credentials or self.credentials,
            deadline_ms=timeout_ms,
        )

    async def call(
        self,
        operation: str,
        args: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
        retries: Optional[int] = None,
        credentials: Optional[Credentials] = None,
    ) -> Any:
        """
        Run one logical call and return its result.

        Raises:
            InvocationFailed: The call ended in InvocationFailure
        """
        outcome = await self.invoke(operation, args, timeout_ms, retries, credentials)
        if isinstance(outcome, InvocationFailure):
            raise InvocationFailed(operation, outcome)
        return outcome.result

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "InventoryServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
