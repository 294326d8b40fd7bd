"""
Pre-flight reachability probe for the SOAP endpoint.

Advisory only: a failed probe changes the warning shown to the operator,
it never blocks the real call.
"""

from typing import Optional

import httpx
import structlog


logger = structlog.get_logger(__name__)


async def is_reachable(
    endpoint: str,
    timeout_ms: int = 5000,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """
    Check whether the endpoint answers at all.

    Sends a HEAD request with a short timeout.

    Args:
        endpoint: Service endpoint URL
        timeout_ms: Probe timeout
        transport: Optional httpx transport (tests)

    Returns:
        True for any status below 500, False on network error, timeout or 5xx.
        Never raises.
    """
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000.0),
            limits=httpx.Limits(max_keepalive_connections=0),
            transport=transport,
        ) as client:
            response = await client.head(endpoint)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(
            "Reachability probe failed",
            endpoint=endpoint,
            timeout_ms=timeout_ms,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False

    reachable = response.status_code < 500
    logger.debug(
        "Reachability probe finished",
        endpoint=endpoint,
        status_code=response.status_code,
        reachable=reachable,
    )
    return reachable
