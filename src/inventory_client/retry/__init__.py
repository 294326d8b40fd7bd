"""
Retrying invoker for SOAP operations.

Realizes one logical call through sequential physical attempts with
escalating timeouts and linear backoff. Every attempt is judged on its raw
body (complete, truncated, or not an envelope) as well as on the
transport's verdict; complete bodies the decoder rejected go through
tolerant extraction before the attempt is written off.

Main Components:
    - RetryingInvoker: Main orchestrator for one logical call
    - RetryPolicy: Attempt budget, timeout escalation and backoff
    - InvocationObserver: Hooks for presentation layers
    - InvocationFailed: Exception form of a terminal InvocationFailure

Usage:
    >>> from inventory_client.retry import RetryingInvoker
    >>> invoker = RetryingInvoker(transport, policy=RetryPolicy(max_attempts=3))
    >>> outcome = await invoker.invoke("consultarArticulo", {"codigo": "MART-001"})
"""

from inventory_client.retry.backoff import RetryPolicy
from inventory_client.retry.engine import RetryingInvoker
from inventory_client.retry.exceptions import InvocationFailed
from inventory_client.retry.observer import InvocationObserver, NullObserver

__all__ = [
    "RetryingInvoker",
    "RetryPolicy",
    "InvocationObserver",
    "NullObserver",
    "InvocationFailed",
]
