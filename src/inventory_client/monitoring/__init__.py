"""Monitoring and metrics instrumentation for the Inventory SOAP Client.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from inventory_client.monitoring.metrics import (
    soap_attempt_latency_seconds,
    soap_attempts_total,
    soap_invocations_total,
    soap_recoveries_total,
)

__all__ = [
    "soap_attempts_total",
    "soap_attempt_latency_seconds",
    "soap_invocations_total",
    "soap_recoveries_total",
]
