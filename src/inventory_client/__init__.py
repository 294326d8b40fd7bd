"""
Inventory SOAP Client for the hardware-store inventory service.

Invokes remote operations (consultarArticulo, actualizarStock, ...) over
SOAP 1.1 and survives a flaky server:
- Escalating per-attempt timeouts with linear backoff
- Detection of truncated response envelopes
- Tolerant field recovery from malformed or prefix-inconsistent XML
- Append-only audit log of every attempt and outcome

Architecture: httpx transport + completeness detector + tolerant extractor,
orchestrated by the RetryingInvoker
"""

__version__ = "0.1.0"
