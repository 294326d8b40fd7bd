"""Custom Prometheus metrics for the Inventory SOAP Client.

Exposed through the default prometheus_client registry; a long-running host
process can serve them with prometheus_client.start_http_server().
Alert rules worth configuring:
- soap_attempts_total{classification="truncated"} (server cutting responses)
- soap_recoveries_total (malformed envelopes being patched over)
- soap_invocations_total{outcome="failure"} (calls failing after retries)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

soap_attempts_total = Counter(
    "soap_attempts_total",
    "Total physical SOAP attempts by operation and classification",
    ["operation", "classification"],
)
"""
Physical attempts counter.

Labels:
- operation: remote operation name (consultarArticulo, actualizarStock, ...)
- classification: succeeded, recovered, truncated, transport_error,
  extraction_failed, unusable_body, invalid_arguments
"""

soap_attempt_latency_seconds = Histogram(
    "soap_attempt_latency_seconds",
    "Latency of a single SOAP attempt",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 20.0, 30.0],
)
"""
Per-attempt latency histogram.

Buckets follow the escalating timeout schedule (15s, 20s, 25s by default).
"""

# === Logical Call Metrics ===

soap_invocations_total = Counter(
    "soap_invocations_total",
    "Total logical SOAP calls by operation and outcome",
    ["operation", "outcome"],
)
"""
Logical calls counter.

Labels:
- outcome: success, failure
"""

soap_recoveries_total = Counter(
    "soap_recoveries_total",
    "Total results recovered by tolerant extraction",
    ["operation"],
)
"""
Recovered results counter.

Any sustained rate means the service is emitting envelopes the strict
decoder cannot read.
"""
