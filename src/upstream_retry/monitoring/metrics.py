"""Custom Prometheus metrics for the upstream retry layer.

These metrics should be scraped by Prometheus.
Alert rules should be configured for:
- retries_exhausted_total (requests failing after the full attempt budget)
- retry_decisions_total with failure_class=server_overload (upstream congestion)
- credential_rotations_total (accounts churning, possible key-level rate limits)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

retry_decisions_total = Counter(
    "retry_decisions_total",
    "Total retry decisions by failure class and backoff kind",
    ["failure_class", "backoff_kind"],
)
"""
Retry decisions counter.

Labels:
- failure_class: success, client_signature_failure, server_overload, other_retryable, non_retryable
- backoff_kind: none (no retry), fixed, exponential

Alert thresholds:
- WARN: server_overload rate > 5% of attempts
- CRITICAL: server_overload rate > 20% of attempts
"""

retries_exhausted_total = Counter(
    "retries_exhausted_total",
    "Total logical requests that used up their attempt budget",
    ["failure_class"],
)
"""
Exhausted requests by the class of the final attempt.

Alert thresholds:
- WARN: any sustained increase
"""

credential_rotations_total = Counter(
    "credential_rotations_total",
    "Total rotation requests issued to the credential pool",
)

# === Upstream Performance Metrics ===

upstream_latency_seconds = Histogram(
    "upstream_latency_seconds",
    "Upstream attempt latency in seconds",
    ["status_class"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Upstream attempt latency histogram.

Labels:
- status_class: 2xx, 4xx, 5xx, transport
"""
