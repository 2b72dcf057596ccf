"""Monitoring and metrics instrumentation for the upstream retry layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from upstream_retry.monitoring.metrics import (
    credential_rotations_total,
    retries_exhausted_total,
    retry_decisions_total,
    upstream_latency_seconds,
)

__all__ = [
    "retry_decisions_total",
    "retries_exhausted_total",
    "credential_rotations_total",
    "upstream_latency_seconds",
]
