"""
Retry decision engine and executor.

This module decides how to react to a failed upstream attempt:

1. **Signature failure** (400 + signature error body): fixed delay, same account
2. **Server overload** (529): capped exponential backoff, same account
3. **Other transient failure** (5xx, 408, 429, timeouts): capped exponential backoff, rotate account
4. **Non-retryable** (other 4xx): fail fast

Main Components:
    - classify / decide: Pure classification and decision functions
    - RetryDecisionEngine: Policy-bound engine that also logs each decision
    - RetryExecutor: Async attempt loop with cancellable sleeps and rotation
    - RetryMetadata: Immutable history of attempts
    - RetryExhausted / NonRetryableError / RequestCancelled: Terminal outcomes

Usage:
    >>> from upstream_retry.retry import RetryDecisionEngine, RetryExecutor
    >>> engine = RetryDecisionEngine(policy, settings.SIGNATURE_ERROR_PATTERNS)
    >>> response, metadata = await RetryExecutor(client, pool, engine).execute(payload)
"""

from upstream_retry.retry.classifier import classify, classify_exception
from upstream_retry.retry.engine import RetryDecisionEngine, decide, exponential_delay_ms
from upstream_retry.retry.exceptions import (
    NonRetryableError,
    PolicyConfigError,
    RequestCancelled,
    RetryExhausted,
)
from upstream_retry.retry.executor import RetryExecutor
from upstream_retry.retry.metadata import RetryMetadata

__all__ = [
    "classify",
    "classify_exception",
    "decide",
    "exponential_delay_ms",
    "RetryDecisionEngine",
    "RetryExecutor",
    "RetryMetadata",
    "RetryExhausted",
    "NonRetryableError",
    "PolicyConfigError",
    "RequestCancelled",
]
