"""
Pydantic data models for the upstream retry layer.

Includes:
- Enums (FailureClass, BackoffKind)
- Retry models (AttemptOutcome, RetryPolicy, RetryDecision)
"""

from upstream_retry.models.enums import BackoffKind, FailureClass
from upstream_retry.models.retry_models import (
    AttemptOutcome,
    RetryDecision,
    RetryPolicy,
)

__all__ = [
    # Enums
    "FailureClass",
    "BackoffKind",
    # Retry models
    "AttemptOutcome",
    "RetryPolicy",
    "RetryDecision",
]
