"""
Enumerations for retry decision data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class FailureClass(str, Enum):
    """
    Classification of a single upstream attempt outcome.

    Drives both the backoff shape and the account rotation decision.
    """

    SUCCESS = "success"
    CLIENT_SIGNATURE_FAILURE = "client_signature_failure"
    SERVER_OVERLOAD = "server_overload"
    OTHER_RETRYABLE = "other_retryable"
    NON_RETRYABLE = "non_retryable"

    @property
    def is_terminal(self) -> bool:
        """True for classes that never lead to another attempt."""
        return self in (FailureClass.SUCCESS, FailureClass.NON_RETRYABLE)


class BackoffKind(str, Enum):
    """Shape of the wait applied before the next attempt."""

    NONE = "none"
    FIXED = "fixed"
    EXPONENTIAL = "exponential"
