"""
Custom exceptions for the upstream client layer.

The client never raises on HTTP status codes; status handling belongs to the
retry engine. These exceptions cover transport-level failures, which the
classifier maps to a retryable class.
"""


class UpstreamClientError(Exception):
    """
    Base exception for all upstream client errors.

    All client-specific exceptions inherit from this to allow catching
    any transport-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UpstreamConnectionError(UpstreamClientError):
    """
    Raised when unable to reach the upstream endpoint.

    Includes connection refused, DNS failures, dropped connections, etc.
    """
    pass


class UpstreamTimeoutError(UpstreamConnectionError):
    """
    Raised when the upstream does not answer within the timeout.

    Separate from generic connection errors so logs and metrics can tell
    a slow upstream from an unreachable one.
    """
    pass
