"""
Retry layer exceptions.

PolicyConfigError is raised while loading configuration. The remaining
exceptions are the terminal outcomes of a logical request's retry loop as
seen by the end caller.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from upstream_retry.models.retry_models import AttemptOutcome
    from upstream_retry.retry.metadata import RetryMetadata


class PolicyConfigError(Exception):
    """
    Raised when the retry policy configuration is malformed.

    Surfaces at policy-load time; once a policy is loaded, decisions
    cannot fail.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryExhausted(Exception):
    """
    Raised when the attempt budget is used up without a success.

    This is a normal terminal outcome ("retries exhausted"), not an
    internal fault.

    Attributes:
        retry_metadata: Complete retry history
        last_outcome: Outcome of the final attempt
        last_body: Parsed error body of the final attempt (if any)
    """

    def __init__(
        self,
        retry_metadata: "RetryMetadata",
        last_outcome: "AttemptOutcome",
        last_body: Any = None,
    ) -> None:
        self.retry_metadata = retry_metadata
        self.last_outcome = last_outcome
        self.last_body = last_body

        super().__init__(
            f"Retries exhausted after {retry_metadata.total_attempts} attempts. "
            f"Last status: {last_outcome.raw_status_code} "
            f"({last_outcome.classification.value})"
        )


class NonRetryableError(Exception):
    """
    Raised when the upstream rejects a request that cannot succeed on retry.

    Attributes:
        status_code: HTTP status code returned by the upstream
        body: Parsed error body
        retry_metadata: Retry history up to the rejection
    """

    def __init__(
        self,
        status_code: int,
        body: Any,
        retry_metadata: "RetryMetadata",
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.retry_metadata = retry_metadata

        super().__init__(f"Upstream rejected request with non-retryable status {status_code}")


class RequestCancelled(Exception):
    """
    Raised when the logical request was cancelled between attempts.

    Attributes:
        attempts_made: Number of attempts performed before cancellation
    """

    def __init__(self, attempts_made: int) -> None:
        self.attempts_made = attempts_made
        super().__init__(f"Request cancelled after {attempts_made} attempts")
