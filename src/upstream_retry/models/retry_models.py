"""
Data models for the retry decision cycle.

AttemptOutcome is built fresh by the caller after every attempt, RetryPolicy
is loaded once from settings, and RetryDecision is produced by the engine.
All three are frozen: nothing downstream may mutate them.
"""

from pydantic import BaseModel, ConfigDict, Field

from upstream_retry.models.enums import BackoffKind, FailureClass


class AttemptOutcome(BaseModel):
    """
    Observed result of one upstream attempt.

    attempt_index is 1-based and restarts at 1 for every logical request.
    Transport failures (timeout, connection refused) use raw_status_code=0.
    """
    model_config = ConfigDict(frozen=True)

    classification: FailureClass = Field(..., description="Failure class of this attempt")
    raw_status_code: int = Field(..., ge=0, description="HTTP status code (0 for transport failures)")
    attempt_index: int = Field(..., ge=1, description="Attempt number within the logical request (1 = first try)")


class RetryPolicy(BaseModel):
    """
    Backoff and attempt budget configuration.

    Built via `load_retry_policy()` so that malformed values surface as a
    configuration error at load time instead of at decision time.
    """
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts allowed, first try included")
    fixed_delay_ms: int = Field(default=200, ge=0, description="Constant wait used for signature failures")
    base_backoff_ms: int = Field(default=1000, ge=0, description="First exponential wait")
    backoff_multiplier: float = Field(default=2.0, ge=1.0, description="Growth factor per attempt")
    max_backoff_ms: int = Field(default=8000, ge=0, description="Cap for exponential waits")


class RetryDecision(BaseModel):
    """What the caller should do after an attempt."""
    model_config = ConfigDict(frozen=True)

    should_retry: bool
    delay_ms: int = Field(default=0, ge=0)
    rotate_credential: bool = False
    backoff_kind: BackoffKind = BackoffKind.NONE

    @classmethod
    def stop(cls) -> "RetryDecision":
        """Terminal decision: no retry, no wait, keep the credential."""
        return cls(should_retry=False)
