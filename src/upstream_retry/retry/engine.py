"""
Retry decision engine.

Given the outcome of an attempt, decides whether to retry, how long to wait
and whether to switch account first. The decision itself is a pure function
of (outcome, policy); the engine class only bundles the policy with the
classifier configuration and emits the operator-facing log lines.

Decision rules (first match wins):
    1. SUCCESS / NON_RETRYABLE: stop
    2. attempt budget exhausted: stop
    3. CLIENT_SIGNATURE_FAILURE: fixed delay, keep account
    4. SERVER_OVERLOAD: exponential backoff, keep account
    5. OTHER_RETRYABLE: exponential backoff, rotate account

Usage:
    engine = RetryDecisionEngine(policy, settings.SIGNATURE_ERROR_PATTERNS)
    outcome, decision = engine.evaluate(status_code, error_body, attempt_index)
"""

from typing import Any, Sequence

import structlog

from upstream_retry.models.enums import BackoffKind, FailureClass
from upstream_retry.models.retry_models import (
    AttemptOutcome,
    RetryDecision,
    RetryPolicy,
)
from upstream_retry.retry.classifier import classify

logger = structlog.get_logger(__name__)


def exponential_delay_ms(policy: RetryPolicy, attempt_index: int) -> int:
    """
    Capped exponential delay for the given attempt.

    base_backoff_ms * backoff_multiplier ** (attempt_index - 1), never above
    max_backoff_ms.
    """
    try:
        raw = policy.base_backoff_ms * policy.backoff_multiplier ** (attempt_index - 1)
    except OverflowError:
        return policy.max_backoff_ms
    return int(min(policy.max_backoff_ms, raw))


def decide(outcome: AttemptOutcome, policy: RetryPolicy) -> RetryDecision:
    """
    Decide what to do after an attempt.

    Args:
        outcome: Classified attempt outcome
        policy: Loaded retry policy

    Returns:
        RetryDecision (fresh instance, never shared)
    """
    classification = outcome.classification

    if classification.is_terminal:
        return RetryDecision.stop()

    if outcome.attempt_index >= policy.max_attempts:
        return RetryDecision.stop()

    if classification == FailureClass.CLIENT_SIGNATURE_FAILURE:
        # Content problem: waiting longer or switching account changes nothing
        return RetryDecision(
            should_retry=True,
            delay_ms=policy.fixed_delay_ms,
            rotate_credential=False,
            backoff_kind=BackoffKind.FIXED,
        )

    delay_ms = exponential_delay_ms(policy, outcome.attempt_index)

    if classification == FailureClass.SERVER_OVERLOAD:
        # Backend-wide congestion, the next account hits the same backend
        return RetryDecision(
            should_retry=True,
            delay_ms=delay_ms,
            rotate_credential=False,
            backoff_kind=BackoffKind.EXPONENTIAL,
        )

    return RetryDecision(
        should_retry=True,
        delay_ms=delay_ms,
        rotate_credential=True,
        backoff_kind=BackoffKind.EXPONENTIAL,
    )


def log_decision(
    outcome: AttemptOutcome,
    decision: RetryDecision,
    policy: RetryPolicy,
) -> None:
    """
    Emit the log lines describing a decision.

    The event strings are a stable contract: operators and smoke-test
    scripts grep for them.
    """
    status = outcome.raw_status_code
    progress = f"{outcome.attempt_index}/{policy.max_attempts}"
    context = {
        "status_code": status,
        "attempt": outcome.attempt_index,
        "max_attempts": policy.max_attempts,
        "failure_class": outcome.classification.value,
    }

    if outcome.classification == FailureClass.SUCCESS:
        if outcome.attempt_index > 1:
            logger.info(f"Request succeeded after retry: attempt={progress}", **context)
        return

    if outcome.classification == FailureClass.NON_RETRYABLE:
        logger.warning(f"Not retrying status {status} (non-retryable)", **context)
        return

    if not decision.should_retry:
        logger.warning(f"Retries exhausted: status={status}, attempt={progress}", **context)
        return

    waiting = f"waiting={decision.delay_ms}ms"
    if decision.backoff_kind == BackoffKind.FIXED:
        logger.info(
            f"Retry with fixed delay: status={status}, attempt={progress}, {waiting}",
            delay_ms=decision.delay_ms,
            **context,
        )
    else:
        logger.info(
            f"Retry with exponential backoff: status={status}, attempt={progress}, {waiting}",
            delay_ms=decision.delay_ms,
            **context,
        )

    if decision.rotate_credential:
        logger.info(f"Rotating account for status {status}", **context)
    elif outcome.classification == FailureClass.SERVER_OVERLOAD:
        logger.info(f"Keeping same account for status {status} (server-side issue)", **context)
    else:
        logger.info(f"Keeping same account for status {status} (request content issue)", **context)


class RetryDecisionEngine:
    """
    Classifier + decision function bound to one loaded policy.

    Stateless after construction: safe to share across concurrent
    requests without locking.

    Attributes:
        policy: Read-only retry policy
        signature_patterns: Substrings identifying signature failures
    """

    def __init__(self, policy: RetryPolicy, signature_patterns: Sequence[str] = ()):
        self.policy = policy
        self.signature_patterns = tuple(signature_patterns)

        logger.info(
            "RetryDecisionEngine initialized",
            max_attempts=policy.max_attempts,
            fixed_delay_ms=policy.fixed_delay_ms,
            base_backoff_ms=policy.base_backoff_ms,
            backoff_multiplier=policy.backoff_multiplier,
            max_backoff_ms=policy.max_backoff_ms,
            signature_patterns=len(self.signature_patterns),
        )

    def classify(self, raw_status_code: int, error_body: Any) -> FailureClass:
        """Classify using the configured signature patterns."""
        return classify(raw_status_code, error_body, self.signature_patterns)

    def decide(self, outcome: AttemptOutcome) -> RetryDecision:
        """Decide using the bound policy."""
        return decide(outcome, self.policy)

    def evaluate(
        self,
        raw_status_code: int,
        error_body: Any,
        attempt_index: int,
        classification: FailureClass | None = None,
    ) -> tuple[AttemptOutcome, RetryDecision]:
        """
        Classify, decide and log one attempt.

        Args:
            raw_status_code: HTTP status of the attempt
            error_body: Parsed error payload
            attempt_index: 1-based attempt number
            classification: Precomputed class (transport failures); skips classify()

        Returns:
            Tuple of (outcome, decision)
        """
        if classification is None:
            classification = self.classify(raw_status_code, error_body)

        outcome = AttemptOutcome(
            classification=classification,
            raw_status_code=raw_status_code,
            attempt_index=attempt_index,
        )
        decision = self.decide(outcome)
        log_decision(outcome, decision, self.policy)
        return outcome, decision
