"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from typing import Any

import httpx
import pytest

from upstream_retry.config import DEFAULT_SIGNATURE_ERROR_PATTERNS, Settings
from upstream_retry.models.retry_models import RetryPolicy
from upstream_retry.retry.engine import RetryDecisionEngine


SIGNATURE_ERROR_BODY = {
    "type": "error",
    "error": {
        "type": "invalid_request_error",
        "message": "messages.1.content.0: Invalid `signature` in `thinking` block",
    },
}

OVERLOAD_ERROR_BODY = {
    "type": "error",
    "error": {"type": "overloaded_error", "message": "Overloaded"},
}


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RETRY_MAX_ATTEMPTS = 5
    """
    return Settings(
        # === Application ===
        APP_NAME="upstream-retry-test",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Upstream ===
        UPSTREAM_BASE_URL="http://127.0.0.1:8045",
        UPSTREAM_TIMEOUT=5,
        UPSTREAM_API_KEYS=["sk-test-account-one", "sk-test-account-two"],

        # === Retry Policy ===
        RETRY_MAX_ATTEMPTS=3,
        RETRY_FIXED_DELAY_MS=200,
        RETRY_BASE_BACKOFF_MS=1000,
        RETRY_BACKOFF_MULTIPLIER=2.0,
        RETRY_MAX_BACKOFF_MS=8000,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def policy() -> RetryPolicy:
    """Reference policy: 3 attempts, 200ms fixed, 1000ms x2 capped at 8000ms."""
    return RetryPolicy(
        max_attempts=3,
        fixed_delay_ms=200,
        base_backoff_ms=1000,
        backoff_multiplier=2.0,
        max_backoff_ms=8000,
    )


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Millisecond-scale policy for tests that really sleep."""
    return RetryPolicy(
        max_attempts=3,
        fixed_delay_ms=1,
        base_backoff_ms=1,
        backoff_multiplier=2.0,
        max_backoff_ms=4,
    )


@pytest.fixture
def engine(policy: RetryPolicy) -> RetryDecisionEngine:
    """Decision engine over the reference policy and default signature patterns."""
    return RetryDecisionEngine(policy, DEFAULT_SIGNATURE_ERROR_PATTERNS)


@pytest.fixture
def fast_engine(fast_policy: RetryPolicy) -> RetryDecisionEngine:
    return RetryDecisionEngine(fast_policy, DEFAULT_SIGNATURE_ERROR_PATTERNS)


def make_response(status_code: int, body: Any = None) -> httpx.Response:
    """Build an httpx.Response with a JSON (dict) or text (str) body."""
    if body is None:
        body = {"type": "message", "content": [{"type": "text", "text": "Hello"}]}
    if isinstance(body, str):
        return httpx.Response(status_code, text=body)
    return httpx.Response(status_code, json=body)


@pytest.fixture
def response_factory():
    """Factory fixture around make_response."""
    return make_response


@pytest.fixture
def signature_error_body() -> dict:
    return SIGNATURE_ERROR_BODY


@pytest.fixture
def overload_error_body() -> dict:
    return OVERLOAD_ERROR_BODY
