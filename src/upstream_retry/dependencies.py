"""
Wiring for the upstream retry layer.

Provides singleton instances of shared resources (client, credential pool,
decision engine) and a factory that assembles a RetryExecutor from settings.
"""

from functools import lru_cache

from upstream_retry.config import Settings, load_retry_policy, settings
from upstream_retry.credentials.pool import CredentialPool
from upstream_retry.llm.base_client import BaseUpstreamClient
from upstream_retry.llm.messages_client import MessagesClient
from upstream_retry.logging_config import setup_logging
from upstream_retry.models.retry_models import RetryPolicy
from upstream_retry.retry.engine import RetryDecisionEngine
from upstream_retry.retry.executor import RetryExecutor


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def init_logging() -> None:
    """Configure logging from settings once per process."""
    setup_logging(get_settings())


@lru_cache()
def get_retry_policy() -> RetryPolicy:
    """
    Get the retry policy, validated once.

    Raises:
        PolicyConfigError: Policy settings are out of range
    """
    return load_retry_policy(get_settings())


@lru_cache()
def get_decision_engine() -> RetryDecisionEngine:
    """Get singleton decision engine (stateless, shared by all requests)."""
    return RetryDecisionEngine(
        get_retry_policy(),
        get_settings().SIGNATURE_ERROR_PATTERNS,
    )


@lru_cache()
def get_credential_pool() -> CredentialPool:
    """
    Get singleton credential pool.

    One pool per process so that concurrent requests rotate the same cursor.
    """
    return CredentialPool(get_settings().UPSTREAM_API_KEYS)


@lru_cache()
def get_upstream_client() -> BaseUpstreamClient:
    """Get singleton upstream client with connection pooling."""
    return MessagesClient.from_settings(get_settings())


def build_executor(
    settings: Settings,
    client: BaseUpstreamClient | None = None,
    pool: CredentialPool | None = None,
) -> RetryExecutor:
    """
    Assemble a RetryExecutor from explicit settings.

    Args:
        settings: Application settings
        client: Upstream client (default: MessagesClient from settings)
        pool: Credential pool (default: pool over UPSTREAM_API_KEYS)

    Raises:
        PolicyConfigError: Policy settings are out of range
        ValueError: No API keys configured and no pool given
    """
    engine = RetryDecisionEngine(
        load_retry_policy(settings),
        settings.SIGNATURE_ERROR_PATTERNS,
    )
    return RetryExecutor(
        client=client or MessagesClient.from_settings(settings),
        pool=pool or CredentialPool(settings.UPSTREAM_API_KEYS),
        engine=engine,
        metrics_enabled=settings.PROMETHEUS_ENABLED,
    )


def get_retry_executor() -> RetryExecutor:
    """Executor over the process-wide singletons."""
    init_logging()
    return RetryExecutor(
        client=get_upstream_client(),
        pool=get_credential_pool(),
        engine=get_decision_engine(),
        metrics_enabled=get_settings().PROMETHEUS_ENABLED,
    )
