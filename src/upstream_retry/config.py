"""
Configuration settings for the upstream retry layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from upstream_retry.models.retry_models import RetryPolicy
from upstream_retry.retry.exceptions import PolicyConfigError


DEFAULT_SIGNATURE_ERROR_PATTERNS = [
    "invalid `signature`",
    "thinking.signature",
    "thought signature",
    "signature verification",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "upstream-retry"  # "app" field on every log event
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON

    # === Upstream Messages API ===
    UPSTREAM_BASE_URL: str = "http://127.0.0.1:8045"
    UPSTREAM_MESSAGES_PATH: str = "/v1/messages"
    UPSTREAM_API_VERSION: str = "2023-06-01"  # anthropic-version header
    UPSTREAM_TIMEOUT: int = 60  # seconds
    UPSTREAM_API_KEYS: list[str] = []  # One entry per account, rotated on demand

    # === Retry Policy ===
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_FIXED_DELAY_MS: int = 200  # Signature failures
    RETRY_BASE_BACKOFF_MS: int = 1000  # First exponential wait
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_MAX_BACKOFF_MS: int = 8000

    # === Classification ===
    SIGNATURE_ERROR_PATTERNS: list[str] = DEFAULT_SIGNATURE_ERROR_PATTERNS  # Case-insensitive substrings

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


def load_retry_policy(settings: Settings) -> RetryPolicy:
    """
    Build the read-only retry policy from settings.

    Args:
        settings: Application settings

    Returns:
        Validated, frozen RetryPolicy

    Raises:
        PolicyConfigError: Any policy value is out of range
    """
    try:
        return RetryPolicy(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            fixed_delay_ms=settings.RETRY_FIXED_DELAY_MS,
            base_backoff_ms=settings.RETRY_BASE_BACKOFF_MS,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
            max_backoff_ms=settings.RETRY_MAX_BACKOFF_MS,
        )
    except ValidationError as e:
        raise PolicyConfigError(
            "Invalid retry policy configuration",
            details={"errors": [
                {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]},
        ) from e


# Global settings instance
settings = Settings()
