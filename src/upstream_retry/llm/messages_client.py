"""
Messages API client for the upstream proxy.

Communicates with an Anthropic-style messages endpoint using httpx AsyncClient:
- POST /v1/messages with x-api-key and anthropic-version headers
- Connection pooling via a persistent client
- No internal retry: every call is exactly one attempt
"""

import json
import time
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
import structlog

from upstream_retry.llm.base_client import BaseUpstreamClient
from upstream_retry.llm.exceptions import (
    UpstreamConnectionError,
    UpstreamTimeoutError,
)

if TYPE_CHECKING:
    from upstream_retry.config import Settings


logger = structlog.get_logger(__name__)


def parse_error_body(response: httpx.Response) -> Any:
    """
    Extract the error payload from a response.

    Returns the decoded JSON document when the body is JSON, otherwise the
    raw text (possibly empty).
    """
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


class MessagesClient(BaseUpstreamClient):
    """
    Upstream messages client using httpx for async HTTP communication.

    API Endpoints:
    - POST {messages_path}: Create a message
    - GET /health: Liveness probe used by health_check()
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8045",
        timeout: int = 60,
        messages_path: str = "/v1/messages",
        api_version: str = "2023-06-01",
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize messages client.

        Args:
            base_url: Upstream server URL
            timeout: Request timeout in seconds
            messages_path: Path of the messages endpoint
            api_version: Value of the anthropic-version header
            connection_limits: httpx connection pool limits (default: 10 max connections)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        super().__init__(base_url, timeout)
        self.messages_path = messages_path
        self.api_version = api_version

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs) -> "MessagesClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.UPSTREAM_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT,
            messages_path=settings.UPSTREAM_MESSAGES_PATH,
            api_version=settings.UPSTREAM_API_VERSION,
            **kwargs
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def send(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        """
        Send one message request.

        The response is returned for every HTTP status code; only transport
        failures raise.
        """
        start_time = time.time()
        headers = {
            "content-type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self.api_version,
        }

        logger.debug(
            "Sending message request",
            path=self.messages_path,
            model=payload.get("model"),
        )

        try:
            client = await self._get_client()
            response = await client.post(
                self.messages_path,
                json=payload,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "Upstream request timeout",
                timeout=self.timeout,
                error=str(e)
            )
            raise UpstreamTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout, "error_type": type(e).__name__}
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                "Upstream network error",
                error=str(e),
                error_type=type(e).__name__
            )
            raise UpstreamConnectionError(
                f"Network error: {str(e)}",
                details={"error_type": type(e).__name__}
            ) from e
        except httpx.RequestError as e:
            # Redirect loops, undecodable content and other request failures
            logger.warning(
                "Upstream request failed",
                error=str(e),
                error_type=type(e).__name__
            )
            raise UpstreamConnectionError(
                f"Request failed: {str(e)}",
                details={"error_type": type(e).__name__}
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Upstream responded",
            status_code=response.status_code,
            latency_ms=latency_ms,
            model=payload.get("model"),
        )
        return response

    async def health_check(self) -> bool:
        """
        Check upstream health via GET /health.

        Returns True if server responds, False otherwise.
        """
        try:
            client = await self._get_client()
            response = await client.get("/health", timeout=5.0)
            response.raise_for_status()
            logger.debug("Upstream health check passed")
            return True
        except httpx.HTTPError as e:
            logger.warning("Upstream health check failed", error=str(e))
            return False

    async def close(self):
        """Close the persistent HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
        self._client = None
