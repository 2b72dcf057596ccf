"""
Abstract base client for the upstream messages API.

Defines the interface the retry executor depends on. Concrete clients send a
single attempt and report what happened; they never retry on their own.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx
import structlog


logger = structlog.get_logger(__name__)


class BaseUpstreamClient(ABC):
    """
    Abstract base class for upstream API clients.

    Responsibilities:
    - Send one request to the upstream with a given API key
    - Return the raw HTTP response regardless of status code
    - Translate transport failures into UpstreamClientError subclasses

    Does NOT handle:
    - Retry, backoff or account rotation (that's RetryExecutor's job)
    - Failure classification (that's the classifier's job)
    """

    def __init__(self, base_url: str, timeout: int = 60):
        """
        Initialize base client.

        Args:
            base_url: Base URL of the upstream (e.g., http://127.0.0.1:8045)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        logger.info(
            "Initialized upstream client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def send(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        """
        Send a single attempt to the upstream.

        Args:
            payload: JSON request body
            api_key: Credential to authenticate this attempt with

        Returns:
            The HTTP response, whatever its status code

        Raises:
            UpstreamTimeoutError: Request exceeded timeout
            UpstreamConnectionError: Upstream unreachable
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the upstream is reachable.

        Returns:
            True if the upstream answers, False otherwise

        Note:
            This should NOT raise exceptions - return False on error.
        """
        pass

    async def close(self):
        """
        Close client connections and cleanup resources.

        Default implementation does nothing.
        """
        logger.debug("Closing upstream client", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
