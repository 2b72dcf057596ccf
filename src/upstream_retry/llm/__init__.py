"""
Upstream client abstraction and implementations.

Components:
- BaseUpstreamClient: Abstract base class for upstream clients
- MessagesClient: httpx client for the messages endpoint
- parse_error_body: Error payload extraction
- exceptions: Transport-level exceptions
"""

from upstream_retry.llm.base_client import BaseUpstreamClient
from upstream_retry.llm.messages_client import MessagesClient, parse_error_body
from upstream_retry.llm.exceptions import (
    UpstreamClientError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)

__all__ = [
    "BaseUpstreamClient",
    "MessagesClient",
    "parse_error_body",
    "UpstreamClientError",
    "UpstreamConnectionError",
    "UpstreamTimeoutError",
]
