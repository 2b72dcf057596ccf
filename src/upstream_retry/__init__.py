"""
Upstream retry layer for an LLM messaging API client.

Decides, after each failed attempt against the upstream messages endpoint:
- Whether the request should be retried
- How long to wait (fixed delay or capped exponential backoff)
- Whether to rotate to another account/API key before the next attempt

Architecture: pure decision engine + httpx client + credential pool + async retry executor
"""

__version__ = "0.1.0"
