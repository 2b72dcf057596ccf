"""Unit test fixtures (mocks and stubs).

Provides a scripted upstream client for testing without a running proxy.
"""

from typing import Any, Dict

import httpx
import pytest

from upstream_retry.llm.base_client import BaseUpstreamClient


class ScriptedClient(BaseUpstreamClient):
    """Upstream client that replays a fixed sequence of results.

    Each item is either an httpx.Response (returned) or an exception
    (raised). Calls beyond the script repeat the last item.
    """

    def __init__(self, script: list[Any]):
        super().__init__("http://scripted", timeout=1)
        self.script = list(script)
        self.calls: list[tuple[Dict[str, Any], str]] = []

    async def send(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        self.calls.append((payload, api_key))
        index = min(len(self.calls), len(self.script)) - 1
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item

    async def health_check(self) -> bool:
        return True

    @property
    def keys_used(self) -> list[str]:
        return [key for _, key in self.calls]


@pytest.fixture
def scripted_client():
    """Factory for ScriptedClient instances."""
    return ScriptedClient
