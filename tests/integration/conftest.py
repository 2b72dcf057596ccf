"""Integration test fixtures.

Provides an in-process stand-in for the messages proxy built on
httpx.MockTransport, so the real MessagesClient and RetryExecutor can be
exercised end to end without a running server.
"""

import json
from collections import defaultdict
from typing import Any

import httpx
import pytest
import pytest_asyncio

from upstream_retry.llm.messages_client import MessagesClient


class MockProxy:
    """Scripted messages endpoint.

    Responses are scripted per model name and consumed in order; the last
    scripted response repeats once the script runs out. Keys listed in
    unhealthy_keys always get their fixed response, whatever the model.
    """

    def __init__(self):
        self.scripts: dict[str, list[tuple[int, Any]]] = {}
        self.requests: list[tuple[str, str]] = []
        self._served: dict[str, int] = defaultdict(int)
        self.unhealthy_keys: dict[str, tuple[int, Any]] = {}

    def script(self, model: str, *responses: tuple[int, Any]) -> None:
        self.scripts[model] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            return httpx.Response(200, json={"status": "ok"})

        model = json.loads(request.content)["model"]
        api_key = request.headers["x-api-key"]
        self.requests.append((model, api_key))

        if api_key in self.unhealthy_keys:
            status, body = self.unhealthy_keys[api_key]
            return self._respond(status, body)

        script = self.scripts[model]
        index = min(self._served[model], len(script) - 1)
        self._served[model] += 1
        status, body = script[index]
        return self._respond(status, body)

    @staticmethod
    def _respond(status: int, body: Any) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def keys_for(self, model: str) -> list[str]:
        return [key for m, key in self.requests if m == model]


@pytest.fixture
def mock_proxy() -> MockProxy:
    return MockProxy()


@pytest_asyncio.fixture
async def proxy_client(mock_proxy: MockProxy):
    """MessagesClient wired to the mock proxy."""
    client = MessagesClient(
        base_url="http://127.0.0.1:8045",
        timeout=5,
        transport=httpx.MockTransport(mock_proxy.handler),
    )
    yield client
    await client.close()
