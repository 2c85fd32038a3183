"""Test fixtures for route proxy tests."""

import asyncio
import uuid
from typing import Any, Callable, List, Optional

import httpx
import pytest

from route_proxy.models.request import IncomingRequest

UPSTREAM_BASE_URL = "http://upstream.test"


class MockUpstream:
    """
    Scripted upstream service behind an httpx MockTransport.

    Every request is recorded; the reply is set with ``reply`` or
    ``network_error`` before the call.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(404)
        self.client = httpx.AsyncClient(
            transport=httpx.MockTransport(self._handle),
            base_url=UPSTREAM_BASE_URL
        )

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def reply(self, status_code: int, json_data: Any = None, headers: Optional[dict] = None):
        def responder(request: httpx.Request) -> httpx.Response:
            if json_data is None:
                return httpx.Response(status_code, headers=headers)
            return httpx.Response(status_code, json=json_data, headers=headers)
        self._responder = responder

    def reply_text(self, status_code: int, text: str):
        self._responder = lambda request: httpx.Response(status_code, text=text)

    def network_error(self):
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)
        self._responder = responder

    def history(self, method: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.method == method.upper()]

    async def aclose(self):
        await self.client.aclose()


@pytest.fixture
def upstream():
    """Provide a scripted upstream and its client."""
    mock_upstream = MockUpstream()
    yield mock_upstream
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(mock_upstream.aclose())
    finally:
        loop.close()


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def claims_event_data(user_id):
    """Raw event carrying authorizer claims."""
    return {
        "requestContext": {
            "authorizer": {
                "claims": {
                    "sub": user_id
                }
            }
        }
    }


@pytest.fixture
def claims_event(claims_event_data) -> IncomingRequest:
    return IncomingRequest.from_event(claims_event_data)


def claims_sub(event: IncomingRequest) -> Any:
    """Resolver returning the authorizer's subject claim."""
    return event.request_context["authorizer"]["claims"]["sub"]
