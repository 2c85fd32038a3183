"""Integration tests for the local FastAPI runner."""

import json

import pytest
from fastapi.testclient import TestClient

from route_proxy.server import create_app


@pytest.fixture
def route_rules():
    return [
        {
            "incomingRequest": {"path": "/orders/:id", "method": "GET"},
            "upstreamRequest": {
                "url": "/v1/orders/:id",
                "pathParams": {"id": lambda event: event.resource.rsplit("/", 1)[-1]},
                "headers": {"x-source": "local"},
            },
        },
        {
            "incomingRequest": {"path": "/orders", "method": "POST"},
            "upstreamRequest": {"url": "/v1/orders", "data": {"channel": "web"}},
        },
    ]


@pytest.fixture
def client(route_rules, upstream):
    app = create_app(route_rules, {}, client=upstream.client)
    return TestClient(app)


class TestLocalServer:
    """Tests for serving a rule table over HTTP."""

    def test_get_is_proxied_with_path_params(self, client, upstream):
        upstream.reply(200, {"id": "42"})

        response = client.get("/orders/42", params={"expand": "items"})

        assert response.status_code == 200
        assert response.json() == {"id": "42"}
        request = upstream.requests[0]
        assert request.url.path == "/v1/orders/42"
        assert dict(request.url.params) == {"expand": "items"}
        assert request.headers["x-source"] == "local"

    def test_post_body_is_merged(self, client, upstream):
        upstream.reply(201, {"created": True})

        response = client.post("/orders", json={"sku": "A-1"})

        assert response.status_code == 201
        assert json.loads(upstream.requests[0].content) == {"sku": "A-1", "channel": "web"}

    def test_unmatched_request_is_405(self, client, upstream):
        response = client.delete("/orders/42")

        assert response.status_code == 405
        assert response.json() == {"message": "Incoming request is not proxied"}
        assert upstream.requests == []

    def test_network_error_is_empty_500(self, client, upstream):
        upstream.network_error()

        response = client.get("/orders/1")

        assert response.status_code == 500
        assert response.content == b""
