"""
Local ASGI adapter.

Serves a rule table through FastAPI so the proxy can be exercised without
the hosting platform: every request is converted into a platform event,
handed to the proxy, and the envelope is returned as the HTTP response.
"""

import base64
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx
from fastapi import FastAPI, Request, Response

from route_proxy.config import get_logger
from route_proxy.gateway.orchestrator import proxy
from route_proxy.models.route import RouteRule

logger = get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


async def request_to_event(request: Request) -> Dict[str, Any]:
    """
    Convert a Starlette request into a platform event.

    Bodies that are not UTF-8 are passed base64-encoded.
    """
    raw_body = await request.body()
    body: Optional[str] = None
    is_base64_encoded = False
    if raw_body:
        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            body = base64.b64encode(raw_body).decode("ascii")
            is_base64_encoded = True

    return {
        "resource": request.url.path,
        "path": request.url.path,
        "httpMethod": request.method,
        "queryStringParameters": dict(request.query_params) or None,
        "headers": dict(request.headers),
        "body": body,
        "isBase64Encoded": is_base64_encoded,
        "requestContext": {
            "stage": "local",
            "sourceIp": request.client.host if request.client else None,
        },
    }


def create_app(
    route_rules: Iterable[Union[RouteRule, Mapping[str, Any]]],
    config: Optional[Mapping[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None
) -> FastAPI:
    """
    Create a FastAPI application serving the rule table.

    Args:
        route_rules: Rules in precedence order
        config: Shared defaults merged into every forwarded request
        client: HTTP capability; built from settings per call when omitted

    Returns:
        FastAPI application with a single catch-all route
    """
    handle = proxy(route_rules, config, client)

    app = FastAPI(
        title="Route Proxy",
        description="Local runner for the declarative route proxy",
        docs_url=None,
        redoc_url=None
    )

    @app.api_route("/{full_path:path}", methods=PROXY_METHODS)
    async def proxy_endpoint(request: Request, full_path: str) -> Response:
        event = await request_to_event(request)
        envelope = await handle(event)
        return Response(
            content=envelope.body,
            status_code=envelope.status_code,
            media_type="application/json"
        )

    logger.info("Local proxy app created")
    return app
