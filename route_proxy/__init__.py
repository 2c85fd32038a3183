"""
Declarative request routing and transformation for serverless handlers.

A rule table maps incoming requests onto one upstream request each:

    handle = proxy([
        {
            "incomingRequest": {"path": "/orders/:orderId", "method": "GET"},
            "upstreamRequest": {
                "url": "https://orders.internal/orders/:orderId",
                "pathParams": {"orderId": from_event("pathParameters.orderId")},
                "headers": {"x-user-id": from_event("requestContext.authorizer.claims.sub")},
            },
        },
    ])
    envelope = await handle(event)
"""

from route_proxy.gateway.errors import (
    ProxyError,
    InvalidRouteRuleError,
    ResolverError,
    MissingPathParameterError,
    FieldSpecError,
    InvalidRequestBodyError,
    NetworkError,
)
from route_proxy.gateway.fields import build_data, build_headers, build_params, merge_field
from route_proxy.gateway.orchestrator import handle_proxied_request, proxy
from route_proxy.gateway.proxy import UpstreamHTTPClient, forward
from route_proxy.gateway.resolvers import (
    Resolver,
    StaticResolver,
    CallableResolver,
    as_resolver,
    from_event,
)
from route_proxy.gateway.routing import find_matching_routing_rule, replace_path_parameters
from route_proxy.models import (
    IncomingRequest,
    HttpResponse,
    ResponseEnvelope,
    RequestConfig,
    RouteRule,
    IncomingRequestMatch,
    UpstreamRequestSpec,
)

__version__ = "0.1.0"

__all__ = [
    "ProxyError",
    "InvalidRouteRuleError",
    "ResolverError",
    "MissingPathParameterError",
    "FieldSpecError",
    "InvalidRequestBodyError",
    "NetworkError",
    "build_data",
    "build_headers",
    "build_params",
    "merge_field",
    "handle_proxied_request",
    "proxy",
    "UpstreamHTTPClient",
    "forward",
    "Resolver",
    "StaticResolver",
    "CallableResolver",
    "as_resolver",
    "from_event",
    "find_matching_routing_rule",
    "replace_path_parameters",
    "IncomingRequest",
    "HttpResponse",
    "ResponseEnvelope",
    "RequestConfig",
    "RouteRule",
    "IncomingRequestMatch",
    "UpstreamRequestSpec",
]
