"""
Data models for the route proxy.

Per-invocation request/response values live in ``request``; the immutable
routing configuration lives in ``route``.
"""

from .request import IncomingRequest, HttpResponse, ResponseEnvelope, RequestConfig
from .route import RouteRule, IncomingRequestMatch, UpstreamRequestSpec

__all__ = [
    "IncomingRequest",
    "HttpResponse",
    "ResponseEnvelope",
    "RequestConfig",
    "RouteRule",
    "IncomingRequestMatch",
    "UpstreamRequestSpec",
]
