"""
Routing rule models.

Rules are built once at startup and shared read-only by every invocation.
They hold callables (resolvers, response transformers), so they are plain
frozen dataclasses rather than pydantic models.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from .request import HttpResponse

# Mapping of key -> resolver, or sequence of resolvers (bodies only)
FieldSpec = Union[Mapping[str, Any], Sequence[Any]]

ResponseTransformer = Callable[[HttpResponse], HttpResponse]


@dataclass(frozen=True)
class IncomingRequestMatch:
    """Which incoming requests a rule applies to."""
    path: str
    method: Optional[str] = None    # None matches any method


@dataclass(frozen=True)
class UpstreamRequestSpec:
    """Template for the outbound request."""
    url: Optional[str] = None
    method: Optional[str] = None    # None reuses the incoming method
    params: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, Any]] = None
    data: Optional[FieldSpec] = None
    path_params: Optional[Mapping[str, Any]] = None    # resolvers for :placeholders in url


@dataclass(frozen=True)
class RouteRule:
    """Complete routing rule: matcher, upstream template and response transform."""
    upstream_request: UpstreamRequestSpec = field(default_factory=UpstreamRequestSpec)
    incoming_request: Optional[IncomingRequestMatch] = None
    response_transformer: Optional[ResponseTransformer] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteRule":
        """
        Build a rule from a plain mapping.

        Accepts the camelCase layout used by route tables
        (``incomingRequest``, ``upstreamRequest``, ``responseTransformer``)
        as well as snake_case keys.

        Args:
            data: Rule definition

        Returns:
            RouteRule instance
        """
        if isinstance(data, cls):
            return data

        incoming = _pick(data, "incomingRequest", "incoming_request")
        upstream = _pick(data, "upstreamRequest", "upstream_request") or {}

        incoming_match = None
        if incoming is not None:
            incoming_match = IncomingRequestMatch(
                path=incoming["path"],
                method=incoming.get("method")
            )

        upstream_spec = UpstreamRequestSpec(
            url=upstream.get("url"),
            method=upstream.get("method"),
            params=upstream.get("params"),
            headers=upstream.get("headers"),
            data=upstream.get("data"),
            path_params=_pick(upstream, "pathParams", "path_params")
        )

        return cls(
            upstream_request=upstream_spec,
            incoming_request=incoming_match,
            response_transformer=_pick(data, "responseTransformer", "response_transformer"),
            name=data.get("name")
        )


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def load_route_rules(rules: Sequence[Union[RouteRule, Mapping[str, Any]]]) -> tuple:
    """Normalize a route table into an immutable tuple of RouteRule."""
    return tuple(RouteRule.from_dict(rule) for rule in rules)


__all__ = [
    "FieldSpec",
    "ResponseTransformer",
    "IncomingRequestMatch",
    "UpstreamRequestSpec",
    "RouteRule",
    "load_route_rules",
]
