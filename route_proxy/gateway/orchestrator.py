"""
Proxy orchestration.

Sequences matching, field resolution, forwarding and response
transformation for one invocation, and maps every failure onto a fixed
response envelope.
"""

import json
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from route_proxy.config import StructuredLogger
from route_proxy.gateway.errors import InvalidRouteRuleError
from route_proxy.gateway.fields import build_data, build_headers, build_params
from route_proxy.gateway.proxy.http_client import UpstreamHTTPClient
from route_proxy.gateway.routing import find_matching_routing_rule, replace_path_parameters
from route_proxy.models.request import HttpResponse, IncomingRequest, RequestConfig, ResponseEnvelope
from route_proxy.models.route import RouteRule, load_route_rules
from route_proxy.utils.helpers import is_valid_upstream_url, normalize_method, truncate_string

logger = StructuredLogger(__name__)

NOT_PROXIED_MESSAGE = "Incoming request is not proxied"

Event = Union[IncomingRequest, Mapping[str, Any]]
ProxyHandler = Callable[[Event], Awaitable[ResponseEnvelope]]


def encode_body(data: Any) -> str:
    """Compact JSON, non-ASCII kept as is."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def not_proxied_response() -> ResponseEnvelope:
    return ResponseEnvelope(
        status_code=405,
        body=encode_body({"message": NOT_PROXIED_MESSAGE})
    )


def internal_error_response() -> ResponseEnvelope:
    return ResponseEnvelope(status_code=500, body="")


def merge_extra_config(
    extra_config: Optional[Mapping[str, Any]],
    built: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Lay the rule-built request over the shared extra config.

    ``headers`` and ``params`` mappings are merged key by key with the
    rule-built values winning; any other built field replaces the extra
    config's value when it is set.
    """
    merged: Dict[str, Any] = dict(extra_config or {})
    for key, value in built.items():
        base_value = merged.get(key)
        if key in ("headers", "params") and isinstance(base_value, Mapping) and isinstance(value, Mapping):
            merged[key] = {**base_value, **value}
        elif value is not None or key not in merged:
            merged[key] = value
    return merged


async def build_request_config(
    event: IncomingRequest,
    route_rule: RouteRule,
    extra_config: Optional[Mapping[str, Any]] = None
) -> RequestConfig:
    """
    Assemble the outbound request for a matched rule.

    Raises:
        InvalidRouteRuleError: the rule has no usable upstream URL
        ProxyError: a resolver or field spec failed
    """
    upstream = route_rule.upstream_request
    if not is_valid_upstream_url(upstream.url):
        raise InvalidRouteRuleError(f"Invalid upstream url: {upstream.url!r}")

    url = upstream.url
    if upstream.path_params is not None:
        url = await replace_path_parameters(event, url, upstream.path_params)

    built = {
        "url": url,
        "method": normalize_method(upstream.method or event.http_method),
        "params": await build_params(event, route_rule),
        "headers": await build_headers(event, route_rule),
        "data": await build_data(event, route_rule),
    }

    return RequestConfig(**merge_extra_config(extra_config, built))


async def handle_proxied_request(
    event: Event,
    route_rule: Union[RouteRule, Mapping[str, Any]],
    extra_config: Optional[Mapping[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None
) -> ResponseEnvelope:
    """
    Forward a request for an already matched rule.

    Args:
        event: Incoming request (or raw platform event)
        route_rule: Matched rule
        extra_config: Defaults merged under the built request (headers,
            params, timeout...)
        client: HTTP capability; built from settings when omitted

    Returns:
        Envelope with the (possibly transformed) upstream status and JSON
        body, or a bare 500 when anything failed
    """
    try:
        route_rule = RouteRule.from_dict(route_rule)
        event = IncomingRequest.from_event(event)
        request_config = await build_request_config(event, route_rule, extra_config)
        response = await UpstreamHTTPClient(client=client).forward(request_config)

        if route_rule.response_transformer is not None:
            response = route_rule.response_transformer(response)
            if not isinstance(response, HttpResponse):
                response = HttpResponse.model_validate(response)

        return ResponseEnvelope(
            status_code=response.status_code,
            body=encode_body(response.data)
        )
    except Exception as e:
        upstream = getattr(route_rule, "upstream_request", None)
        logger.error(
            "Proxied request failed",
            rule_name=getattr(route_rule, "name", None),
            upstream_url=getattr(upstream, "url", None),
            error_type=type(e).__name__,
            error=truncate_string(str(e), 200)
        )
        return internal_error_response()


def proxy(
    route_rules: Iterable[Union[RouteRule, Mapping[str, Any]]],
    config: Optional[Mapping[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None
) -> ProxyHandler:
    """
    Build the per-invocation proxy handler for a rule table.

    Args:
        route_rules: Rules in precedence order; mappings are converted once
        config: Shared defaults merged into every forwarded request
        client: HTTP capability shared by every invocation

    Returns:
        Async callable taking an event and returning a ResponseEnvelope
    """
    rules = load_route_rules(list(route_rules))

    async def handle(event: Event) -> ResponseEnvelope:
        start_time = time.time()
        try:
            event = IncomingRequest.from_event(event)
        except ValidationError as e:
            logger.error(
                "Malformed incoming event",
                error_type=type(e).__name__,
                error=truncate_string(str(e), 200)
            )
            return internal_error_response()

        rule = find_matching_routing_rule(event, rules)
        if rule is None:
            envelope = not_proxied_response()
        else:
            envelope = await handle_proxied_request(event, rule, config, client)

        logger.log_proxy_request(
            method=event.http_method or "",
            resource=event.resource,
            status_code=envelope.status_code,
            response_time=(time.time() - start_time) * 1000,
            rule_name=rule.name if rule is not None else None
        )
        return envelope

    return handle
