"""
Serverless entry point.

Wraps the async proxy handler in the synchronous ``(event, context)``
signature expected by the hosting platform.
"""

import asyncio
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

import httpx

from route_proxy.config import ProxySettings, get_config, get_logger, setup_logging
from route_proxy.gateway.orchestrator import proxy
from route_proxy.models.route import RouteRule

logger = get_logger(__name__)

LambdaHandler = Callable[[Mapping[str, Any], Any], Dict[str, Any]]


def make_lambda_handler(
    route_rules: Iterable[Union[RouteRule, Mapping[str, Any]]],
    config: Optional[Mapping[str, Any]] = None,
    settings: Optional[ProxySettings] = None,
    configure_logging: bool = True,
    client: Optional[httpx.AsyncClient] = None
) -> LambdaHandler:
    """
    Build a platform handler for a rule table.

    Args:
        route_rules: Rules in precedence order
        config: Shared defaults merged into every forwarded request.
            Defaults to ``settings.extra_config()``.
        settings: Proxy settings; loaded with ``get_config()`` when omitted
        configure_logging: Apply the settings' logging configuration
        client: HTTP capability; built from settings per call when omitted

    Returns:
        ``lambda_handler(event, context)`` returning ``{statusCode, body}``
    """
    settings = settings or get_config()
    if configure_logging:
        setup_logging(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file
        )

    if config is None:
        config = settings.extra_config()

    handle = proxy(route_rules, config, client)
    # One loop per handler: a shared client keeps connections bound to it
    loop = asyncio.new_event_loop()

    def lambda_handler(event: Mapping[str, Any], context: Any) -> Dict[str, Any]:
        envelope = loop.run_until_complete(handle(event))
        return envelope.to_event()

    logger.info(
        "Lambda handler ready",
        extra={"environment": settings.environment}
    )
    return lambda_handler
