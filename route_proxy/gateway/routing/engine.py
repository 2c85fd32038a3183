"""
Routing rules engine for the route proxy.

Selects, from an ordered rule table, the first rule whose path pattern and
optional method match the incoming request.
"""

from typing import Iterable, Optional

from route_proxy.config import get_logger
from route_proxy.models.request import IncomingRequest
from route_proxy.models.route import RouteRule
from .path_matcher import compile_path_pattern

logger = get_logger(__name__)


def rule_matches(rule: RouteRule, event: IncomingRequest) -> bool:
    """
    Check if a rule applies to the event.

    The event's resource must match the rule's path template, and the
    rule's method, when set, must equal the event's method ignoring case.
    """
    incoming = rule.incoming_request
    if incoming is None:
        return False

    if not compile_path_pattern(incoming.path).match(event.resource).matched:
        return False

    if incoming.method:
        method = event.http_method or ""
        return method.upper() == incoming.method.upper()

    return True


def find_matching_routing_rule(
    event: IncomingRequest,
    rules: Iterable[RouteRule]
) -> Optional[RouteRule]:
    """
    Find the first routing rule that matches the event.

    Args:
        event: Incoming request
        rules: Rule table in precedence order

    Returns:
        First matching rule or None if no rule matches
    """
    for index, rule in enumerate(rules):
        if rule_matches(rule, event):
            logger.debug(
                "Routing rule matched",
                extra={
                    "rule_index": index,
                    "rule_name": rule.name,
                    "resource": event.resource,
                    "method": event.http_method
                }
            )
            return rule

    logger.debug(
        "No routing rule matched",
        extra={
            "resource": event.resource,
            "method": event.http_method
        }
    )
    return None
