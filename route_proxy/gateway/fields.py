"""
Field builder for the outbound request.

One merge routine combines a field of the incoming request (query string,
headers or decoded body) with the overrides a rule declares for it.
Mapping specs merge over a mapping base, spec keys winning; sequence specs
are appended to a sequence base. Entries are resolved in declared order.
"""

import copy
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from route_proxy.config import get_logger
from route_proxy.gateway.errors import FieldSpecError, InvalidRequestBodyError, ResolverError
from route_proxy.gateway.resolvers import resolve
from route_proxy.models.request import IncomingRequest
from route_proxy.models.route import FieldSpec, RouteRule

logger = get_logger(__name__)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


async def merge_field(
    event: IncomingRequest,
    base: Any,
    spec: Optional[FieldSpec],
    field_name: str
) -> Any:
    """
    Merge a rule's field spec into a base value.

    Args:
        event: Incoming request given to each resolver
        base: Value taken from the incoming request (mapping, sequence,
            scalar or None)
        spec: Mapping or sequence of resolvers, or None
        field_name: Name used in errors and logs (params, headers, data)

    Returns:
        ``base`` unchanged when there is no spec, else the merged value.
        An absent base counts as ``{}`` for mapping specs and ``[]`` for
        sequence specs.

    Raises:
        FieldSpecError: spec and base shapes are incompatible
        ResolverError: a resolver failed; nothing partial is returned
    """
    if spec is None:
        return base

    if isinstance(spec, Mapping):
        if base is None:
            base = {}
        elif not isinstance(base, Mapping):
            raise FieldSpecError(
                f"Cannot merge mapping spec into {type(base).__name__} {field_name}"
            )

        resolved = {}
        for key, value in spec.items():
            resolved[key] = await _resolve_entry(event, value, field_name, key)

        merged = copy.deepcopy(dict(base))
        merged.update(resolved)
        return merged

    if _is_sequence(spec):
        if base is None:
            base = []
        elif not _is_sequence(base):
            raise FieldSpecError(
                f"Cannot append sequence spec to {type(base).__name__} {field_name}"
            )

        resolved_items = []
        for index, value in enumerate(spec):
            resolved_items.append(await _resolve_entry(event, value, field_name, index))

        return copy.deepcopy(list(base)) + resolved_items

    raise FieldSpecError(f"Unsupported {field_name} spec type: {type(spec).__name__}")


async def _resolve_entry(event: IncomingRequest, value: Any, field_name: str, key: Any) -> Any:
    try:
        return await resolve(value, event)
    except Exception as e:
        logger.debug(
            "Resolver failed",
            extra={"field": field_name, "key": str(key), "error_type": type(e).__name__}
        )
        raise ResolverError(f"Resolver for {field_name}[{key!r}] failed", field=field_name) from e


async def build_params(event: IncomingRequest, rule: RouteRule) -> Any:
    """Query parameters: incoming query string merged with the rule's params."""
    return await merge_field(
        event,
        event.query_string_parameters,
        rule.upstream_request.params,
        "params"
    )


async def build_headers(event: IncomingRequest, rule: RouteRule) -> Any:
    """Headers: incoming headers merged with the rule's headers."""
    return await merge_field(
        event,
        event.headers,
        rule.upstream_request.headers,
        "headers"
    )


async def build_data(event: IncomingRequest, rule: RouteRule) -> Any:
    """Body: decoded incoming body merged with, or extended by, the rule's data."""
    try:
        base = event.json_body()
    except ValueError as e:
        raise InvalidRequestBodyError("Incoming body is not valid JSON") from e

    return await merge_field(event, base, rule.upstream_request.data, "data")
