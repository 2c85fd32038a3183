"""
Resolvers: values that are either literal or computed from the request.

Every field spec entry is coerced into a Resolver before evaluation.
Callables receive the IncomingRequest and may return a plain value or an
awaitable.
"""

import inspect
from typing import Any, Callable

from route_proxy.models.request import IncomingRequest


class Resolver:
    """A value that can be evaluated against an incoming request."""

    async def evaluate(self, request: IncomingRequest) -> Any:
        raise NotImplementedError


class StaticResolver(Resolver):
    """Resolver wrapping a literal value."""

    def __init__(self, value: Any):
        self.value = value

    async def evaluate(self, request: IncomingRequest) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"StaticResolver({self.value!r})"


class CallableResolver(Resolver):
    """Resolver wrapping a caller-supplied function of the request."""

    def __init__(self, func: Callable[[IncomingRequest], Any]):
        self.func = func

    async def evaluate(self, request: IncomingRequest) -> Any:
        result = self.func(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"CallableResolver({getattr(self.func, '__name__', self.func)!r})"


def as_resolver(value: Any) -> Resolver:
    """Coerce a field spec entry into a Resolver."""
    if isinstance(value, Resolver):
        return value
    if callable(value):
        return CallableResolver(value)
    return StaticResolver(value)


def from_event(dotted_path: str, default: Any = None) -> Resolver:
    """
    Resolver reading a dotted path from the event.

        from_event("requestContext.authorizer.claims.sub")
    """
    def lookup(request: IncomingRequest) -> Any:
        return request.lookup(dotted_path, default)

    lookup.__name__ = f"from_event[{dotted_path}]"
    return CallableResolver(lookup)


async def resolve(value: Any, request: IncomingRequest) -> Any:
    """Evaluate a single field spec entry against the request."""
    return await as_resolver(value).evaluate(request)
