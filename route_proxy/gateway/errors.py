"""
Exceptions raised while building or forwarding a proxied request.

Every one of these is caught at the orchestrator boundary and turned into
a bare 500 envelope. A request that matches no rule is not an error and
has no exception here.
"""

from typing import Optional


class ProxyError(Exception):
    """Base class for route proxy failures."""


class InvalidRouteRuleError(ProxyError):
    """The matched rule has no usable upstream URL."""


class ResolverError(ProxyError):
    """A resolver raised, or its awaitable failed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class MissingPathParameterError(ResolverError):
    """A path placeholder has no resolver entry."""


class FieldSpecError(ProxyError):
    """A field spec cannot be merged into the base value it targets."""


class InvalidRequestBodyError(ProxyError):
    """The incoming body is not valid JSON."""


class NetworkError(ProxyError):
    """No response was obtained from the upstream service."""

    def __init__(self, message: str = "Network Error"):
        super().__init__(message)
