"""
Path matching utilities for the route proxy.

This module compiles ``:name`` path templates into anchored regexes and
substitutes resolved values into templates.
"""

import re
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Pattern
from dataclasses import dataclass, field
from urllib.parse import quote

from route_proxy.config import get_logger
from route_proxy.gateway.errors import MissingPathParameterError, ResolverError
from route_proxy.gateway.resolvers import resolve
from route_proxy.models.request import IncomingRequest

logger = get_logger(__name__)

# A placeholder is a whole segment introduced by '/'
PLACEHOLDER_PATTERN = re.compile(r'/:([A-Za-z_][A-Za-z0-9_]*)(?=/|\?|#|$)')


@dataclass
class PathMatch:
    """Result of a path matching operation."""
    matched: bool
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass
class PathPattern:
    """A compiled ``/literal/:name`` path template."""
    pattern: str
    regex: Optional[Pattern] = None
    parameter_names: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Compile the pattern and extract parameter names."""
        self.parameter_names = []
        self.regex = self._compile_pattern()

    def _compile_pattern(self) -> Pattern:
        """
        Compile a path template to a regex.

        Literal segments match exactly; each ``:name`` segment matches any
        single non-empty segment. The whole path must match.
        """
        parts = []
        last_end = 0
        for match in PLACEHOLDER_PATTERN.finditer(self.pattern):
            parts.append(re.escape(self.pattern[last_end:match.start()]))
            name = match.group(1)
            if name in self.parameter_names:
                parts.append(f'/(?P={name})')
            else:
                self.parameter_names.append(name)
                parts.append(f'/(?P<{name}>[^/]+)')
            last_end = match.end()
        parts.append(re.escape(self.pattern[last_end:]))

        return re.compile(f'^{"".join(parts)}$')

    def match(self, path: str) -> PathMatch:
        found = self.regex.match(path or "")
        if not found:
            return PathMatch(matched=False)
        return PathMatch(matched=True, parameters=found.groupdict())


@lru_cache(maxsize=256)
def compile_path_pattern(pattern: str) -> PathPattern:
    """Compile a template once; rule tables are immutable so this is shared."""
    return PathPattern(pattern=pattern)


def placeholder_names(template: str) -> List[str]:
    """Names of the placeholders in ``template``, in order of appearance."""
    return [match.group(1) for match in PLACEHOLDER_PATTERN.finditer(template)]


async def replace_path_parameters(
    event: IncomingRequest,
    template: str,
    param_resolvers: Optional[Mapping[str, Any]]
) -> str:
    """
    Substitute every ``:name`` placeholder of a template.

    Placeholders are resolved left to right. Values are stringified and
    percent-encoded as one path segment; literal text is left untouched.

    Args:
        event: Incoming request given to each resolver
        template: Path or URL template, e.g. ``/person/:userId``
        param_resolvers: Resolver (or literal) per placeholder name

    Returns:
        The concrete path

    Raises:
        MissingPathParameterError: a placeholder has no resolver entry
        ResolverError: a resolver failed
    """
    param_resolvers = param_resolvers or {}
    resolved: Dict[str, str] = {}

    for name in placeholder_names(template):
        if name in resolved:
            continue
        if name not in param_resolvers:
            raise MissingPathParameterError(f"No resolver for path parameter '{name}'", field=name)
        try:
            value = await resolve(param_resolvers[name], event)
        except Exception as e:
            raise ResolverError(f"Resolver for path parameter '{name}' failed", field=name) from e
        resolved[name] = quote(str(value), safe="")

    path = PLACEHOLDER_PATTERN.sub(lambda match: f'/{resolved[match.group(1)]}', template)

    logger.debug(
        "Resolved path template",
        extra={"template": template, "resolved_path": path}
    )
    return path
