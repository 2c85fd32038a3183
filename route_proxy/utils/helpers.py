"""
Utility helper functions for the route proxy.

This module provides URL validation, header hygiene and body decoding used
by the orchestrator and the upstream client.
"""

import base64
import binascii
import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

# Headers that must not be carried from the inbound request to the upstream
HOP_BY_HOP_HEADERS = frozenset({
    'connection', 'keep-alive', 'proxy-authenticate',
    'proxy-authorization', 'te', 'trailers', 'transfer-encoding', 'upgrade',
    'host', 'content-length'
})


def is_valid_url(url: str) -> bool:
    """
    Check if a URL is an absolute http(s) URL.

    Args:
        url: URL to validate

    Returns:
        True if URL has an http/https scheme and a host
    """
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return result.scheme in ('http', 'https') and bool(result.netloc)


def is_valid_upstream_url(url: Any) -> bool:
    """
    Check if a rule's upstream URL is usable.

    Accepts absolute http(s) URLs, and absolute paths (``/orders``) that are
    resolved against the HTTP client's base URL.

    Examples:
        is_valid_upstream_url("https://api.example.com/orders") -> True
        is_valid_upstream_url("/orders") -> True
        is_valid_upstream_url("orders") -> False
        is_valid_upstream_url(None) -> False
    """
    if not isinstance(url, str) or not url.strip():
        return False
    if url.startswith('/') and not url.startswith('//'):
        return True
    return is_valid_url(url)


def strip_hop_by_hop_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Prepare headers for the upstream request.

    Drops hop-by-hop headers and None values, and stringifies the rest.

    Args:
        headers: Merged header mapping

    Returns:
        Dictionary of headers to send upstream
    """
    if not headers:
        return {}
    return {
        str(key): str(value)
        for key, value in headers.items()
        if value is not None and str(key).lower() not in HOP_BY_HOP_HEADERS
    }


def drop_none_values(values: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Copy a mapping without its None values; None stays None."""
    if values is None:
        return None
    return {key: value for key, value in values.items() if value is not None}


def decode_json_body(body: Optional[str], is_base64_encoded: bool = False) -> Any:
    """
    Decode the inbound body.

    Args:
        body: Raw body string from the event
        is_base64_encoded: Whether the platform base64-encoded the body

    Returns:
        The decoded JSON value, or None for an absent/empty body

    Raises:
        ValueError: body is not valid JSON (or not valid base64)
    """
    if body is None or body == "":
        return None
    if is_base64_encoded:
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"Invalid base64 body: {e}") from e
    return json.loads(body)


def normalize_method(method: Optional[str], default: str = "GET") -> str:
    """Upper-case an HTTP method, falling back to ``default``."""
    if not method:
        return default
    return method.upper()


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if not text or len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix
