"""
Gateway proxy package.

This package contains the HTTP client that forwards requests to the
upstream service.
"""

from .http_client import UpstreamHTTPClient, forward

__all__ = [
    "UpstreamHTTPClient",
    "forward",
]
