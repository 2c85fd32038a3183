"""
HTTP client for the upstream service.

This module sends the assembled outbound request through an httpx
AsyncClient and normalizes the outcome. Any response, whatever its status,
is a result; only a failure to obtain a response is an error.
"""

import time
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from route_proxy.config import get_config, StructuredLogger, TimeoutConfig
from route_proxy.gateway.errors import NetworkError
from route_proxy.models.request import HttpResponse, RequestConfig
from route_proxy.utils.helpers import drop_none_values, strip_hop_by_hop_headers

logger = StructuredLogger(__name__)


class UpstreamHTTPClient:
    """Forwards outbound requests to the upstream service."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        timeout: Optional[TimeoutConfig] = None
    ):
        """
        Initialize the upstream client.

        Args:
            client: HTTP capability to send through. When omitted a client
                is created per call and closed afterwards.
            base_url: Base URL for relative upstream URLs (owned clients only)
            timeout: Default timeouts (owned clients only)
        """
        self._client = client
        self._base_url = base_url
        self._timeout = timeout

    async def forward(self, config: Union[RequestConfig, Mapping[str, Any]]) -> HttpResponse:
        """
        Send the request and return the upstream response.

        Args:
            config: Outbound request configuration

        Returns:
            HttpResponse with the upstream status code, decoded payload and
            headers, including for 4xx/5xx statuses

        Raises:
            NetworkError: no response was obtained
        """
        if not isinstance(config, RequestConfig):
            config = RequestConfig(**config)

        if self._client is not None:
            return await self._send(self._client, config)

        async with self._create_client() as client:
            return await self._send(client, config)

    def _create_client(self) -> httpx.AsyncClient:
        settings = get_config()
        base_url = self._base_url if self._base_url is not None else settings.upstream_base_url
        timeout = self._timeout or settings.timeout
        return httpx.AsyncClient(
            base_url=base_url or "",
            timeout=_build_timeout(timeout.model_dump())
        )

    async def _send(self, client: httpx.AsyncClient, config: RequestConfig) -> HttpResponse:
        request_kwargs: Dict[str, Any] = {
            "method": config.method,
            "url": config.url,
            "params": drop_none_values(config.params),
            "headers": strip_hop_by_hop_headers(config.headers),
        }
        request_kwargs.update(_body_kwargs(config.data))
        if config.timeout is not None:
            request_kwargs["timeout"] = _build_timeout(config.timeout)

        start_time = time.time()
        try:
            upstream_response = await client.request(**request_kwargs)
        except httpx.RequestError as e:
            logger.log_upstream_call(
                url=config.url,
                method=config.method,
                response_time=(time.time() - start_time) * 1000,
                error=str(e) or type(e).__name__
            )
            raise NetworkError() from e

        logger.log_upstream_call(
            url=config.url,
            method=config.method,
            response_time=(time.time() - start_time) * 1000,
            status_code=upstream_response.status_code
        )

        return HttpResponse(
            status_code=upstream_response.status_code,
            data=_decode_payload(upstream_response),
            headers=dict(upstream_response.headers)
        )


def _build_timeout(timeout: Union[float, Mapping[str, float]]) -> httpx.Timeout:
    if isinstance(timeout, Mapping):
        return httpx.Timeout(**TimeoutConfig(**timeout).model_dump())
    return httpx.Timeout(timeout)


def _body_kwargs(data: Any) -> Dict[str, Any]:
    """Pick the httpx argument for a body payload."""
    if data is None:
        return {}
    if isinstance(data, (str, bytes, bytearray)):
        return {"content": bytes(data) if isinstance(data, bytearray) else data}
    return {"json": data}


def _decode_payload(response: httpx.Response) -> Any:
    """JSON when it parses, text otherwise, an empty string for an empty body."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


async def forward(
    config: Union[RequestConfig, Mapping[str, Any]],
    client: Optional[httpx.AsyncClient] = None
) -> HttpResponse:
    """Forward a request through ``client``, or a client built from settings."""
    return await UpstreamHTTPClient(client=client).forward(config)
