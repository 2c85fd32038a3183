"""
Request and response models for the route proxy.

This module defines the per-invocation values: the inbound event, the
assembled outbound request, the upstream response and the envelope handed
back to the hosting platform.
"""

from typing import Dict, Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from route_proxy.utils.helpers import decode_json_body


class IncomingRequest(BaseModel):
    """
    Inbound request event as delivered by the hosting platform.

    Fields are populated from API Gateway proxy event names
    (``httpMethod``, ``queryStringParameters``...) or from their snake_case
    equivalents. The model is frozen; resolvers receive it as their only
    source of request data.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    resource: str = Field(default="", description="Matched resource path")
    path: Optional[str] = Field(default=None, description="Raw request path")
    http_method: Optional[str] = Field(default=None, alias="httpMethod", description="Incoming HTTP method")
    query_string_parameters: Optional[Dict[str, Any]] = Field(
        default=None, alias="queryStringParameters", description="Query string mapping"
    )
    headers: Optional[Dict[str, Any]] = Field(default=None, description="Header mapping")
    path_parameters: Optional[Dict[str, Any]] = Field(
        default=None, alias="pathParameters", description="Path parameters extracted by the platform"
    )
    body: Optional[str] = Field(default=None, description="JSON encoded payload")
    is_base64_encoded: bool = Field(default=False, alias="isBase64Encoded")
    request_context: Dict[str, Any] = Field(
        default_factory=dict, alias="requestContext", description="Nested request context (authorizer claims...)"
    )

    @field_validator("request_context", mode="before")
    @classmethod
    def _none_context(cls, value):
        return {} if value is None else value

    @field_validator("is_base64_encoded", mode="before")
    @classmethod
    def _none_flag(cls, value):
        return False if value is None else value

    @classmethod
    def from_event(cls, event: Union["IncomingRequest", Mapping[str, Any]]) -> "IncomingRequest":
        """Build a request from a raw platform event."""
        if isinstance(event, cls):
            return event
        return cls.model_validate(dict(event))

    def json_body(self) -> Any:
        """
        Decode the body as JSON, base64-decoding it first when flagged.

        Returns None for an absent or empty body.

        Raises:
            ValueError: the body is not valid JSON
        """
        return decode_json_body(self.body, self.is_base64_encoded)

    def lookup(self, dotted_path: str, default: Any = None) -> Any:
        """
        Walk a dotted path through the event, using platform field names.

        Any missing step yields ``default``:

            request.lookup("requestContext.authorizer.claims.sub")
        """
        current: Any = self.model_dump(by_alias=True)
        for key in dotted_path.split("."):
            if isinstance(current, Mapping) and key in current:
                current = current[key]
            else:
                return default
        return current


class RequestConfig(BaseModel):
    """Outbound request assembled for the upstream call."""
    model_config = ConfigDict(extra="allow")

    url: str = Field(..., description="Upstream URL, absolute or relative to the client base URL")
    method: str = Field(default="GET", description="Outbound HTTP method")
    params: Optional[Dict[str, Any]] = Field(default=None, description="Query parameters")
    headers: Optional[Dict[str, Any]] = Field(default=None, description="Outbound headers")
    data: Any = Field(default=None, description="Body payload")
    timeout: Optional[Union[float, Dict[str, float]]] = Field(default=None, description="Timeout override in seconds")

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()


class HttpResponse(BaseModel):
    """Result of the outbound call, as seen by response transformers."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: int = Field(..., alias="statusCode", description="Upstream status code")
    data: Any = Field(default=None, description="Decoded upstream payload")
    headers: Dict[str, str] = Field(default_factory=dict, description="Upstream response headers")

    def replace(self, **changes: Any) -> "HttpResponse":
        """Return a copy with the given fields changed."""
        return self.model_copy(update=changes)


class ResponseEnvelope(BaseModel):
    """Value returned to the hosting platform."""
    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="Status code returned to the caller")
    body: str = Field(default="", description="JSON encoded body")

    def to_event(self) -> Dict[str, Any]:
        return {"statusCode": self.status_code, "body": self.body}
