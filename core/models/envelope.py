# =============================================================================
# core/models/envelope.py - Response Envelope Schemas
# =============================================================================
# Every proxy response is wrapped in one of two envelopes:
# - ProxySuccessEnvelope: {"success": true, "data"?, "message"?}
# - ProxyErrorEnvelope:   {"success": false, "error": {...}}
#
# Upstream bodies are mirrored verbatim, so these models describe the shape
# for documentation and client-side parsing; the proxy itself never
# re-serializes an upstream body through them.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """
    Fixed set of error names the proxy synthesizes.

    Upstream error envelopes are passed through untouched and may carry
    names outside this set.
    """
    CONFIGURATION_ERROR = "ConfigurationError"
    SSL_ERROR = "SSLError"
    TIMEOUT_ERROR = "TimeoutError"
    NETWORK_ERROR = "NetworkError"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SERVER_ERROR = "ServerError"
    UNKNOWN_ERROR = "UnknownError"


class ErrorBody(BaseModel):
    """The "error" member of an error envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Error kind, e.g. TimeoutError")
    message: str = Field(..., description="Human-readable message")
    status_code: int = Field(
        ...,
        alias="statusCode",
        ge=100,
        le=599,
        description="HTTP status of the response carrying this envelope"
    )
    details: Any = Field(default=None, description="Unstructured diagnostics")


class ProxyErrorEnvelope(BaseModel):
    """Error envelope returned by the proxy or forwarded from upstream."""

    success: bool = False
    error: ErrorBody


class ProxySuccessEnvelope(BaseModel):
    """
    Success envelope.

    Mirrored from the upstream JSON body, or synthesized when the upstream
    returns a 2xx body that is not JSON.
    """

    model_config = ConfigDict(extra="allow")

    success: bool = True
    data: Any = None
    message: str | None = None


class ProxyResult(BaseModel):
    """
    Outcome of one proxy invocation: the HTTP status to answer with and the
    JSON body to send. Exactly one of these is produced per call.
    """

    status_code: int = Field(..., ge=100, le=599)
    body: Any

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
