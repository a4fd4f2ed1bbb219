# =============================================================================
# lib/upstream_client.py - Upstream Credit API Client
# =============================================================================
# Thin async wrapper around httpx for the service of record:
#   POST   <base>/api/v{N}/solicitudes        submit an application
#   GET    <base>/api/v{N}/solicitudes        list applications
#   DELETE <base>/api/v{N}/solicitudes/{id}   delete an application
#   GET    <base>/health                      health check
#
# Every call runs under one deadline (asyncio.wait_for). When it fires, the
# in-flight request is cancelled and a TIMEOUT TransportError is raised; the
# timer is gone on every exit path. The body is always read as text; callers
# decide whether it is JSON. No retries happen here or anywhere else.
#
# Usage:
#   async with UpstreamClient(base_url, api_version=1) as client:
#       response = await client.submit(payload, timeout=180)
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from lib.transport import TransportError, TransportErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    """Raw upstream answer: status, content type and body text."""
    status_code: int
    reason_phrase: str
    content_type: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type.lower()


class UpstreamClient:
    """
    HTTP client for the upstream Credit API.

    One instance per proxy invocation. Pass `transport` to plug in
    httpx.MockTransport in tests.
    """

    def __init__(
        self,
        base_url: str,
        api_version: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self._client = httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> UpstreamClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    @property
    def solicitudes_url(self) -> str:
        return f"{self.base_url}/api/v{self.api_version}/solicitudes"

    @property
    def health_url(self) -> str:
        return f"{self.base_url}/health"

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def submit(
        self,
        payload: Any,
        timeout: float,
        authorization: str | None = None,
    ) -> UpstreamResponse:
        """POST an application payload."""
        return await self.request(
            "POST", self.solicitudes_url, timeout, json=payload, authorization=authorization
        )

    async def list_applications(
        self,
        timeout: float,
        authorization: str | None = None,
    ) -> UpstreamResponse:
        """GET the application listing."""
        return await self.request("GET", self.solicitudes_url, timeout, authorization=authorization)

    async def delete(
        self,
        record_id: str,
        timeout: float,
        authorization: str | None = None,
    ) -> UpstreamResponse:
        """DELETE one application by its upstream identifier."""
        url = f"{self.solicitudes_url}/{record_id}"
        return await self.request("DELETE", url, timeout, authorization=authorization)

    async def health(self, timeout: float) -> UpstreamResponse:
        """GET the upstream health endpoint."""
        return await self.request("GET", self.health_url, timeout)

    async def request(
        self,
        method: str,
        url: str,
        timeout: float,
        json: Any = None,
        authorization: str | None = None,
    ) -> UpstreamResponse:
        """
        Perform one request under a single deadline.

        Raises:
            TransportError: the call failed before an HTTP response was read
        """
        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        try:
            response = await asyncio.wait_for(
                self._send(method, url, headers, json, timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(f"Deadline of {timeout}s reached for {method} {url}, request cancelled")
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                f"No response from upstream within {timeout} seconds",
            ) from exc
        except Exception as exc:
            raise TransportError.from_exception(exc) from exc

        return response

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json: Any,
        timeout: float,
    ) -> UpstreamResponse:
        kwargs: dict[str, Any] = {"headers": headers, "timeout": timeout}
        if json is not None:
            kwargs["json"] = json

        response = await self._client.request(method, url, **kwargs)
        return UpstreamResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            content_type=response.headers.get("content-type", ""),
            text=response.text,
        )
