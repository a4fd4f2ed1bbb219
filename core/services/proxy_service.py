# =============================================================================
# core/services/proxy_service.py - Request Proxy
# =============================================================================
# Forwards browser requests to the upstream Credit API and always answers
# with exactly one envelope (ProxyResult). Nothing here raises to the caller.
#
#   submit()             POST, SUBMIT_TIMEOUT_SECONDS (writes may be slow downstream)
#   list_applications()  GET,  LIST_TIMEOUT_SECONDS
#   delete()             DELETE, LIST_TIMEOUT_SECONDS
#
# A missing upstream URL short-circuits before any client is created.
# =============================================================================

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from app.config import Settings, UpstreamTarget
from app.exceptions import ConfigurationError, ProxyError
from core.models.envelope import ProxyResult
from core.services.error_classifier import (
    classify_failure,
    classify_upstream_error,
    normalize_upstream_success,
)
from lib.upstream_client import UpstreamClient, UpstreamResponse

logger = logging.getLogger(__name__)

# (base_url, api_version) -> client; swapped in tests to inject MockTransport
ClientFactory = Callable[[str, int], UpstreamClient]
UpstreamCall = Callable[[UpstreamClient, float], Awaitable[UpstreamResponse]]


def _default_client_factory(base_url: str, api_version: int) -> UpstreamClient:
    return UpstreamClient(base_url, api_version=api_version)


@dataclass
class HealthCheck:
    """Outcome of pinging the upstream health endpoint."""
    target: UpstreamTarget | None
    url: str | None = None
    response: UpstreamResponse | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.response is not None and self.response.ok


def error_result(error: ProxyError) -> ProxyResult:
    """Wrap a ProxyError as the result of a proxy invocation."""
    return ProxyResult(status_code=error.status_code, body=error.to_envelope())


class ProxyService:
    """
    Request proxy between the browser and the upstream Credit API.

    Example:
        service = ProxyService(settings)
        result = await service.submit(form_payload, authorization="Bearer ...")
        return JSONResponse(result.body, status_code=result.status_code)
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory or _default_client_factory

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def submit(self, payload: Any, authorization: str | None = None) -> ProxyResult:
        """
        Forward a form submission.

        A TimeoutError result does not mean the write was rejected: the
        upstream may have stored it. No idempotency key is sent, so a retry
        after a timeout can create a duplicate.
        """
        logger.info(f"[proxy] Submission body size: {len(json.dumps(payload, default=str))} bytes")
        logger.debug(f"[proxy] Submission body: {json.dumps(payload, ensure_ascii=False, default=str)}")

        return await self._forward(
            "POST",
            self.settings.SUBMIT_TIMEOUT_SECONDS,
            lambda client, timeout: client.submit(payload, timeout, authorization=authorization),
        )

    async def list_applications(self, authorization: str | None = None) -> ProxyResult:
        """Forward a listing request. Missing authorization is allowed."""
        if not authorization:
            logger.warning("[proxy] Listing requested without Authorization header, forwarding anonymously")

        return await self._forward(
            "GET",
            self.settings.LIST_TIMEOUT_SECONDS,
            lambda client, timeout: client.list_applications(timeout, authorization=authorization),
        )

    async def delete(self, record_id: str, authorization: str | None = None) -> ProxyResult:
        """Forward deletion of one record."""
        if not authorization:
            logger.warning(f"[proxy] Delete of {record_id} requested without Authorization header")

        return await self._forward(
            "DELETE",
            self.settings.LIST_TIMEOUT_SECONDS,
            lambda client, timeout: client.delete(record_id, timeout, authorization=authorization),
            path=f"/{record_id}",
        )

    async def check_health(self) -> HealthCheck:
        """
        Ping <base>/health under HEALTH_TIMEOUT_SECONDS.

        Never raises: a missing URL or a failed call is reported in the result.
        """
        target = self.settings.resolve_upstream()
        if target is None:
            return HealthCheck(target=None)

        client = self._client_factory(target.base_url, self.settings.API_VERSION)
        try:
            async with client:
                response = await client.health(self.settings.HEALTH_TIMEOUT_SECONDS)
        except Exception as exc:
            logger.error(f"[proxy] Health check of {client.health_url} failed: {exc}")
            message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
            return HealthCheck(target=target, url=client.health_url, error=message)

        logger.info(f"[proxy] Health check of {client.health_url} -> {response.status_code}")
        return HealthCheck(target=target, url=client.health_url, response=response)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _forward(
        self,
        operation: str,
        timeout: float,
        call: UpstreamCall,
        path: str = "",
    ) -> ProxyResult:
        """Run one upstream call; `path` is appended to the collection URL for logs."""
        target = self.settings.resolve_upstream()
        if target is None:
            logger.error("[proxy] Upstream URL is not configured (API_URL / PUBLIC_API_URL)")
            return error_result(ConfigurationError())

        client = self._client_factory(target.base_url, self.settings.API_VERSION)
        url = client.solicitudes_url + path
        logger.info(
            f"[proxy] {operation} {url} (from {target.source_label}, deadline {timeout:g}s)"
        )

        started = time.monotonic()
        try:
            async with client:
                response = await call(client, timeout)
        except Exception as exc:
            elapsed = time.monotonic() - started
            error = classify_failure(exc, upstream_url=target.base_url)
            logger.error(
                f"[proxy] {operation} {url} failed after {elapsed:.2f}s: "
                f"{error.kind.value} ({exc})"
            )
            return error_result(error)

        elapsed = time.monotonic() - started
        logger.info(
            f"[proxy] {operation} {url} -> {response.status_code} "
            f"{response.reason_phrase} after {elapsed:.2f}s"
        )

        if not response.ok:
            logger.error(f"[proxy] Upstream error {response.status_code}: {response.text[:500]}")
            status_code, body = classify_upstream_error(
                response.status_code, response.text, response.reason_phrase
            )
        else:
            status_code, body = normalize_upstream_success(
                response.status_code, response.is_json, response.text
            )

        return ProxyResult(status_code=status_code, body=body)
