# =============================================================================
# tests/test_proxy_service.py - Request Proxy Tests
# =============================================================================
# Tests for core/services/proxy_service.py:
# - one envelope per invocation, HTTP status == envelope status
# - deadlines, upstream error pass-through, missing configuration
#
# Run with: pytest tests/test_proxy_service.py -v
# =============================================================================

import asyncio
import logging
import ssl

import httpx
import pytest

from core.services.proxy_service import ProxyService

from tests.conftest import UPSTREAM_BASE, make_settings


# =============================================================================
# Success
# =============================================================================

class TestSubmitSuccess:
    """Tests for successful submissions."""

    @pytest.mark.asyncio
    async def test_json_success_is_mirrored(self, proxy, upstream):
        upstream.handler = lambda request: httpx.Response(
            201, json={"success": True, "data": {"id": "abc123"}}
        )

        result = await proxy.submit({"nombreCompleto": "Juan"})

        assert result.status_code == 201
        assert result.body == {"success": True, "data": {"id": "abc123"}}
        assert str(upstream.requests[0].url) == f"{UPSTREAM_BASE}/api/v1/solicitudes"

    @pytest.mark.asyncio
    async def test_text_success_is_wrapped(self, proxy, upstream):
        upstream.handler = lambda request: httpx.Response(200, text="Creado")

        result = await proxy.submit({})

        assert result.status_code == 200
        assert result.body == {"success": True, "message": "Creado"}

    @pytest.mark.asyncio
    async def test_authorization_is_forwarded_verbatim(self, proxy, upstream):
        await proxy.submit({}, authorization="Bearer id-token")

        assert upstream.requests[0].headers["authorization"] == "Bearer id-token"

    @pytest.mark.asyncio
    async def test_api_version_is_configurable(self, upstream):
        service = ProxyService(
            make_settings(API_URL=UPSTREAM_BASE, API_VERSION=3),
            client_factory=upstream.client_factory,
        )

        await service.list_applications()

        assert upstream.requests[0].url.path == "/api/v3/solicitudes"

    @pytest.mark.asyncio
    async def test_delete_logs_record_url(self, proxy, upstream, caplog):
        caplog.set_level(logging.INFO, logger="core.services.proxy_service")

        await proxy.delete("SOL-1", authorization="Bearer t")

        assert f"DELETE {UPSTREAM_BASE}/api/v1/solicitudes/SOL-1 " in caplog.text
        assert upstream.requests[0].url.path == "/api/v1/solicitudes/SOL-1"

    @pytest.mark.asyncio
    async def test_no_content_delete_is_200(self, proxy, upstream):
        upstream.handler = lambda request: httpx.Response(204)

        result = await proxy.delete("SOL-1")

        assert result.status_code == 200
        assert result.body == {"success": True, "message": "Solicitud procesada"}


# =============================================================================
# Deadlines
# =============================================================================

class TestDeadlines:
    """Tests for the per-call deadline."""

    @pytest.mark.asyncio
    async def test_exceeding_deadline_is_504(self, upstream):
        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(201, json={"success": True})

        upstream.handler = slow
        service = ProxyService(
            make_settings(API_URL=UPSTREAM_BASE, SUBMIT_TIMEOUT_SECONDS=0.05),
            client_factory=upstream.client_factory,
        )

        result = await service.submit({})

        assert result.status_code == 504
        assert result.body["success"] is False
        assert result.body["error"]["name"] == "TimeoutError"
        assert result.body["error"]["statusCode"] == 504
        assert "note" in result.body["error"]

    @pytest.mark.asyncio
    async def test_finishing_before_deadline_returns_real_response(self, upstream):
        async def quick(request):
            await asyncio.sleep(0.01)
            return httpx.Response(201, json={"success": True, "data": {"id": "x"}})

        upstream.handler = quick
        service = ProxyService(
            make_settings(API_URL=UPSTREAM_BASE, SUBMIT_TIMEOUT_SECONDS=2.0),
            client_factory=upstream.client_factory,
        )

        result = await service.submit({})

        assert result.status_code == 201
        assert result.body["data"]["id"] == "x"

    def test_default_deadlines(self):
        settings = make_settings()
        assert settings.SUBMIT_TIMEOUT_SECONDS == 180
        assert settings.LIST_TIMEOUT_SECONDS == 60
        assert settings.HEALTH_TIMEOUT_SECONDS == 10


# =============================================================================
# Upstream Errors
# =============================================================================

class TestUpstreamErrors:
    """Tests for non-2xx upstream answers."""

    @pytest.mark.asyncio
    async def test_json_422_is_passed_through(self, proxy, upstream):
        body = {
            "success": False,
            "error": {
                "message": "Datos inválidos",
                "details": {"errors": [{"field": "email", "message": "Email inválido"}]},
            },
        }
        upstream.handler = lambda request: httpx.Response(422, json=body)

        result = await proxy.submit({})

        assert result.status_code == 422
        assert result.body == body

    @pytest.mark.asyncio
    async def test_503_text_is_service_unavailable(self, proxy, upstream):
        upstream.handler = lambda request: httpx.Response(503, text="Service Unavailable")

        result = await proxy.submit({})

        assert result.status_code == 503
        assert result.body["success"] is False
        assert result.body["error"]["name"] == "ServiceUnavailable"
        assert result.body["error"]["statusCode"] == 503
        assert result.body["error"]["message"] == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_tls_failure_is_ssl_error(self, proxy, upstream):
        def handshake_fails(request):
            exc = httpx.ConnectError("network error", request=request)
            exc.__cause__ = ssl.SSLError(1, "[SSL: WRONG_VERSION_NUMBER] wrong version number")
            raise exc

        upstream.handler = handshake_fails

        result = await proxy.submit({})

        assert result.status_code == 503
        assert result.body["error"]["name"] == "SSLError"

    @pytest.mark.asyncio
    async def test_connection_refused_is_network_error(self, proxy, upstream):
        def refused(request):
            exc = httpx.ConnectError("All connection attempts failed", request=request)
            exc.__cause__ = ConnectionRefusedError()
            raise exc

        upstream.handler = refused

        result = await proxy.list_applications()

        assert result.status_code == 503
        assert result.body["error"]["name"] == "NetworkError"

    @pytest.mark.asyncio
    async def test_status_always_matches_envelope(self, proxy, upstream):
        for status in (400, 404, 500, 502):
            upstream.handler = lambda request, status=status: httpx.Response(status, text="nope")

            result = await proxy.submit({})

            assert result.status_code == status
            assert result.body["error"]["statusCode"] == status


# =============================================================================
# Configuration
# =============================================================================

class TestConfiguration:
    """Tests for a missing upstream URL."""

    @pytest.mark.asyncio
    async def test_missing_url_makes_no_outbound_call(self, upstream):
        created = []

        def factory(base_url, api_version):
            created.append(base_url)
            return upstream.client_factory(base_url, api_version)

        service = ProxyService(make_settings(), client_factory=factory)

        result = await service.submit({"a": 1})

        assert result.status_code == 500
        assert result.body["success"] is False
        assert result.body["error"]["name"] == "ConfigurationError"
        assert result.body["error"]["statusCode"] == 500
        assert created == []
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_listing_also_reports_configuration(self, upstream):
        service = ProxyService(make_settings(), client_factory=upstream.client_factory)

        result = await service.list_applications()

        assert result.body["error"]["name"] == "ConfigurationError"
        assert upstream.requests == []


# =============================================================================
# Health
# =============================================================================

class TestCheckHealth:
    """Tests for ProxyService.check_health."""

    @pytest.mark.asyncio
    async def test_health_ok(self, proxy, upstream):
        upstream.handler = lambda request: httpx.Response(200, json={"status": "ok"})

        check = await proxy.check_health()

        assert check.ok
        assert check.url == f"{UPSTREAM_BASE}/health"

    @pytest.mark.asyncio
    async def test_health_failure_is_reported(self, proxy, upstream):
        def refused(request):
            raise httpx.ConnectError("All connection attempts failed", request=request)

        upstream.handler = refused

        check = await proxy.check_health()

        assert not check.ok
        assert check.response is None
        assert check.error

    @pytest.mark.asyncio
    async def test_health_without_url(self):
        check = await ProxyService(make_settings()).check_health()
        assert check.target is None
