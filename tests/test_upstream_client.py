# =============================================================================
# tests/test_upstream_client.py - Upstream Client Tests
# =============================================================================
# Tests for lib/upstream_client.py against httpx.MockTransport.
#
# Run with: pytest tests/test_upstream_client.py -v
# =============================================================================

import asyncio
import json

import httpx
import pytest

from lib.transport import TransportError, TransportErrorKind
from lib.upstream_client import UpstreamClient

from tests.conftest import UPSTREAM_BASE


# =============================================================================
# URLs
# =============================================================================

class TestUrls:
    """Tests for URL construction."""

    def test_versioned_solicitudes_url(self):
        client = UpstreamClient(UPSTREAM_BASE + "/", api_version=2)
        assert client.solicitudes_url == f"{UPSTREAM_BASE}/api/v2/solicitudes"

    def test_health_url(self):
        client = UpstreamClient(UPSTREAM_BASE)
        assert client.health_url == f"{UPSTREAM_BASE}/health"


# =============================================================================
# Requests
# =============================================================================

class TestRequests:
    """Tests for outbound requests."""

    @pytest.mark.asyncio
    async def test_submit_sends_json_and_authorization(self, upstream):
        upstream.handler = lambda request: httpx.Response(201, json={"success": True})

        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            response = await client.submit({"a": "1"}, timeout=5, authorization="Bearer abc")

        request = upstream.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{UPSTREAM_BASE}/api/v1/solicitudes"
        assert request.headers["authorization"] == "Bearer abc"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"a": "1"}
        assert response.status_code == 201
        assert response.ok
        assert response.is_json

    @pytest.mark.asyncio
    async def test_no_authorization_header_when_absent(self, upstream):
        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            await client.list_applications(timeout=5)

        assert "authorization" not in upstream.requests[0].headers

    @pytest.mark.asyncio
    async def test_delete_targets_record(self, upstream):
        upstream.handler = lambda request: httpx.Response(200, json={"success": True})

        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            await client.delete("SOL-1", timeout=5)

        request = upstream.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/api/v1/solicitudes/SOL-1"

    @pytest.mark.asyncio
    async def test_text_body_is_kept(self, upstream):
        upstream.handler = lambda request: httpx.Response(503, text="Service Unavailable")

        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            response = await client.health(timeout=5)

        assert response.status_code == 503
        assert response.text == "Service Unavailable"
        assert not response.is_json
        assert not response.ok


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    """Tests for deadline and transport failures."""

    @pytest.mark.asyncio
    async def test_deadline_raises_timeout(self, upstream):
        async def slow(request):
            await asyncio.sleep(0.5)
            return httpx.Response(200, json={})

        upstream.handler = slow

        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.submit({}, timeout=0.05)

        assert exc_info.value.kind is TransportErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_connect_error_is_tagged(self, upstream):
        def refuse(request):
            raise httpx.ConnectError("All connection attempts failed", request=request)

        upstream.handler = refuse

        async with upstream.client_factory(UPSTREAM_BASE, 1) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.list_applications(timeout=5)

        assert exc_info.value.kind is TransportErrorKind.NETWORK
