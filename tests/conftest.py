# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Fakes the upstream Credit API with httpx.MockTransport (no real network)
# - Provides valid form payloads for both public forms
# =============================================================================

import inspect
import os
from datetime import date

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

_UNSET = ("API_URL", "PUBLIC_API_URL", "IAP_AUDIENCE", "DEV_ADMIN_TOKEN", "API_VERSION", "PORT")
for _name in _UNSET:
    os.environ.pop(_name, None)
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("DEBUG", "false")

import httpx
import pytest

from app.config import Settings
from core.services.proxy_service import ProxyService
from lib.upstream_client import UpstreamClient

UPSTREAM_BASE = "https://credit-api.test"
TODAY = date(2025, 6, 1)


# =============================================================================
# Upstream fake
# =============================================================================

class FakeUpstream:
    """
    Stand-in for the upstream Credit API.

    Set `handler` to a (sync or async) function of httpx.Request returning an
    httpx.Response, or raising to simulate a transport failure. Every
    request that reaches the transport is recorded in `requests`.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(200, json={"success": True, "data": []})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client_factory(self, base_url: str, api_version: int) -> UpstreamClient:
        return UpstreamClient(base_url, api_version=api_version, transport=self.transport)


def make_settings(**overrides) -> Settings:
    """Settings that ignore the process environment's .env file."""
    return Settings(_env_file=None, **overrides)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def upstream():
    """Recording fake of the upstream Credit API."""
    return FakeUpstream()


@pytest.fixture
def settings():
    """Settings pointing at the fake upstream, development mode."""
    return make_settings(API_URL=UPSTREAM_BASE, ENVIRONMENT="development")


@pytest.fixture
def proxy(settings, upstream):
    """ProxyService wired to the fake upstream."""
    return ProxyService(settings, client_factory=upstream.client_factory)


@pytest.fixture
def valid_application():
    """Credit request that passes every validation rule."""
    return {
        "nombreCompleto": "  Juan Pérez Gómez ",
        "tipoDocumento": "CC",
        "numeroDocumento": "1234567890",
        "fechaNacimiento": "1990-05-15",
        "estadoCivil": "soltero",
        "genero": "masculino",
        "telefono": "3001234567",
        "email": "Juan.Perez@Example.com",
        "direccion": "Calle 123 #45-67",
        "ciudad": "Bogotá",
        "departamento": "Cundinamarca",
        "ocupacion": "Ingeniero",
        "empresa": "Acme SAS",
        "cargoActual": "Analista",
        "tipoContrato": "indefinido",
        "ingresosMensuales": "$ 3.500.000",
        "tiempoEmpleo": "2a5",
        "montoSolicitado": "10.000.000",
        "plazoMeses": "24",
        "proposito": "Capital de trabajo",
        "tieneDeudas": "no",
        "refNombre1": "Pedro Pérez",
        "refTelefono1": "3109876543",
        "refRelacion1": "Hermano",
        "refNombre2": "Ana Ruiz",
        "refTelefono2": "3201112233",
        "refRelacion2": "Amiga",
    }


@pytest.fixture
def valid_consent():
    """Data-authorization form that passes every validation rule."""
    return {
        "email": "maria.lopez@example.com",
        "autorizacionTratamientoDatos": True,
        "autorizacionContacto": True,
        "nombreCompleto": "María López",
        "tipoDocumento": "CC",
        "numeroDocumento": "1234567890",
        "fechaNacimiento": "1985-03-20",
        "fechaExpedicionDocumento": "2005-04-01",
        "ciudadNegocio": "Medellín",
        "direccionNegocio": "Carrera 10 # 20-30",
        "celularNegocio": "300 123 4567",
    }
