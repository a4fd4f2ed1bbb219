# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(); tests replace them
# through app.dependency_overrides (e.g. a ProxyService on MockTransport).
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.config import Settings, get_settings
from core.services.admin_listing_service import AdminListingService
from core.services.fallback_store import LocalFallbackStore
from core.services.proxy_service import ProxyService


def get_proxy_service(settings: Settings = Depends(get_settings)) -> ProxyService:
    """
    Get a ProxyService bound to the current settings.

    Settings are read per request, so the upstream URL is resolved at
    call time rather than at import time.
    """
    return ProxyService(settings)


def get_fallback_store(settings: Settings = Depends(get_settings)) -> LocalFallbackStore:
    return LocalFallbackStore(settings.FALLBACK_STORE_PATH)


def get_admin_listing_service(
    proxy: ProxyService = Depends(get_proxy_service),
    store: LocalFallbackStore = Depends(get_fallback_store),
) -> AdminListingService:
    return AdminListingService(proxy, store)


# Type aliases for dependency injection
ProxyDep = Annotated[ProxyService, Depends(get_proxy_service)]
AdminListingDep = Annotated[AdminListingService, Depends(get_admin_listing_service)]
