# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================
# submission_state is imported directly (it depends on lib.intake_client).
# =============================================================================

from .admin_listing_service import AdminListingService, ListingPage, ListingSource
from .error_classifier import classify_failure, classify_upstream_error
from .fallback_store import LocalFallbackStore
from .proxy_service import HealthCheck, ProxyService

__all__ = [
    "AdminListingService",
    "ListingPage",
    "ListingSource",
    "classify_failure",
    "classify_upstream_error",
    "LocalFallbackStore",
    "HealthCheck",
    "ProxyService",
]
