# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Identity-aware proxy (IAP) verification and the admin gate.
#
# Usage:
#   from app.auth import require_admin, AdminSession
#
#   @router.get("/admin/solicitudes")
#   async def listing(session: AdminSession = Depends(require_admin)):
#       ...
# =============================================================================

from app.auth.dependencies import get_iap_verifier, require_admin
from app.auth.iap import IAPVerifier, JWKSKeyProvider, VALID_ISSUERS
from app.auth.models import AdminSession, IAPUser

__all__ = [
    "get_iap_verifier",
    "require_admin",
    "IAPVerifier",
    "JWKSKeyProvider",
    "VALID_ISSUERS",
    "AdminSession",
    "IAPUser",
]
