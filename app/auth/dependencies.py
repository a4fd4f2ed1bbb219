# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for identity checks:
# - get_iap_verifier: IAPVerifier built from settings (shared JWKS cache)
# - require_admin: gate for admin endpoints
#
# Usage:
#   from app.auth import require_admin, AdminSession
#
#   @router.get("/admin/thing")
#   async def thing(session: AdminSession = Depends(require_admin)):
#       ...
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, Query, Request, Response

from app.auth.iap import IAPVerifier, JWKSKeyProvider
from app.auth.models import AdminSession
from app.config import Settings, get_settings
from app.exceptions import IdentityError

logger = logging.getLogger(__name__)

IAP_HEADER = "x-goog-iap-jwt-assertion"
SESSION_COOKIE = "iap_session"
DEV_SESSION_VALUE = "dev_mode"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

# One key cache for the whole process
_key_provider = JWKSKeyProvider()


def get_iap_verifier(settings: Settings = Depends(get_settings)) -> IAPVerifier:
    """Build the verifier for the configured audience and environment."""
    return IAPVerifier(
        audience=settings.IAP_AUDIENCE,
        environment=settings.ENVIRONMENT,
        key_provider=_key_provider,
    )


def require_admin(
    request: Request,
    response: Response,
    token: Optional[str] = Query(default=None, description="Development admin token"),
    settings: Settings = Depends(get_settings),
    verifier: IAPVerifier = Depends(get_iap_verifier),
) -> AdminSession:
    """
    Let a request into the admin area or reject it with 401.

    Checked in order:
    1. ?token= equal to DEV_ADMIN_TOKEN (starts a development session cookie)
    2. Existing development session cookie (only while DEV_ADMIN_TOKEN is set)
    3. Verified IAP assertion header
    4. ENVIRONMENT=development with no credentials at all

    Raises:
        IdentityError: 401 if none of the above applies
    """
    dev_token = settings.DEV_ADMIN_TOKEN
    if dev_token and token == dev_token:
        response.set_cookie(
            SESSION_COOKIE,
            DEV_SESSION_VALUE,
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
            max_age=SESSION_MAX_AGE,
        )
        logger.info("Admin access granted with development token")
        return AdminSession(method="dev_token")

    # The cookie can only have been minted by the token above
    if dev_token and request.cookies.get(SESSION_COOKIE) == DEV_SESSION_VALUE:
        return AdminSession(method="dev_cookie")

    iap_token = request.headers.get(IAP_HEADER)
    if iap_token:
        user = verifier.verify(iap_token)
        if user is not None:
            return AdminSession(method="iap", user=user)
        logger.warning("Admin access denied: IAP assertion did not verify")

    elif settings.is_development:
        logger.warning(
            "Development mode: IAP is not active, allowing admin access. "
            "Use ?token=<DEV_ADMIN_TOKEN> to start a session."
        )
        return AdminSession(method="development")

    raise IdentityError("No autenticado")
