# =============================================================================
# app/auth/routes.py - Identity Routes
# =============================================================================
# API endpoints for identity-aware proxy (IAP) assertions:
# - POST /api/verify-iap: verify a token, return the user
# - GET  /api/verify-iap: verifier readiness/config
# - GET  /api/user-info:  user behind the current request
#
# Handlers are sync: JWKS fetching uses blocking httpx calls, so FastAPI
# runs them in its threadpool.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.auth.dependencies import (
    DEV_SESSION_VALUE,
    IAP_HEADER,
    SESSION_COOKIE,
    get_iap_verifier,
)
from app.auth.iap import IAPVerifier
from app.auth.models import DEVELOPMENT_USER, VerifyIAPRequest
from app.config import Settings, get_settings
from app.exceptions import IdentityError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/verify-iap")
def verify_iap(
    request: VerifyIAPRequest,
    verifier: IAPVerifier = Depends(get_iap_verifier),
) -> dict:
    """
    Verify an IAP assertion.

    Returns:
        dict: {"success": true, "user": {email, userId, domain, verified}}

    Raises:
        400: If no token is given
        401: If the token is rejected
    """
    if not request.token:
        raise IdentityError("Token requerido", status_code=status.HTTP_400_BAD_REQUEST)

    user = verifier.verify(request.token)
    if user is None:
        raise IdentityError("Token inválido")

    return {"success": True, "user": user.model_dump(by_alias=True, exclude_none=True)}


@router.get("/verify-iap")
def verify_iap_status(settings: Settings = Depends(get_settings)) -> dict:
    """
    Report whether the verifier is configured. Used for smoke tests.
    """
    return {
        "message": "Endpoint de verificación IAP",
        "status": "ready",
        "config": {
            "iapAudienceConfigured": bool(settings.IAP_AUDIENCE),
            "environment": settings.ENVIRONMENT,
        },
    }


@router.get("/user-info")
def user_info(
    request: Request,
    settings: Settings = Depends(get_settings),
    verifier: IAPVerifier = Depends(get_iap_verifier),
):
    """
    Get the user behind the current request.

    Looks at the IAP assertion header first; in development a session
    cookie set by the admin token flow yields a fixed development user.

    Raises:
        401: If there is no verified identity
    """
    iap_token = request.headers.get(IAP_HEADER)
    if iap_token:
        user = verifier.verify(iap_token)
        if user is not None:
            return JSONResponse(user.model_dump(by_alias=True, exclude_none=True))
        logger.warning("user-info: IAP assertion present but not verified")

    if settings.is_development and request.cookies.get(SESSION_COOKIE) == DEV_SESSION_VALUE:
        return JSONResponse(DEVELOPMENT_USER.model_dump(by_alias=True, exclude_none=True))

    raise IdentityError("No autenticado")
