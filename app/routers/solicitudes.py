# =============================================================================
# app/routers/solicitudes.py - Application Proxy Endpoints
# =============================================================================
# Same-origin endpoints the public forms talk to. Each request is forwarded
# to the upstream Credit API by ProxyService and answered with its envelope;
# the HTTP status always equals the envelope's status.
#
#   POST /api/solicitudes   submit (credit request or data authorization)
#   GET  /api/solicitudes   listing passthrough
# =============================================================================

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.dependencies import ProxyDep
from app.exceptions import ServerError
from core.models.envelope import ProxyResult

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(result: ProxyResult) -> JSONResponse:
    return JSONResponse(content=result.body, status_code=result.status_code)


@router.post("/solicitudes")
async def submit_solicitud(request: Request, proxy: ProxyDep):
    """
    Forward a form submission upstream.

    The body is passed through as-is; validation is the upstream's job.
    A 504 means the deadline fired, not that the write was rejected.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        logger.warning(f"Rejected submission with unreadable body: {e}")
        error = ServerError(
            message="El cuerpo de la solicitud debe ser JSON válido",
            details=str(e),
            status_code=400,
        )
        return JSONResponse(content=error.to_envelope(), status_code=400)

    result = await proxy.submit(payload, authorization=request.headers.get("authorization"))
    return _respond(result)


@router.get("/solicitudes")
async def list_solicitudes(request: Request, proxy: ProxyDep):
    """Forward a listing request upstream, Authorization header included."""
    result = await proxy.list_applications(authorization=request.headers.get("authorization"))
    return _respond(result)
