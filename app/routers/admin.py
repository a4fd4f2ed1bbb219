# =============================================================================
# app/routers/admin.py - Admin Panel Endpoints
# =============================================================================
# Listing and deletion of applications for the admin panel. Every endpoint
# requires an admin session (see app/auth/dependencies.py).
#
#   GET    /api/admin/solicitudes        search + pagination, fallback store
#   DELETE /api/admin/solicitudes/{id}   upstream delete, then local cache
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from app.auth import AdminSession, require_admin
from app.dependencies import AdminListingDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/solicitudes")
async def list_admin_solicitudes(
    request: Request,
    service: AdminListingDep,
    session: AdminSession = Depends(require_admin),
    q: Annotated[str | None, Query(max_length=200, description="Name, document, email or id")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
):
    """
    List applications for the admin table.

    When the upstream listing fails the locally cached records are served
    with source "fallback" and the upstream error attached.
    """
    logger.info(f"Admin listing by {session.method} (q={q!r}, page={page})")
    result = await service.page(
        authorization=request.headers.get("authorization"),
        query=q,
        page=page,
        page_size=page_size,
    )
    return result.to_dict()


@router.delete("/solicitudes/{record_id}")
async def delete_admin_solicitud(
    request: Request,
    response: Response,
    service: AdminListingDep,
    record_id: Annotated[str, Path(pattern=r"^[A-Za-z0-9_-]+$", max_length=128)],
    session: AdminSession = Depends(require_admin),
):
    """
    Delete one application upstream and drop it from the fallback store.

    The upstream status is mirrored on the shared response so that a
    session cookie set by require_admin is sent as well.
    """
    logger.info(f"Admin delete of {record_id} by {session.method}")
    result = await service.delete(record_id, authorization=request.headers.get("authorization"))
    response.status_code = result.status_code
    return result.body
