# =============================================================================
# app/routers/diagnostics.py - Upstream Connectivity Check
# =============================================================================
# GET /api/test-api pings <base>/health and reports what the proxy would use.
# Always answers 200; "success" reflects the health check only, so operators
# can read the diagnostics even when the upstream is down or unconfigured.
# =============================================================================

import json
import logging
from typing import Any

from fastapi import APIRouter

from app.dependencies import ProxyDep
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_CONFIGURED = "no configurada"


@router.get("/test-api")
async def test_api(proxy: ProxyDep) -> dict[str, Any]:
    """
    Check connectivity with the upstream Credit API.

    Returns:
        {success, status, apiUrl, healthCheck{url, response}, config, timestamp}
        or {success: false, error, config, timestamp} on failure
    """
    check = await proxy.check_health()
    target = check.target

    config = {
        "apiUrlSet": target is not None,
        "apiUrlSource": target.source_label if target else None,
        "envVarValue": target.base_url if target else NOT_CONFIGURED,
    }

    if target is None:
        return {
            "success": False,
            "error": "API_URL no está configurada en las variables de entorno",
            "apiUrl": NOT_CONFIGURED,
            "config": {
                **config,
                "message": "Configura API_URL (runtime) o PUBLIC_API_URL (build)",
            },
            "timestamp": utc_now_iso(),
        }

    if check.response is None:
        return {
            "success": False,
            "error": check.error or "Error desconocido",
            "apiUrl": target.base_url,
            "healthCheck": {"url": check.url},
            "config": config,
            "timestamp": utc_now_iso(),
        }

    response = check.response
    try:
        body: Any = json.loads(response.text)
    except ValueError:
        body = response.text

    return {
        "success": check.ok,
        "status": response.status_code,
        "apiUrl": target.base_url,
        "healthCheck": {"url": check.url, "response": body},
        "config": config,
        "timestamp": utc_now_iso(),
    }
