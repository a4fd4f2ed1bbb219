# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - solicitudes.py: Application submit/list proxy endpoints
# - diagnostics.py: Upstream connectivity check (/api/test-api)
# - admin.py: Admin listing and delete endpoints
# - health.py: Liveness of this service
#
# Identity endpoints live in app/auth/routes.py.
# Each router is mounted in main.py under the /api prefix.
# =============================================================================

from . import admin
from . import diagnostics
from . import health
from . import solicitudes

__all__ = [
    "admin",
    "diagnostics",
    "health",
    "solicitudes",
]
