# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the credit intake proxy.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   credit-intake-proxy            (binds HOSTNAME:PORT from settings)
# =============================================================================

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import (
    IdentityError,
    ProxyError,
    ServerError,
    identity_exception_handler,
    proxy_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, diagnostics, health, solicitudes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs where requests will be forwarded. A missing upstream URL is not
    fatal: the proxy answers ConfigurationError per request instead.
    """
    logger.info(f"Starting credit intake proxy in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    target = settings.resolve_upstream()
    if target is None:
        logger.warning("No upstream URL configured (API_URL / PUBLIC_API_URL)")
    else:
        logger.info(f"Upstream: {target.base_url} from {target.source_label}")

    if not settings.IAP_AUDIENCE:
        logger.warning("IAP_AUDIENCE is not set: IAP assertions are not signature-checked")

    yield

    logger.info("Shutting down credit intake proxy")


# Create FastAPI application
app = FastAPI(
    title="Credit Intake Proxy",
    description="""
## Credit Application Intake

Same-origin proxy between the public application forms and the upstream
Credit API. Every failure is reported as one envelope:

```json
{"success": false, "error": {"name": "TimeoutError", "message": "...", "statusCode": 504}}
```

| Error | Status |
|-------|--------|
| ConfigurationError | 500 |
| SSLError | 503 |
| TimeoutError | 504 |
| NetworkError | 503 |
| ServiceUnavailable | 503 |
| ServerError | 500 |

A 504 does not mean the application was rejected; it may have been stored.
""",
    version=health.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Solicitudes",
            "description": "Submit and list credit applications",
        },
        {
            "name": "Auth",
            "description": "Identity-aware proxy assertions",
        },
        {
            "name": "Admin",
            "description": "Admin panel listing and deletion",
        },
        {
            "name": "Diagnostics",
            "description": "Upstream connectivity check",
        },
        {
            "name": "Health",
            "description": "Proxy liveness",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(ProxyError, proxy_exception_handler)
app.add_exception_handler(IdentityError, identity_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions with a ServerError envelope."""
    logger.exception(f"Unexpected error: {exc}")
    error = ServerError(message="Error interno del servidor")
    return JSONResponse(status_code=error.status_code, content=error.to_envelope())


# =============================================================================
# Routers
# =============================================================================

# Application proxy endpoints
app.include_router(
    solicitudes.router,
    prefix="/api",
    tags=["Solicitudes"]
)

# Identity endpoints
app.include_router(
    auth_routes.router,
    prefix="/api",
    tags=["Auth"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["Admin"]
)

# Upstream connectivity check
app.include_router(
    diagnostics.router,
    prefix="/api",
    tags=["Diagnostics"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Credit Intake Proxy",
        "version": health.VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


def run() -> None:
    """Console entry point: serve on HOSTNAME:PORT."""
    uvicorn.run(
        "app.main:app",
        host=settings.HOSTNAME,
        port=settings.PORT,
        reload=settings.is_development and settings.DEBUG,
    )
