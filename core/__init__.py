# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the proxy and form logic:
# - models/: Pydantic schemas for envelopes and form submissions
# - services/: Proxy, error classification, validation, fallback store,
#   admin listing and the submission state machine
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable without an HTTP server.
# =============================================================================
