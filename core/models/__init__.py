# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - envelope.py: Success/error envelopes returned by the proxy
# - submission.py: Credit request and data authorization forms
#
# These models define the "contract" between the browser and the proxy.
# =============================================================================

# -----------------------------------------------------------------------------
# Envelope Models - Proxy responses
# -----------------------------------------------------------------------------
from .envelope import (
    ErrorBody,
    ErrorKind,
    ProxyErrorEnvelope,
    ProxyResult,
    ProxySuccessEnvelope,
)

# -----------------------------------------------------------------------------
# Submission Models - Public forms
# -----------------------------------------------------------------------------
from .submission import (
    ApplicationSubmission,
    AttachedDocument,
    ConsentSubmission,
)

__all__ = [
    # Envelope
    "ErrorBody",
    "ErrorKind",
    "ProxyErrorEnvelope",
    "ProxyResult",
    "ProxySuccessEnvelope",
    # Submission
    "ApplicationSubmission",
    "AttachedDocument",
    "ConsentSubmission",
]
