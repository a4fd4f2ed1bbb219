# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - upstream_client.py: Async httpx client for the upstream Credit API
# - transport.py: Structured tagging of transport failures (TLS, timeout...)
# - intake_client.py: Applicant-side client for the proxy (import directly)
# - utils.py: Shared utilities (error base class, text normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.transport import TransportError, TransportErrorKind
from lib.upstream_client import UpstreamClient, UpstreamResponse
from lib.utils import ApplicationError, clean_text, digits_only

__all__ = [
    # Upstream
    "UpstreamClient",
    "UpstreamResponse",
    # Transport
    "TransportError",
    "TransportErrorKind",
    # Utils
    "ApplicationError",
    "clean_text",
    "digits_only",
]
