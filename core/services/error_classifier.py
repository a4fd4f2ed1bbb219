# =============================================================================
# core/services/error_classifier.py - Proxy Error Classification
# =============================================================================
# Pure decision logic that turns whatever went wrong during an upstream call
# into exactly one envelope:
#
#   classify_failure()          exception -> ProxyError
#   classify_upstream_error()   non-2xx response -> (status, body)
#   normalize_upstream_success() 2xx response -> (status, body)
#
# Order in classify_failure is fixed: TLS, timeout, network, other, unknown.
# =============================================================================

import json
import logging
from typing import Any

from app.exceptions import (
    NetworkError,
    ProxyError,
    SSLError,
    ServerError,
    ServiceUnavailableError,
    UnknownError,
    UpstreamTimeoutError,
)
from lib.transport import TransportError, TransportErrorKind

logger = logging.getLogger(__name__)

SSL_DETAILS = (
    "El servidor puede no estar respondiendo con HTTPS correctamente. "
    "Verifica la URL de la API."
)

TIMEOUT_NOTE = (
    "La solicitud puede haberse procesado en el servidor a pesar del timeout. "
    "Verifica antes de reintentar para evitar duplicados."
)

SERVICE_UNAVAILABLE_DETAILS = (
    "El servicio de origen puede haberse reiniciado o alcanzado el timeout de "
    "su plataforma durante la solicitud. Revisa sus logs."
)

# Statuses that may not carry a body; every answer here is an envelope
NO_BODY_STATUSES = frozenset({204, 205, 304})

_NETWORK_KINDS = {
    TransportErrorKind.CONNECTION_REFUSED,
    TransportErrorKind.DNS_FAILURE,
    TransportErrorKind.NETWORK,
}


def classify_failure(failure: object, upstream_url: str | None = None) -> ProxyError:
    """
    Map a failure raised during an upstream call to a ProxyError.

    Args:
        failure: Whatever was caught. Exceptions are tagged with
            TransportError.from_exception first; anything that is not an
            exception at all is an UnknownError.
        upstream_url: Included in SSL diagnostics when known.

    Returns:
        The ProxyError describing the failure. Never raises.
    """
    if isinstance(failure, ProxyError):
        return failure

    if not isinstance(failure, BaseException):
        logger.error(f"Non-exception failure value: {failure!r}")
        return UnknownError()

    transport = TransportError.from_exception(failure)

    if transport.kind is TransportErrorKind.TLS:
        logger.error(f"TLS handshake with upstream failed ({transport.code}): {transport.message}")
        details: Any = SSL_DETAILS
        if upstream_url:
            details = {"hint": SSL_DETAILS, "url": upstream_url, "code": transport.code}
        return SSLError(details=details)

    if transport.kind is TransportErrorKind.TIMEOUT:
        logger.error(f"Upstream timed out: {transport.message}")
        return UpstreamTimeoutError(note=TIMEOUT_NOTE)

    if transport.kind in _NETWORK_KINDS:
        logger.error(f"Network error reaching upstream ({transport.code}): {transport.message}")
        return NetworkError(details=transport.message)

    # Untagged failure: report the original exception's own message
    message = failure.message if isinstance(failure, TransportError) else str(failure)
    logger.error(f"Unexpected proxy failure: {failure!r}")
    return ServerError(message=message or None)


def classify_upstream_error(status_code: int, text: str, reason: str = "") -> tuple[int, Any]:
    """
    Build the response for a non-2xx upstream answer.

    A JSON body is trusted and passed through unchanged with the upstream
    status. Otherwise a ServiceUnavailable (503) or ServerError envelope is
    synthesized around the raw text.

    Returns:
        (status_code, body)
    """
    if status_code in NO_BODY_STATUSES:
        error = ServerError(message=f"Error {status_code}: {reason}".rstrip(": "))
        logger.error(f"Upstream answered {status_code}, reporting {error.status_code}")
        return error.status_code, error.to_envelope()

    try:
        return status_code, json.loads(text)
    except ValueError:
        pass

    if status_code == 503:
        logger.error(
            "Upstream returned 503 without JSON. Possible causes: platform request "
            "timeout, instance restart during the request, crash, or resource limits"
        )
        error: ProxyError = ServiceUnavailableError(
            message=text or None,
            details=SERVICE_UNAVAILABLE_DETAILS,
        )
    else:
        error = ServerError(
            message=text or f"Error {status_code}: {reason}".rstrip(": "),
            status_code=status_code,
        )

    return status_code, error.to_envelope()


def normalize_upstream_success(status_code: int, is_json: bool, text: str) -> tuple[int, Any]:
    """
    Build the response for a 2xx upstream answer.

    JSON bodies are mirrored verbatim; anything else becomes a synthesized
    success envelope carrying the text as the message. A body-less upstream
    status (204, 205) is answered as 200 since the envelope is a body.
    """
    if status_code in NO_BODY_STATUSES:
        status_code = 200

    if is_json:
        try:
            return status_code, json.loads(text)
        except ValueError:
            logger.warning("Upstream declared JSON but the body did not parse")

    return status_code, {
        "success": True,
        "message": text or "Solicitud procesada",
    }
