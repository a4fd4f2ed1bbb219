# =============================================================================
# app/exceptions.py - Proxy Error Taxonomy and Handlers
# =============================================================================
# Every failure the proxy reports to the browser is one of the ProxyError
# subclasses below, rendered as the error envelope:
#
#   {"success": false, "error": {"name", "message", "statusCode", ...}}
#
# The HTTP status of the response always equals error.statusCode.
#
# Identity checks (verify-iap, user-info, the admin gate) answer with
# IdentityError instead: {"error": "<message>"}.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from core.models.envelope import ErrorKind


class ProxyError(Exception):
    """
    Base exception for the request proxy.

    Subclasses pin the error kind and status code; callers only choose
    the message and optional diagnostics.
    """

    kind: ErrorKind = ErrorKind.SERVER_ERROR
    status_code: int = 500
    default_message: str = "Error al procesar la solicitud"

    def __init__(
        self,
        message: str | None = None,
        details: Any = None,
        note: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.note = note
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> dict[str, Any]:
        """Convert exception to the error envelope."""
        error: dict[str, Any] = {
            "name": self.kind.value,
            "message": self.message,
            "statusCode": self.status_code,
        }
        if self.details is not None:
            error["details"] = self.details
        if self.note:
            error["note"] = self.note
        return {"success": False, "error": error}


class ConfigurationError(ProxyError):
    """Raised when the upstream base URL is not configured."""

    kind = ErrorKind.CONFIGURATION_ERROR
    status_code = 500
    default_message = (
        "La URL de la API no está configurada. Configura API_URL o PUBLIC_API_URL."
    )


class SSLError(ProxyError):
    """TLS handshake with the upstream failed."""

    kind = ErrorKind.SSL_ERROR
    status_code = 503
    default_message = (
        "Error de conexión SSL con el servidor. Verifica que la URL de la API "
        "sea correcta y use HTTPS."
    )


class UpstreamTimeoutError(ProxyError):
    """The request deadline fired before the upstream answered."""

    kind = ErrorKind.TIMEOUT_ERROR
    status_code = 504
    default_message = (
        "La solicitud está tardando más de lo esperado. Es posible que se haya "
        "procesado correctamente. Por favor verifica antes de intentar de nuevo."
    )


class NetworkError(ProxyError):
    """Connection refused, DNS failure or another network-level error."""

    kind = ErrorKind.NETWORK_ERROR
    status_code = 503
    default_message = (
        "Error de conexión con el servidor. Verifica que la API esté disponible."
    )


class ServiceUnavailableError(ProxyError):
    """Upstream answered 503 with a body that is not JSON."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    status_code = 503
    default_message = "El servidor no está disponible."


class ServerError(ProxyError):
    """Any other failure, including non-JSON upstream errors."""

    kind = ErrorKind.SERVER_ERROR
    status_code = 500


class UnknownError(ProxyError):
    """The failure value was not an exception object at all."""

    kind = ErrorKind.UNKNOWN_ERROR
    status_code = 500
    default_message = "Error desconocido al procesar la solicitud"


class IdentityError(Exception):
    """
    Rejected identity check on the auth endpoints and the admin gate.

    Rendered as {"error": message}, not as the proxy envelope.
    """

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# =============================================================================
# Exception Handlers
# =============================================================================

async def proxy_exception_handler(
    request: Request,
    exc: ProxyError
) -> JSONResponse:
    """
    Convert ProxyError to JSON response.

    The response status is taken from the error itself so the envelope
    and the HTTP status can never disagree.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_envelope()
    )


async def identity_exception_handler(
    request: Request,
    exc: IdentityError
) -> JSONResponse:
    """
    Convert IdentityError to {"error": message}.
    """
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors (malformed query or path values).
    """
    error = ServerError(message="Solicitud inválida", details=str(exc), status_code=422)
    return JSONResponse(status_code=422, content=error.to_envelope())
