# =============================================================================
# lib/intake_client.py - Applicant-Side Intake Client
# =============================================================================
# What the public forms do when the applicant presses "send":
# 1. validate locally (no network I/O at all if anything is wrong)
# 2. normalize the payload
# 3. POST it to the same-origin proxy (/api/solicitudes)
# 4. turn whatever comes back into a SubmissionResult
#
# Never raises for transport or server problems; the result carries a
# message the form can show inline.
#
# Usage:
#   client = IntakeClient("https://intake.example.com")
#   result = await client.submit_application(form)
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from core.models.submission import ApplicationSubmission, ConsentSubmission
from core.services.validation import (
    prepare_application_payload,
    validate_application,
    validate_consent,
)
from lib.transport import TransportError, TransportErrorKind
from lib.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/solicitudes"
DEFAULT_CLIENT_TIMEOUT = 95.0

VALIDATION_MESSAGE = "Error de validación"
CONSENT_VALIDATION_MESSAGE = "Por favor corrija los errores en el formulario antes de enviar."
TIMEOUT_MESSAGE = (
    "La solicitud está tardando más de lo esperado. Es posible que se haya procesado "
    "correctamente en el servidor. Por favor verifica o intenta de nuevo."
)
NETWORK_MESSAGE = (
    "Error de conexión. Verifica tu conexión a internet y que la API esté disponible."
)
GENERIC_MESSAGE = "Error al conectar con el servidor. Por favor intenta de nuevo más tarde."


@dataclass
class FieldError:
    message: str
    field: str | None = None


@dataclass
class SubmissionResult:
    """What the form shows after pressing send."""
    success: bool
    message: str
    id: str | None = None
    errors: list[FieldError] = field(default_factory=list)


class IntakeClient:
    """
    Client for the intake proxy, used by both public forms.

    `transport` is passed through to httpx (MockTransport in tests).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def submit_url(self) -> str:
        return f"{self.base_url}{PROXY_PATH}"

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    async def submit_application(
        self,
        application: ApplicationSubmission,
        id_token: str | None = None,
        today: date | None = None,
    ) -> SubmissionResult:
        """
        Validate and send a credit request.

        Returns:
            SubmissionResult; on validation failure no request is made
        """
        validation = validate_application(application, today=today)
        if not validation.valid:
            return SubmissionResult(
                success=False,
                message=VALIDATION_MESSAGE,
                errors=[FieldError(message=e) for e in validation.errors],
            )

        payload = prepare_application_payload(application)
        return await self._send(payload, id_token)

    async def submit_consent(
        self,
        consent: ConsentSubmission,
        user_id: str | None = None,
        id_token: str | None = None,
        today: date | None = None,
    ) -> SubmissionResult:
        """
        Validate and send the data-authorization form.

        `user_id` is sent explicitly (null for anonymous applicants).
        """
        field_errors = validate_consent(consent, today=today)
        if field_errors:
            return SubmissionResult(
                success=False,
                message=CONSENT_VALIDATION_MESSAGE,
                errors=[FieldError(message=m, field=f) for f, m in field_errors.items()],
            )

        payload = consent.to_wire()
        payload["userId"] = user_id
        return await self._send(payload, id_token)

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _send(self, payload: dict[str, Any], id_token: str | None) -> SubmissionResult:
        authorization = f"Bearer {id_token}" if id_token else None
        client = UpstreamClient(self.base_url, transport=self._transport)
        try:
            async with client:
                response = await client.request(
                    "POST",
                    self.submit_url,
                    self.timeout,
                    json=payload,
                    authorization=authorization,
                )
        except TransportError as e:
            logger.error(f"Could not reach intake proxy: {e}")
            return _transport_failure(e)

        try:
            body = json.loads(response.text)
        except ValueError:
            message = f"Error HTTP {response.status_code}: {response.text or 'Error desconocido'}"
            return SubmissionResult(success=False, message=message, errors=[FieldError(message)])

        return interpret_response(response.status_code, body)


def interpret_response(status_code: int, body: Any) -> SubmissionResult:
    """
    Map a proxy response to a SubmissionResult.

    - 2xx with success and data.id: accepted, id returned
    - 504: the proxy's timeout message (the write may still have happened)
    - error.details.errors from the upstream: one FieldError each
    """
    body = body if isinstance(body, dict) else {}
    error = body.get("error") if isinstance(body.get("error"), dict) else {}
    error_message = error.get("message")

    if 200 <= status_code < 300 and body.get("success"):
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        return SubmissionResult(
            success=True,
            id=data.get("id"),
            message=body.get("message") or "Solicitud enviada exitosamente",
        )

    if status_code == 504:
        message = error_message or TIMEOUT_MESSAGE
        return SubmissionResult(success=False, message=message, errors=[FieldError(message)])

    errors: list[FieldError] = []
    details = error.get("details")
    if isinstance(details, dict) and isinstance(details.get("errors"), list):
        for item in details["errors"]:
            if isinstance(item, dict) and item.get("message"):
                errors.append(FieldError(message=item["message"], field=item.get("field")))

    message = error_message or "Error al enviar la solicitud"
    return SubmissionResult(
        success=False,
        message=message,
        errors=errors or [FieldError(message)],
    )


def _transport_failure(error: TransportError) -> SubmissionResult:
    if error.kind is TransportErrorKind.TIMEOUT:
        message = TIMEOUT_MESSAGE
    elif error.kind is TransportErrorKind.OTHER:
        message = error.message or GENERIC_MESSAGE
    else:
        message = NETWORK_MESSAGE
    return SubmissionResult(success=False, message=message, errors=[FieldError(message)])
