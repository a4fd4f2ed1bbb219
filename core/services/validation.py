# =============================================================================
# core/services/validation.py - Applicant Form Validation
# =============================================================================
# Field rules for both public forms, applied before anything is sent:
# - validate_application(): credit request, returns every error as a list
# - validate_consent(): data authorization, returns {field: message}
# - prepare_application_payload(): normalizes a valid credit request into
#   the flat string payload the upstream expects
#
# Messages are applicant-facing and therefore in Spanish.
# `today` is injectable everywhere dates are involved.
# =============================================================================

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from core.models.submission import ApplicationSubmission, ConsentSubmission
from lib.utils import clean_text, digits_only

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑüÜ\s]+$")
DIGITS_PATTERN = re.compile(r"^\d+$")

MINIMUM_AGE = 18
MAXIMUM_AGE = 100
MAX_ISSUE_AGE_YEARS = 50

ALLOWED_VALUES: dict[str, tuple[str, ...]] = {
    "tipoDocumento": ("CC", "CE", "PA", "TI"),
    "estadoCivil": ("soltero", "casado", "union", "divorciado", "viudo"),
    "genero": ("masculino", "femenino", "otro"),
    "tipoContrato": ("indefinido", "fijo", "prestacion", "independiente"),
    "tiempoEmpleo": ("menos6", "6a12", "1a2", "2a5", "mas5"),
    "plazoMeses": ("12", "24", "36", "48", "60", "72"),
    "tieneDeudas": ("si", "no"),
}

# Labels used in "invalid value" messages
_FIELD_LABELS = {
    "tipoDocumento": "Tipo de documento",
    "estadoCivil": "Estado civil",
    "genero": "Género",
    "tipoContrato": "Tipo de contrato",
    "tiempoEmpleo": "Tiempo en el empleo",
    "plazoMeses": "Plazo",
}

REQUIRED_APPLICATION_FIELDS: tuple[str, ...] = (
    "nombreCompleto",
    "tipoDocumento",
    "numeroDocumento",
    "fechaNacimiento",
    "estadoCivil",
    "genero",
    "telefono",
    "email",
    "direccion",
    "ciudad",
    "departamento",
    "ocupacion",
    "empresa",
    "cargoActual",
    "tipoContrato",
    "ingresosMensuales",
    "tiempoEmpleo",
    "montoSolicitado",
    "plazoMeses",
    "proposito",
    "tieneDeudas",
    "refNombre1",
    "refTelefono1",
    "refRelacion1",
    "refNombre2",
    "refTelefono2",
    "refRelacion2",
)

NUMERIC_APPLICATION_FIELDS = ("ingresosMensuales", "montoSolicitado")

# Length limits for document numbers by type: (min, max, digits only)
DOCUMENT_RULES: dict[str, tuple[int, int, bool]] = {
    "CC": (8, 10, True),
    "CE": (6, 10, False),
    "PA": (6, 12, False),
    "PEP": (6, 12, False),
    "PPP": (6, 12, False),
}

_DOCUMENT_NAMES = {
    "CC": "La cédula de ciudadanía",
    "CE": "La cédula de extranjería",
    "PA": "El pasaporte",
    "PEP": "El PEP",
    "PPP": "El PPP",
}


@dataclass
class ValidationResult:
    """Outcome of validating a credit request."""
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


# =============================================================================
# Shared helpers
# =============================================================================

def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return not value


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(clean_text(value)[:10])
    except ValueError:
        return None


def age_on(birth: date, today: date) -> int:
    """Whole years between birth and today."""
    had_birthday = (today.month, today.day) >= (birth.month, birth.day)
    return today.year - birth.year - (0 if had_birthday else 1)


def _years_before(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return today.replace(year=today.year - years, day=28)


# =============================================================================
# Credit request
# =============================================================================

def validate_application(
    application: ApplicationSubmission,
    today: date | None = None,
) -> ValidationResult:
    """
    Check a credit request before it is sent.

    All problems are collected; nothing short-circuits.

    Example:
        result = validate_application(form)
        if not result.valid:
            show(result.errors)
    """
    today = today or date.today()
    data = application.model_dump(by_alias=True)
    errors: list[str] = []

    if not is_valid_email(data["email"]):
        errors.append("El formato del email es inválido")

    if data["fechaNacimiento"]:
        birth = _parse_date(data["fechaNacimiento"])
        if birth is None or age_on(birth, today) < MINIMUM_AGE:
            errors.append("El solicitante debe ser mayor de 18 años")

    if data["tipoDocumento"] not in ALLOWED_VALUES["tipoDocumento"]:
        errors.append(
            "Tipo de documento inválido. Valores permitidos: "
            + ", ".join(ALLOWED_VALUES["tipoDocumento"])
        )

    # Optional-looking selects: only checked when a value was chosen
    for name in ("estadoCivil", "genero", "tipoContrato", "tiempoEmpleo", "plazoMeses"):
        value = data[name]
        if value and value not in ALLOWED_VALUES[name]:
            errors.append(
                f"{_FIELD_LABELS[name]} inválido. Valores permitidos: "
                + ", ".join(ALLOWED_VALUES[name])
            )

    if data["tieneDeudas"] not in ALLOWED_VALUES["tieneDeudas"]:
        errors.append('Valor de tieneDeudas inválido. Debe ser "si" o "no"')

    if data["tieneDeudas"] == "si" and _is_blank(data.get("montoDeudas")):
        errors.append('El campo montoDeudas es requerido cuando tieneDeudas es "si"')

    missing = [name for name in REQUIRED_APPLICATION_FIELDS if _is_blank(data.get(name))]
    if missing:
        errors.append(f"Faltan campos requeridos: {', '.join(missing)}")

    return ValidationResult(errors=errors)


def prepare_application_payload(application: ApplicationSubmission) -> dict[str, str]:
    """
    Normalize a credit request into the upstream payload.

    - every value is a trimmed string
    - email is lower-cased
    - amounts keep digits only ("0" when empty)
    - montoDeudas is included only for tieneDeudas == "si" and a non-zero amount
    """
    data = application.model_dump(by_alias=True)

    payload: dict[str, str] = {}
    for name in REQUIRED_APPLICATION_FIELDS:
        if name in NUMERIC_APPLICATION_FIELDS:
            payload[name] = digits_only(data.get(name))
        else:
            payload[name] = clean_text(data.get(name))

    payload["email"] = payload["email"].lower()

    if payload["tieneDeudas"] == "si" and not _is_blank(data.get("montoDeudas")):
        amount = digits_only(data["montoDeudas"])
        if amount != "0":
            payload["montoDeudas"] = amount

    return payload


# =============================================================================
# Data authorization (consent)
# =============================================================================

def validate_full_name(name: str) -> str | None:
    name = clean_text(name)
    if not name:
        return "El nombre completo es obligatorio"
    if len(name) < 3:
        return "El nombre debe tener al menos 3 caracteres"
    if len(name) > 100:
        return "El nombre no puede exceder 100 caracteres"
    if not NAME_PATTERN.match(name):
        return "El nombre solo puede contener letras y espacios"
    return None


def validate_email(email: str) -> str | None:
    if not clean_text(email):
        return "El correo electrónico es obligatorio"
    if not is_valid_email(email):
        return "Ingrese un correo electrónico válido (ejemplo: correo@dominio.com)"
    return None


def validate_document_number(number: str, document_type: str) -> str | None:
    if not clean_text(number):
        return "El número de documento es obligatorio"

    compact = re.sub(r"\s", "", number)
    rule = DOCUMENT_RULES.get(document_type)
    if rule is None:
        return None

    minimum, maximum, digits = rule
    subject = _DOCUMENT_NAMES[document_type]
    if digits and not DIGITS_PATTERN.match(compact):
        return f"{subject} solo puede contener números"
    if not minimum <= len(compact) <= maximum:
        unit = "dígitos" if digits else "caracteres"
        return f"{subject} debe tener entre {minimum} y {maximum} {unit}"
    return None


def validate_birth_date(value: str, today: date | None = None) -> str | None:
    today = today or date.today()
    if not clean_text(value):
        return "La fecha de nacimiento es obligatoria"
    birth = _parse_date(value)
    if birth is None:
        return "Por favor verifique la fecha de nacimiento"
    if birth > today:
        return "La fecha de nacimiento no puede ser futura"

    age = age_on(birth, today)
    if age < MINIMUM_AGE:
        return "Debe ser mayor de 18 años para realizar esta solicitud"
    if age > MAXIMUM_AGE:
        return "Por favor verifique la fecha de nacimiento"
    return None


def validate_issue_date(value: str, today: date | None = None) -> str | None:
    today = today or date.today()
    if not clean_text(value):
        return "La fecha de expedición es obligatoria"
    issued = _parse_date(value)
    if issued is None:
        return "La fecha de expedición no es válida"
    if issued > today:
        return "La fecha de expedición no puede ser futura"
    if issued < _years_before(today, MAX_ISSUE_AGE_YEARS):
        return "La fecha de expedición no puede ser anterior a hace 50 años"
    return None


def validate_mobile(value: str) -> str | None:
    if not clean_text(value):
        return "El número de celular es obligatorio"
    compact = re.sub(r"[\s-]", "", value)
    if not DIGITS_PATTERN.match(compact):
        return "El celular solo puede contener números"
    if len(compact) != 10:
        return "El celular debe tener exactamente 10 dígitos"
    return None


def validate_address(value: str) -> str | None:
    address = clean_text(value)
    if not address:
        return "La dirección es obligatoria"
    if len(address) < 5:
        return "La dirección debe tener al menos 5 caracteres"
    if len(address) > 200:
        return "La dirección no puede exceder 200 caracteres"
    return None


def validate_consent(
    consent: ConsentSubmission,
    today: date | None = None,
) -> dict[str, str]:
    """
    Check the data-authorization form.

    Returns:
        {wire field name: message}; empty when the form can be sent
    """
    checks = {
        "nombreCompleto": validate_full_name(consent.nombre_completo),
        "email": validate_email(consent.email),
        "numeroDocumento": validate_document_number(
            consent.numero_documento, consent.tipo_documento
        ),
        "fechaNacimiento": validate_birth_date(consent.fecha_nacimiento, today),
        "fechaExpedicionDocumento": validate_issue_date(
            consent.fecha_expedicion_documento, today
        ),
        "celularNegocio": validate_mobile(consent.celular_negocio),
        "direccionNegocio": validate_address(consent.direccion_negocio),
    }
    errors = {name: message for name, message in checks.items() if message}

    if not clean_text(consent.ciudad_negocio):
        errors["ciudadNegocio"] = "Debe seleccionar una ciudad"
    if not consent.autorizacion_tratamiento_datos:
        errors["autorizacionTratamientoDatos"] = (
            "Debe aceptar la autorización de tratamiento de datos"
        )
    if not consent.autorizacion_contacto:
        errors["autorizacionContacto"] = "Debe aceptar la autorización de contacto"

    return errors
