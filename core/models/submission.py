# =============================================================================
# core/models/submission.py - Applicant Form Schemas
# =============================================================================
# These models mirror the two public forms:
# - ApplicationSubmission: credit request (solicitud de crédito)
# - ConsentSubmission: data-treatment and contact authorization
#
# Wire names are the upstream API's camelCase Spanish field names; Python
# attributes are snake_case and populated through aliases.
#
# Values arrive as raw form input (strings, possibly blank), so the models are
# deliberately lenient. Business rules live in core/services/validation.py,
# which reports every problem at once instead of failing on the first.
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Form inputs for amounts may be typed as text or numbers.
Amount = str | int | float


class ApplicationSubmission(BaseModel):
    """
    Credit request as collected by the application form.

    `id` and `fecha_solicitud` are assigned once the upstream (or the local
    fallback store) accepts the record and are never changed afterwards.

    Example:
        {
            "nombreCompleto": "Juan Pérez",
            "tipoDocumento": "CC",
            "numeroDocumento": "1234567890",
            "montoSolicitado": "5000000",
            "plazoMeses": "24",
            "tieneDeudas": "no",
            ...
        }
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    fecha_solicitud: str | None = Field(default=None, alias="fechaSolicitud")

    # Personal information
    nombre_completo: str = Field(default="", alias="nombreCompleto")
    tipo_documento: str = Field(default="", alias="tipoDocumento")
    numero_documento: str = Field(default="", alias="numeroDocumento")
    fecha_nacimiento: str = Field(default="", alias="fechaNacimiento")
    estado_civil: str = Field(default="", alias="estadoCivil")
    genero: str = Field(default="")
    telefono: str = Field(default="")
    email: str = Field(default="")
    direccion: str = Field(default="")
    ciudad: str = Field(default="")
    departamento: str = Field(default="")

    # Employment
    ocupacion: str = Field(default="")
    empresa: str = Field(default="")
    cargo_actual: str = Field(default="", alias="cargoActual")
    tipo_contrato: str = Field(default="", alias="tipoContrato")
    ingresos_mensuales: Amount = Field(default="", alias="ingresosMensuales")
    tiempo_empleo: str = Field(default="", alias="tiempoEmpleo")

    # Credit
    monto_solicitado: Amount = Field(default="", alias="montoSolicitado")
    plazo_meses: str = Field(default="", alias="plazoMeses")
    proposito: str = Field(default="")
    tiene_deudas: str = Field(default="", alias="tieneDeudas")
    monto_deudas: Amount | None = Field(default=None, alias="montoDeudas")

    # Personal references
    ref_nombre1: str = Field(default="", alias="refNombre1")
    ref_telefono1: str = Field(default="", alias="refTelefono1")
    ref_relacion1: str = Field(default="", alias="refRelacion1")
    ref_nombre2: str = Field(default="", alias="refNombre2")
    ref_telefono2: str = Field(default="", alias="refTelefono2")
    ref_relacion2: str = Field(default="", alias="refRelacion2")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with upstream field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AttachedDocument(BaseModel):
    """Reference to an uploaded supporting document (PDF)."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName")
    original_name: str = Field(..., alias="originalName")
    path: str
    url: str


class ConsentSubmission(BaseModel):
    """
    Data-authorization form: applicant identity, the two consent flags and
    where the applicant's business is located.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    fecha_solicitud: str | None = Field(default=None, alias="fechaSolicitud")

    email: str = Field(default="")

    # Both must be accepted before the form can be sent
    autorizacion_tratamiento_datos: bool = Field(
        default=False, alias="autorizacionTratamientoDatos"
    )
    autorizacion_contacto: bool = Field(default=False, alias="autorizacionContacto")

    nombre_completo: str = Field(default="", alias="nombreCompleto")
    tipo_documento: str = Field(default="CC", alias="tipoDocumento")
    numero_documento: str = Field(default="", alias="numeroDocumento")
    fecha_nacimiento: str = Field(default="", alias="fechaNacimiento")
    fecha_expedicion_documento: str = Field(default="", alias="fechaExpedicionDocumento")

    ciudad_negocio: str = Field(default="", alias="ciudadNegocio")
    direccion_negocio: str = Field(default="", alias="direccionNegocio")
    celular_negocio: str = Field(default="", alias="celularNegocio")

    documento: AttachedDocument | None = None

    estado: str | None = None
    user_id: str | None = Field(default=None, alias="userId")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with upstream field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)
