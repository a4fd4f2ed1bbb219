# =============================================================================
# tests/test_validation.py - Form Validation Tests
# =============================================================================
# Tests for core/services/validation.py (both public forms).
# All dates are checked against a fixed "today".
#
# Run with: pytest tests/test_validation.py -v
# =============================================================================

import pytest

from core.models.submission import ApplicationSubmission, ConsentSubmission
from core.services.validation import (
    prepare_application_payload,
    validate_application,
    validate_birth_date,
    validate_consent,
    validate_document_number,
    validate_issue_date,
    validate_mobile,
)

from tests.conftest import TODAY


# =============================================================================
# Credit Request
# =============================================================================

class TestValidateApplication:
    """Tests for validate_application."""

    def test_valid_application(self, valid_application):
        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)
        assert result.valid
        assert result.errors == []

    def test_debts_require_amount(self, valid_application):
        valid_application.update(tieneDeudas="si", montoDeudas="")

        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)

        assert not result.valid
        assert 'El campo montoDeudas es requerido cuando tieneDeudas es "si"' in result.errors

    def test_errors_are_collected(self, valid_application):
        valid_application.update(email="no-es-email", tipoDocumento="XX", fechaNacimiento="2015-01-01")

        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)

        assert len(result.errors) == 3

    def test_minor_is_rejected(self, valid_application):
        valid_application["fechaNacimiento"] = "2007-06-02"  # turns 18 tomorrow

        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)

        assert "El solicitante debe ser mayor de 18 años" in result.errors

    def test_eighteenth_birthday_is_accepted(self, valid_application):
        valid_application["fechaNacimiento"] = "2007-06-01"
        assert validate_application(ApplicationSubmission(**valid_application), today=TODAY).valid

    def test_invalid_select_value(self, valid_application):
        valid_application["plazoMeses"] = "18"

        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)

        assert any(e.startswith("Plazo inválido") for e in result.errors)

    def test_missing_fields_are_listed(self, valid_application):
        valid_application.update(empresa="  ", refNombre2="")

        result = validate_application(ApplicationSubmission(**valid_application), today=TODAY)

        assert "Faltan campos requeridos: empresa, refNombre2" in result.errors


class TestPrepareApplicationPayload:
    """Tests for prepare_application_payload."""

    def test_normalization(self, valid_application):
        payload = prepare_application_payload(ApplicationSubmission(**valid_application))

        assert payload["nombreCompleto"] == "Juan Pérez Gómez"
        assert payload["email"] == "juan.perez@example.com"
        assert payload["ingresosMensuales"] == "3500000"
        assert payload["montoSolicitado"] == "10000000"
        assert "montoDeudas" not in payload

    def test_debt_amount_included_when_declared(self, valid_application):
        valid_application.update(tieneDeudas="si", montoDeudas="$ 2.000.000")

        payload = prepare_application_payload(ApplicationSubmission(**valid_application))

        assert payload["montoDeudas"] == "2000000"

    def test_zero_debt_amount_is_dropped(self, valid_application):
        valid_application.update(tieneDeudas="si", montoDeudas="0")

        payload = prepare_application_payload(ApplicationSubmission(**valid_application))

        assert "montoDeudas" not in payload

    def test_debt_amount_ignored_without_debts(self, valid_application):
        valid_application.update(tieneDeudas="no", montoDeudas="500000")

        payload = prepare_application_payload(ApplicationSubmission(**valid_application))

        assert "montoDeudas" not in payload


# =============================================================================
# Data Authorization
# =============================================================================

class TestValidateConsent:
    """Tests for validate_consent and its field rules."""

    def test_valid_consent(self, valid_consent):
        assert validate_consent(ConsentSubmission(**valid_consent), today=TODAY) == {}

    def test_consents_must_be_accepted(self, valid_consent):
        valid_consent.update(autorizacionTratamientoDatos=False, autorizacionContacto=False)

        errors = validate_consent(ConsentSubmission(**valid_consent), today=TODAY)

        assert set(errors) == {"autorizacionTratamientoDatos", "autorizacionContacto"}

    def test_name_with_digits(self, valid_consent):
        valid_consent["nombreCompleto"] = "María 2"

        errors = validate_consent(ConsentSubmission(**valid_consent), today=TODAY)

        assert errors["nombreCompleto"] == "El nombre solo puede contener letras y espacios"

    def test_city_required(self, valid_consent):
        valid_consent["ciudadNegocio"] = ""

        errors = validate_consent(ConsentSubmission(**valid_consent), today=TODAY)

        assert errors == {"ciudadNegocio": "Debe seleccionar una ciudad"}

    @pytest.mark.parametrize(
        "number,document_type,ok",
        [
            ("12345678", "CC", True),
            ("1234567", "CC", False),
            ("12345678901", "CC", False),
            ("12AB5678", "CC", False),
            ("AB1234", "CE", True),
            ("AB123", "CE", False),
            ("PA1234567890", "PA", True),
            ("PA12345678901", "PA", False),
        ],
    )
    def test_document_number(self, number, document_type, ok):
        assert (validate_document_number(number, document_type) is None) is ok

    def test_birth_date_bounds(self):
        assert validate_birth_date("2030-01-01", TODAY) == "La fecha de nacimiento no puede ser futura"
        assert validate_birth_date("1900-01-01", TODAY) == "Por favor verifique la fecha de nacimiento"
        assert validate_birth_date("2010-01-01", TODAY).startswith("Debe ser mayor de 18")
        assert validate_birth_date("1990-01-01", TODAY) is None

    def test_issue_date_bounds(self):
        assert validate_issue_date("2025-06-02", TODAY) == "La fecha de expedición no puede ser futura"
        assert validate_issue_date("1975-05-31", TODAY).endswith("hace 50 años")
        assert validate_issue_date("1975-06-01", TODAY) is None

    def test_mobile_ignores_spaces_and_dashes(self):
        assert validate_mobile("300-123 4567") is None
        assert validate_mobile("300123456") == "El celular debe tener exactamente 10 dígitos"
        assert validate_mobile("300abc4567") == "El celular solo puede contener números"
