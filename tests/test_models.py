"""Tests for request/response models."""

import pytest
from pydantic import ValidationError

from fisio_api.models.diagnostico import Diagnostico, HistorialIn
from fisio_api.models.paciente import PacienteIn


class TestPacienteIn:
    def test_defaults(self):
        p = PacienteIn()
        assert p.paciente_id is None
        assert p.nombre is None
        assert p.fecha_nacimiento is None
        assert p.fisio_id is None

    def test_full(self):
        p = PacienteIn(
            paciente_id="p1",
            nombre="Ana",
            apellidos="Pérez",
            direccion="Calle Mayor 1",
            telefono="600111222",
            fecha_nacimiento="1985-03-02",
            fisio_id="fisio-1",
        )
        assert p.fecha_nacimiento == "1985-03-02"

    def test_numbers_coerced_to_str(self):
        p = PacienteIn(paciente_id=42, telefono=600111222)
        assert p.paciente_id == "42"
        assert p.telefono == "600111222"

    def test_date_left_unparsed(self):
        p = PacienteIn(fecha_nacimiento="2024-01-10T10:23:00.000Z")
        assert p.fecha_nacimiento == "2024-01-10T10:23:00.000Z"


class TestHistorialIn:
    def test_dates(self):
        h = HistorialIn(
            paciente_id="p1",
            fisio_id="fisio-1",
            diagnostico_id="LUM01",
            fecha_diagnostico="2024-01-10",
            fecha_inicio_tratamiento="2024-01-12",
        )
        assert h.fecha_diagnostico == "2024-01-10"
        assert h.fecha_inicio_tratamiento == "2024-01-12"
        assert h.fecha_fin_tratamiento is None

    def test_free_text(self):
        h = HistorialIn(sintomas="Dolor", medicamentos="Ibuprofeno")
        assert h.sintomas == "Dolor"
        assert h.medicamentos == "Ibuprofeno"


class TestDiagnostico:
    def test_requires_id(self):
        with pytest.raises(ValidationError):
            Diagnostico(sistema_lesionado="Articular")

    def test_optional_fields(self):
        d = Diagnostico(id="ROD03")
        assert d.sistema_lesionado is None
        assert d.zona_afectada is None
