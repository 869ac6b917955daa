from pydantic import BaseModel, ConfigDict


class Diagnostico(BaseModel):
    """Catalog entry: the injured body system and zone."""
    id: str
    sistema_lesionado: str | None = None
    zona_afectada: str | None = None


class HistorialIn(BaseModel):
    """Body of /new_diagnostico_paciente and /edit_diagnostico_paciente."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    paciente_id: str | None = None
    fisio_id: str | None = None
    diagnostico_id: str | None = None
    fecha_diagnostico: str | None = None
    fecha_inicio_tratamiento: str | None = None
    fecha_fin_tratamiento: str | None = None
    sintomas: str | None = None
    medicamentos: str | None = None
