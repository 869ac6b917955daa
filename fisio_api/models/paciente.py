from pydantic import BaseModel, ConfigDict


class PacienteIn(BaseModel):
    """Body of /new_paciente and /edit_paciente.

    Fields are optional: a missing value is bound as NULL and the database
    decides whether that is acceptable.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    paciente_id: str | None = None
    nombre: str | None = None
    apellidos: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    fecha_nacimiento: str | None = None
    fisio_id: str | None = None
