import logging

from fastapi import APIRouter, Depends, Request, Response

from fisio_api.auth import check_auth, scoped_fisio_id
from fisio_api.models.paciente import PacienteIn
from fisio_api.routers.common import run_query

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pacientes"], dependencies=[Depends(check_auth)])


@router.get("/pacientes")
async def listar_pacientes(request: Request, fisio_id: str | None = None) -> list[dict]:
    """All patients of a therapist."""
    result = await run_query(
        "listar_pacientes",
        "Error al obtener los pacientes",
        "SELECT * FROM paciente_fisio WHERE fisio_id = ?",
        (scoped_fisio_id(request, fisio_id),),
    )
    return result.rows


@router.get("/paciente")
async def buscar_paciente(
    request: Request,
    nombre: str | None = None,
    fisio_id: str | None = None,
) -> list[dict]:
    """Search a therapist's patients by name.

    ``nombre`` is a case-insensitive regular expression matched against
    "nombre apellidos".
    """
    result = await run_query(
        "buscar_paciente",
        "Error al buscar el paciente",
        "SELECT * FROM paciente_fisio "
        "WHERE (COALESCE(nombre, '') || ' ' || COALESCE(apellidos, '')) {regex_op} ? "
        "AND fisio_id = ?",
        (nombre, scoped_fisio_id(request, fisio_id)),
    )
    return result.rows


@router.post("/new_paciente")
async def crear_paciente(request: Request, body: PacienteIn) -> Response:
    await run_query(
        "crear_paciente",
        "Error al insertar paciente",
        "INSERT INTO paciente_fisio "
        "(paciente_id, nombre, apellidos, direccion, telefono, fecha_nacimiento, fisio_id) "
        "VALUES (?, ?, ?, ?, ?, {date_param}, ?)",
        (
            body.paciente_id,
            body.nombre,
            body.apellidos,
            body.direccion,
            body.telefono,
            body.fecha_nacimiento,
            scoped_fisio_id(request, body.fisio_id),
        ),
    )
    return Response(status_code=200)


@router.put("/edit_paciente")
async def editar_paciente(request: Request, body: PacienteIn) -> Response:
    """Overwrite a patient's details. Scoped by paciente_id and fisio_id."""
    result = await run_query(
        "editar_paciente",
        "Error al editar paciente",
        "UPDATE paciente_fisio "
        "SET nombre = ?, apellidos = ?, direccion = ?, telefono = ?, fecha_nacimiento = {date_param} "
        "WHERE paciente_id = ? AND fisio_id = ?",
        (
            body.nombre,
            body.apellidos,
            body.direccion,
            body.telefono,
            body.fecha_nacimiento,
            body.paciente_id,
            scoped_fisio_id(request, body.fisio_id),
        ),
    )
    logger.debug("editar_paciente %s: %d row(s)", body.paciente_id, result.rowcount)
    return Response(status_code=200)


@router.delete("/delete_paciente")
async def eliminar_paciente(
    request: Request,
    paciente_id: str | None = None,
    fisio_id: str | None = None,
) -> Response:
    await run_query(
        "eliminar_paciente",
        "Error al eliminar paciente",
        "DELETE FROM paciente_fisio WHERE paciente_id = ? AND fisio_id = ?",
        (paciente_id, scoped_fisio_id(request, fisio_id)),
    )
    return Response(status_code=200)
