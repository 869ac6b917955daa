"""Treatment episodes linking a patient, a therapist and a diagnosis.

Every entry is addressed by (paciente_id, fisio_id, diagnostico_id).
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from fisio_api.auth import check_auth, scoped_fisio_id
from fisio_api.errors import DIAGNOSTICO_NO_ENCONTRADO, NotFound
from fisio_api.models.diagnostico import Diagnostico, HistorialIn
from fisio_api.routers.common import run_query

logger = logging.getLogger(__name__)

router = APIRouter(tags=["historial"], dependencies=[Depends(check_auth)])


@router.get("/historialPaciente", response_model=list[Diagnostico])
async def historial_paciente(
    request: Request,
    paciente_id: str | None = None,
    fisio_id: str | None = None,
):
    """Diagnoses recorded for a patient."""
    result = await run_query(
        "historial_paciente",
        "Error al obtener diagnósticos",
        "SELECT d.id, d.sistema_lesionado, d.zona_afectada "
        "FROM diagnostico_medico d "
        "JOIN paciente_historial_medico hm ON d.id = hm.diagnostico_id "
        "WHERE hm.paciente_id = ? AND hm.fisio_id = ?",
        (paciente_id, scoped_fisio_id(request, fisio_id)),
    )
    return result.rows


@router.get("/diagnostico_paciente")
async def obtener_diagnostico_paciente(
    request: Request,
    paciente_id: str | None = None,
    fisio_id: str | None = None,
    diagnostico_id: str | None = None,
) -> dict:
    result = await run_query(
        "obtener_diagnostico_paciente",
        "Error al obtener el diagnóstico del paciente",
        "SELECT diagnostico_id, fecha_diagnostico, fecha_inicio_tratamiento, "
        "fecha_fin_tratamiento, sintomas, medicamentos "
        "FROM paciente_historial_medico "
        "WHERE diagnostico_id = ? AND fisio_id = ? AND paciente_id = ?",
        (diagnostico_id, scoped_fisio_id(request, fisio_id), paciente_id),
    )
    return result.first() or {}


@router.post("/new_diagnostico_paciente", status_code=201)
async def crear_diagnostico_paciente(request: Request, body: HistorialIn) -> dict:
    """Record a new episode and return the stored row.

    No existence check: a duplicate key is left to the database constraints.
    """
    result = await run_query(
        "crear_diagnostico_paciente",
        "Error al insertar diagnóstico del paciente",
        "INSERT INTO paciente_historial_medico "
        "(paciente_id, fisio_id, diagnostico_id, fecha_diagnostico, "
        "fecha_inicio_tratamiento, fecha_fin_tratamiento, sintomas, medicamentos) "
        "VALUES (?, ?, ?, {date_param}, {date_param}, {date_param}, ?, ?) RETURNING *",
        (
            body.paciente_id,
            scoped_fisio_id(request, body.fisio_id),
            body.diagnostico_id,
            body.fecha_diagnostico,
            body.fecha_inicio_tratamiento,
            body.fecha_fin_tratamiento,
            body.sintomas,
            body.medicamentos,
        ),
    )
    return result.first()


@router.put("/edit_diagnostico_paciente")
async def editar_diagnostico_paciente(request: Request, body: HistorialIn) -> dict:
    result = await run_query(
        "editar_diagnostico_paciente",
        "Error al actualizar el diagnóstico del paciente",
        "UPDATE paciente_historial_medico "
        "SET fecha_diagnostico = {date_param}, fecha_inicio_tratamiento = {date_param}, "
        "fecha_fin_tratamiento = {date_param}, "
        "sintomas = ?, medicamentos = ? "
        "WHERE diagnostico_id = ? AND fisio_id = ? AND paciente_id = ? RETURNING *",
        (
            body.fecha_diagnostico,
            body.fecha_inicio_tratamiento,
            body.fecha_fin_tratamiento,
            body.sintomas,
            body.medicamentos,
            body.diagnostico_id,
            scoped_fisio_id(request, body.fisio_id),
            body.paciente_id,
        ),
    )
    if not result.rows:
        logger.warning(
            "editar_diagnostico_paciente: no entry for paciente %s diagnostico %s",
            body.paciente_id,
            body.diagnostico_id,
        )
        raise NotFound(DIAGNOSTICO_NO_ENCONTRADO)
    return result.first()


@router.delete("/delete_diagnostico_paciente")
async def eliminar_diagnostico_paciente(
    request: Request,
    paciente_id: str | None = None,
    fisio_id: str | None = None,
    diagnostico_id: str | None = None,
) -> Response:
    await run_query(
        "eliminar_diagnostico_paciente",
        "Error al eliminar el diagnostico",
        "DELETE FROM paciente_historial_medico "
        "WHERE paciente_id = ? AND fisio_id = ? AND diagnostico_id = ?",
        (paciente_id, scoped_fisio_id(request, fisio_id), diagnostico_id),
    )
    return Response(status_code=200)


@router.get("/ultimo_diagnostico_paciente")
async def ultimo_diagnostico_paciente(
    request: Request,
    paciente_id: str | None = None,
    fisio_id: str | None = None,
) -> dict:
    """Most recent diagnosis of a patient, or ``{}`` if there is none.

    Ordered by fecha_diagnostico (undated entries last); equal dates fall
    back to the highest diagnostico_id.
    """
    result = await run_query(
        "ultimo_diagnostico_paciente",
        "Error al obtener el último diagnóstico del paciente",
        "SELECT dm.id, dm.sistema_lesionado, dm.zona_afectada "
        "FROM diagnostico_medico dm "
        "JOIN paciente_historial_medico ph ON ph.diagnostico_id = dm.id "
        "WHERE ph.paciente_id = ? AND ph.fisio_id = ? "
        "ORDER BY ph.fecha_diagnostico DESC NULLS LAST, ph.diagnostico_id DESC "
        "LIMIT 1",
        (paciente_id, scoped_fisio_id(request, fisio_id)),
    )
    return result.first() or {}
