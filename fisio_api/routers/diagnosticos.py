"""Read-only access to the diagnosis catalog."""

from fastapi import APIRouter, Depends

from fisio_api.auth import check_auth
from fisio_api.models.diagnostico import Diagnostico
from fisio_api.routers.common import run_query

router = APIRouter(tags=["diagnosticos"], dependencies=[Depends(check_auth)])


@router.get("/diagnosticosDisponibles", response_model=list[Diagnostico])
async def listar_diagnosticos():
    result = await run_query(
        "listar_diagnosticos",
        "Error al obtener diagnósticos",
        "SELECT id, sistema_lesionado, zona_afectada FROM diagnostico_medico",
    )
    return result.rows


@router.get("/diagnosticoById", response_model=list[Diagnostico])
async def buscar_diagnostico(id: str | None = None):
    """Catalog entries whose id matches ``id`` as a case-insensitive regex.

    Without ``id`` nothing matches; ``id=`` (empty) matches every entry.
    """
    result = await run_query(
        "buscar_diagnostico",
        "Error al obtener el diagnóstico buscado",
        "SELECT id, sistema_lesionado, zona_afectada FROM diagnostico_medico "
        "WHERE id {regex_op} ?",
        (id,),
    )
    return result.rows
