"""
Workflow configuration router.

Mounts under ``/api/workflows`` (prefix set in ``main.py``).

All endpoints require a valid JWT (``get_current_user``).  Saving a template
requires ``ADMIN``/``MANAGER``; saving or resetting an order exception
requires ``ADMIN``/``MANAGER``/``OPERATOR`` (enforced via ``require_role``).

Domain errors are not translated here: ``WorkflowValidationError`` (422),
``StructuralGuardError`` (409), ``NotFoundError`` (404) and
``TransientIOError`` (503) are mapped by the handlers in ``main.py``.

Endpoints
---------
GET    /tipos-servicio                 — Categories with template summary.
GET    /plantillas/{tipo}              — Template of a category (global mode).
PUT    /plantillas/{tipo}              — Save the template (ADMIN/MANAGER).
GET    /plantillas/{tipo}/exportar     — Template as ``.xlsx``.
GET    /ordenes?q=                     — Search active orders by plate or code.
GET    /ordenes/{id}                   — Order with its effective list.
GET    /ordenes/{id}/exportar          — Effective list of the order as ``.xlsx``.
PUT    /ordenes/{id}                   — Save the order exception.
DELETE /ordenes/{id}/excepcion         — Reset the order to its template.
POST   /editor                         — Apply one editor operation.
POST   /validar                        — Save-time validation without saving.
"""

from __future__ import annotations

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.engine.fase import ModoEdicion, TipoServicio
from app.schemas.common import GuardErrorResponse, ValidationErrorResponse
from app.schemas.workflow import (
    GuardarExcepcionRequest,
    GuardarPlantillaRequest,
    ListaEfectivaResponse,
    OperacionEditorRequest,
    OperacionEditorResponse,
    OrdenFlujoResponse,
    OrdenResumenResponse,
    PlantillaResponse,
    TipoServicioItem,
    ValidacionResponse,
    ValidarRequest,
)
from app.services import workflow_service
from app.services.auth_service import UsuarioActual, get_current_user, require_role
from app.utils.constants import ROLES_EXCEPCION, ROLES_PLANTILLA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Workflows"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_GUARD_RESPONSES = {
    401: {"description": "Token JWT ausente o inválido."},
    404: {"description": "Orden o plantilla no encontrada."},
    409: {"model": GuardErrorResponse, "description": "Fase crítica o ejecutada protegida."},
    422: {"model": ValidationErrorResponse, "description": "Errores de validación del flujo."},
}


def _xlsx_response(filename: str, file_bytes: bytes) -> StreamingResponse:
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Content-Length": str(len(file_bytes)),
    }
    return StreamingResponse(io.BytesIO(file_bytes), media_type=_XLSX_MEDIA_TYPE, headers=headers)


# ---------------------------------------------------------------------------
# Global mode — templates
# ---------------------------------------------------------------------------


@router.get(
    "/tipos-servicio",
    response_model=list[TipoServicioItem],
    summary="Tipos de servicio con resumen de su plantilla",
)
def list_tipos_servicio(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> list[TipoServicioItem]:
    return workflow_service.list_service_types(db)


@router.get(
    "/plantillas/{tipo}",
    response_model=PlantillaResponse,
    summary="Plantilla de fases de un tipo de servicio",
    responses={404: {"description": "El tipo de servicio no tiene plantilla."}},
)
def get_plantilla(
    tipo: Annotated[TipoServicio, Path(description="Tipo de servicio.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> PlantillaResponse:
    return workflow_service.plantilla_response(db, tipo)


@router.put(
    "/plantillas/{tipo}",
    response_model=ListaEfectivaResponse,
    summary="Guardar la plantilla global (afecta a futuras órdenes)",
    description=(
        "Valida y reemplaza la lista de fases de la plantilla. Las excepciones "
        "existentes no se modifican; las órdenes ya iniciadas sin excepción "
        "conservan su flujo actual. Requiere rol ADMIN o MANAGER."
    ),
    responses=_GUARD_RESPONSES,
)
def save_plantilla(
    tipo: Annotated[TipoServicio, Path(description="Tipo de servicio.")],
    payload: GuardarPlantillaRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UsuarioActual, Depends(require_role(*ROLES_PLANTILLA))],
) -> ListaEfectivaResponse:
    logger.info(
        "PUT /workflows/plantillas/%s fases=%d usuario=%s",
        tipo.value, len(payload.fases), current_user.username,
    )
    lista = workflow_service.save(
        db,
        ModoEdicion.GLOBAL,
        workflow_service.fases_desde_schema(payload.fases),
        tipo_servicio=tipo,
        usuario=current_user.username,
    )
    return workflow_service.lista_response(lista)


@router.get(
    "/plantillas/{tipo}/exportar",
    summary="Exportar la plantilla a Excel",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Archivo Excel generado exitosamente.",
            "content": {_XLSX_MEDIA_TYPE: {}},
        },
        404: {"description": "El tipo de servicio no tiene plantilla."},
    },
)
def export_plantilla(
    tipo: Annotated[TipoServicio, Path(description="Tipo de servicio.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> StreamingResponse:
    filename, file_bytes = workflow_service.export_template_xlsx(db, tipo)
    return _xlsx_response(filename, file_bytes)


# ---------------------------------------------------------------------------
# Exception mode — orders
# ---------------------------------------------------------------------------


@router.get(
    "/ordenes",
    response_model=list[OrdenResumenResponse],
    summary="Buscar órdenes activas por placa o número de orden",
)
def search_ordenes(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
    q: Annotated[
        str,
        Query(description="Placa o código de orden (sin distinguir mayúsculas).", max_length=50),
    ] = "",
) -> list[OrdenResumenResponse]:
    ordenes = workflow_service.search_orders(db, q)
    return [OrdenResumenResponse.model_validate(o) for o in ordenes]


@router.get(
    "/ordenes/{orden_id}",
    response_model=OrdenFlujoResponse,
    summary="Orden con su lista efectiva de fases",
    responses={404: {"description": "Orden no encontrada."}},
)
def get_orden(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> OrdenFlujoResponse:
    return workflow_service.orden_flujo_response(db, orden_id)


@router.get(
    "/ordenes/{orden_id}/exportar",
    summary="Exportar la lista efectiva de la orden a Excel",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Archivo Excel generado exitosamente.",
            "content": {_XLSX_MEDIA_TYPE: {}},
        },
        404: {"description": "Orden no encontrada."},
    },
)
def export_orden(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> StreamingResponse:
    filename, file_bytes = workflow_service.export_order_xlsx(db, orden_id)
    return _xlsx_response(filename, file_bytes)


@router.put(
    "/ordenes/{orden_id}",
    response_model=OrdenFlujoResponse,
    summary="Guardar la excepción de una orden",
    description=(
        "Guarda la lista de fases sólo para esta orden; la plantilla global no "
        "se modifica. Las marcas de ejecución se recalculan en el servidor. "
        "Requiere rol ADMIN, MANAGER u OPERATOR."
    ),
    responses=_GUARD_RESPONSES,
)
def save_excepcion(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    payload: GuardarExcepcionRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UsuarioActual, Depends(require_role(*ROLES_EXCEPCION))],
) -> OrdenFlujoResponse:
    logger.info(
        "PUT /workflows/ordenes/%d fases=%d usuario=%s",
        orden_id, len(payload.fases), current_user.username,
    )
    workflow_service.save(
        db,
        ModoEdicion.EXCEPCION,
        workflow_service.fases_desde_schema(payload.fases),
        orden_id=orden_id,
        usuario=current_user.username,
        motivo=payload.motivo,
    )
    return workflow_service.orden_flujo_response(db, orden_id)


@router.delete(
    "/ordenes/{orden_id}/excepcion",
    response_model=ListaEfectivaResponse,
    summary="Restablecer la orden a la plantilla",
    description="Descarta la excepción de la orden. Esta acción no se puede deshacer.",
    responses={404: {"description": "Orden no encontrada."}},
)
def reset_excepcion(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UsuarioActual, Depends(require_role(*ROLES_EXCEPCION))],
) -> ListaEfectivaResponse:
    logger.info("DELETE /workflows/ordenes/%d/excepcion usuario=%s", orden_id, current_user.username)
    lista = workflow_service.reset_exception(db, orden_id)
    return workflow_service.lista_response(lista)


# ---------------------------------------------------------------------------
# Stateless editor
# ---------------------------------------------------------------------------


@router.post(
    "/editor",
    response_model=OperacionEditorResponse,
    summary="Aplicar una operación del editor a una lista sin guardar",
    description=(
        "Reordenar, mover, agregar, actualizar o eliminar una fase. No persiste "
        "nada: el cliente envía su lista y recibe la nueva."
    ),
    responses=_GUARD_RESPONSES,
)
def edit_fases(
    payload: OperacionEditorRequest,
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> OperacionEditorResponse:
    cambios = payload.cambios.model_dump(exclude_unset=True) if payload.cambios else None
    fases, afectada = workflow_service.edit_list(
        workflow_service.fases_desde_schema(payload.fases),
        payload.accion,
        fase_id=payload.fase_id,
        posicion=payload.posicion,
        nuevo_orden=payload.nuevo_orden,
        borrador=workflow_service.borrador_desde_schema(payload.borrador),
        cambios=cambios,
    )
    return OperacionEditorResponse(
        fases=[workflow_service.fase_response(f) for f in fases],
        fase=workflow_service.fase_response(afectada) if afectada else None,
        resumen=workflow_service.resumen(fases),
    )


@router.post(
    "/validar",
    response_model=ValidacionResponse,
    summary="Validar una lista de fases sin guardarla",
)
def validate_fases(
    payload: ValidarRequest,
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> ValidacionResponse:
    errores = workflow_service.validate(workflow_service.fases_desde_schema(payload.fases))
    return workflow_service.validacion_response(errores)
