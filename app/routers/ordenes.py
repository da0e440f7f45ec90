"""
Phase execution router.

Mounts under ``/api/ordenes`` (prefix set in ``main.py``).

Endpoints
---------
GET  /{id}/fases            — Execution timeline of the order.
POST /{id}/fases/completar  — Complete the in-progress phase
                              (ADMIN/MANAGER/TECHNICIAN).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import GuardErrorResponse
from app.schemas.workflow import CompletarFaseRequest, TimelineResponse
from app.services import workflow_service
from app.services.auth_service import UsuarioActual, get_current_user, require_role
from app.utils.constants import ROLES_EJECUCION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Ejecución de fases"])


@router.get(
    "/{orden_id}/fases",
    response_model=TimelineResponse,
    summary="Línea de tiempo de fases de la orden",
    responses={
        404: {"description": "Orden no encontrada."},
        409: {"model": GuardErrorResponse, "description": "Estado de ejecución inconsistente."},
    },
)
def get_timeline(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[UsuarioActual, Depends(get_current_user)],
) -> TimelineResponse:
    return workflow_service.get_timeline(db, orden_id)


@router.post(
    "/{orden_id}/fases/completar",
    response_model=TimelineResponse,
    summary="Completar la fase en curso e iniciar la siguiente",
    description=(
        "Marca la fase en curso como completada, registra las observaciones y "
        "pasa la siguiente fase a 'en curso'. No existe la operación inversa."
    ),
    responses={
        404: {"description": "Orden no encontrada."},
        409: {"model": GuardErrorResponse, "description": "El flujo ya está completo."},
    },
)
def complete_fase(
    orden_id: Annotated[int, Path(ge=1, description="ID de la orden.")],
    payload: CompletarFaseRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UsuarioActual, Depends(require_role(*ROLES_EJECUCION))],
) -> TimelineResponse:
    logger.info(
        "POST /ordenes/%d/fases/completar usuario=%s", orden_id, current_user.username
    )
    return workflow_service.complete_current_phase(
        db, orden_id, payload.observaciones, usuario=current_user.username
    )
