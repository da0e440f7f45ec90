"""SQLAlchemy-backed ``OverrideStore`` (one ``WorkflowExcepcion`` per order)."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.database import transient_io
from app.engine.almacenes import OverrideStore
from app.engine.fase import ExcepcionOrden, Fase, TipoServicio
from app.models.workflow_excepcion import WorkflowExcepcion
from app.models.workflow_excepcion_fase import WorkflowExcepcionFase

logger = logging.getLogger(__name__)


def _fase_desde_fila(fila: WorkflowExcepcionFase) -> Fase:
    return Fase(
        id=fila.fase_id,
        nombre=fila.nombre,
        descripcion=fila.descripcion or "",
        tiempo_estimado=fila.tiempo_estimado,
        orden=fila.orden,
        es_critica=bool(fila.es_critica),
        ejecutada=bool(fila.ejecutada),
        color=fila.color,
    )


def _excepcion_desde_fila(fila: WorkflowExcepcion) -> ExcepcionOrden:
    return ExcepcionOrden(
        orden_id=fila.orden_trabajo_id,
        tipo_servicio=TipoServicio(fila.tipo_servicio),
        fases=[_fase_desde_fila(f) for f in fila.fases],
        modificado_por=fila.modificado_por,
        motivo=fila.motivo,
        updated_at=fila.updated_at,
    )


class SqlOverrideStore(OverrideStore):
    """Exception store over a request-scoped ``Session``; writes only flush."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self, orden_id: int) -> WorkflowExcepcion | None:
        return (
            self.db.query(WorkflowExcepcion)
            .filter(WorkflowExcepcion.orden_trabajo_id == orden_id)
            .first()
        )

    def get(self, orden_id: int) -> ExcepcionOrden | None:
        with transient_io("get_override"):
            fila = self._query(orden_id)
            return _excepcion_desde_fila(fila) if fila is not None else None

    def put(self, excepcion: ExcepcionOrden) -> ExcepcionOrden:
        with transient_io("put_override"):
            fila = self._query(excepcion.orden_id)
            if fila is None:
                fila = WorkflowExcepcion(orden_trabajo_id=excepcion.orden_id)
                self.db.add(fila)
            fila.tipo_servicio = excepcion.tipo_servicio.value
            fila.modificado_por = excepcion.modificado_por
            fila.motivo = excepcion.motivo
            fila.updated_at = func.now()

            # Old children go first: (excepcion_id, fase_id) is unique.
            fila.fases.clear()
            self.db.flush()
            fila.fases.extend(
                WorkflowExcepcionFase(
                    fase_id=f.id,
                    nombre=f.nombre,
                    descripcion=f.descripcion,
                    tiempo_estimado=f.tiempo_estimado,
                    orden=f.orden,
                    es_critica=f.es_critica,
                    ejecutada=f.ejecutada,
                    color=f.color,
                )
                for f in excepcion.fases
            )
            self.db.flush()
            self.db.refresh(fila)
            logger.debug(
                "put_override: orden=%d fases=%d", excepcion.orden_id, len(excepcion.fases)
            )
            return _excepcion_desde_fila(fila)

    def delete(self, orden_id: int) -> bool:
        with transient_io("delete_override"):
            fila = self._query(orden_id)
            if fila is None:
                return False
            self.db.delete(fila)
            self.db.flush()
            return True
