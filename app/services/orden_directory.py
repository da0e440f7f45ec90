"""
SQLAlchemy-backed ``OrderDirectory`` over the ``orden_trabajo`` table.

``fases_completadas`` is a JSON array; it is always reassigned (never mutated
in place) so SQLAlchemy detects the change without ``MutableList``.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import transient_io
from app.engine.almacenes import OrderDirectory
from app.engine.fase import Fase, OrdenResumen, TipoServicio
from app.models.ejecucion_fase import EjecucionFase
from app.models.orden_trabajo import OrdenTrabajo

logger = logging.getLogger(__name__)


def _resumen_desde_fila(fila: OrdenTrabajo) -> OrdenResumen:
    return OrdenResumen(
        id=fila.id,
        codigo=fila.codigo,
        placa=fila.placa,
        tipo_servicio=TipoServicio(fila.tipo_servicio),
        cliente_nombre=fila.cliente_nombre or "",
        vehiculo_modelo=fila.vehiculo_modelo or "",
        estado_actual=fila.estado_actual or "",
        fases_completadas=list(fila.fases_completadas or []),
    )


class SqlOrderDirectory(OrderDirectory):
    """Active work orders searchable by plate or order code."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def search(self, query: str) -> list[OrdenResumen]:
        termino = (query or "").strip()
        if not termino:
            return []
        patron = f"%{termino}%"
        with transient_io("search_orders"):
            filas = (
                self.db.query(OrdenTrabajo)
                .filter(
                    or_(
                        OrdenTrabajo.placa.ilike(patron),
                        OrdenTrabajo.codigo.ilike(patron),
                    )
                )
                .order_by(OrdenTrabajo.codigo)
                .all()
            )
            logger.debug("search_orders: q=%r resultados=%d", termino, len(filas))
            return [_resumen_desde_fila(f) for f in filas]

    def _read(self, orden_id: int) -> OrdenResumen | None:
        with transient_io("get_order"):
            fila = self.db.get(OrdenTrabajo, orden_id)
            return _resumen_desde_fila(fila) if fila is not None else None

    def record_completion(
        self,
        orden_id: int,
        fase: Fase,
        observaciones: str,
        usuario: str | None = None,
    ) -> OrdenResumen:
        with transient_io("record_completion"):
            fila = self.db.get(OrdenTrabajo, orden_id)
            if fila is None:
                # Keeps the NotFoundError contract of ``get``.
                return self.get(orden_id)

            completadas = list(fila.fases_completadas or [])
            if fase.id not in completadas:
                completadas.append(fase.id)
            fila.fases_completadas = completadas
            fila.estado_actual = f"Completado: {fase.nombre}"

            self.db.add(
                EjecucionFase(
                    orden_trabajo_id=orden_id,
                    fase_id=fase.id,
                    fase_nombre=fase.nombre,
                    observaciones=observaciones or "",
                    registrado_por=usuario,
                )
            )
            self.db.flush()
            logger.debug("record_completion: orden=%d fase=%s", orden_id, fase.id)
            return _resumen_desde_fila(fila)

    def list_in_progress(self, tipo: TipoServicio) -> list[OrdenResumen]:
        # JSON emptiness is not portable across dialects; filtered here.
        with transient_io("list_in_progress"):
            filas = (
                self.db.query(OrdenTrabajo)
                .filter(OrdenTrabajo.tipo_servicio == tipo.value)
                .order_by(OrdenTrabajo.codigo)
                .all()
            )
            return [_resumen_desde_fila(f) for f in filas if f.fases_completadas]

    def list_executions(self, orden_id: int) -> list[EjecucionFase]:
        """Completion records of the order, oldest first."""
        with transient_io("list_executions"):
            return (
                self.db.query(EjecucionFase)
                .filter(EjecucionFase.orden_trabajo_id == orden_id)
                .order_by(EjecucionFase.fecha_fin, EjecucionFase.id)
                .all()
            )
