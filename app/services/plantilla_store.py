"""
SQLAlchemy-backed ``TemplateStore``.

One ``WorkflowPlantilla`` row per service category with its phases as
``WorkflowPlantillaFase`` children.  Saving replaces the children wholesale;
``fase_id`` values survive the replacement so orders keep matching their
``fases_completadas`` against the template.

Writes only ``flush``; the caller owns the transaction (``workflow_service``
commits once per request so a failed save leaves nothing behind).
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.database import transient_io
from app.engine.almacenes import TemplateStore
from app.engine.fase import Fase, PlantillaFlujo, TipoServicio, etiqueta_tipo_servicio
from app.engine.validacion import assert_valid
from app.models.workflow_plantilla import WorkflowPlantilla
from app.models.workflow_plantilla_fase import WorkflowPlantillaFase
from app.utils.plantillas_default import PLANTILLAS_DEFAULT

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row <-> domain mapping
# ---------------------------------------------------------------------------


def _fase_desde_fila(fila: WorkflowPlantillaFase) -> Fase:
    return Fase(
        id=fila.fase_id,
        nombre=fila.nombre,
        descripcion=fila.descripcion or "",
        tiempo_estimado=fila.tiempo_estimado,
        orden=fila.orden,
        es_critica=bool(fila.es_critica),
        ejecutada=False,
        color=fila.color,
    )


def _fila_desde_fase(fase: Fase) -> WorkflowPlantillaFase:
    return WorkflowPlantillaFase(
        fase_id=fase.id,
        nombre=fase.nombre,
        descripcion=fase.descripcion,
        tiempo_estimado=fase.tiempo_estimado,
        orden=fase.orden,
        es_critica=fase.es_critica,
        color=fase.color,
    )


def _plantilla_desde_fila(fila: WorkflowPlantilla) -> PlantillaFlujo:
    return PlantillaFlujo(
        tipo_servicio=TipoServicio(fila.tipo_servicio),
        fases=[_fase_desde_fila(f) for f in fila.fases],
        nombre=fila.nombre,
        descripcion=fila.descripcion,
        updated_at=fila.updated_at,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SqlTemplateStore(TemplateStore):
    """Template store over a request-scoped ``Session``."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self, tipo: TipoServicio) -> WorkflowPlantilla | None:
        return (
            self.db.query(WorkflowPlantilla)
            .filter(WorkflowPlantilla.tipo_servicio == tipo.value)
            .first()
        )

    def _read(self, tipo: TipoServicio) -> PlantillaFlujo | None:
        with transient_io("get_template"):
            fila = self._query(tipo)
            if fila is None:
                logger.debug("get_template: tipo=%s sin plantilla", tipo.value)
                return None
            return _plantilla_desde_fila(fila)

    def _write(self, tipo: TipoServicio, fases: list[Fase]) -> PlantillaFlujo:
        with transient_io("save_template"):
            fila = self._query(tipo)
            if fila is None:
                fila = WorkflowPlantilla(
                    tipo_servicio=tipo.value,
                    nombre=f"Flujo de {etiqueta_tipo_servicio(tipo)}",
                    descripcion="",
                )
                self.db.add(fila)
            self._replace_fases(fila, fases)
            fila.updated_at = func.now()
            self.db.flush()
            self.db.refresh(fila)
            return _plantilla_desde_fila(fila)

    def _replace_fases(self, fila: WorkflowPlantilla, fases: list[Fase]) -> None:
        # Delete the old children first: (plantilla_id, fase_id) is unique and
        # the unit of work would otherwise insert before deleting.
        fila.fases.clear()
        self.db.flush()
        fila.fases.extend(_fila_desde_fase(f) for f in fases)

    def list_templates(self) -> list[PlantillaFlujo]:
        """Every stored template, ordered by category key."""
        with transient_io("list_templates"):
            filas = (
                self.db.query(WorkflowPlantilla)
                .order_by(WorkflowPlantilla.tipo_servicio)
                .all()
            )
            return [_plantilla_desde_fila(f) for f in filas]

    def seed_defaults(self) -> int:
        """Insert the bundled default template of every category that has none.

        Existing templates are never overwritten.

        Returns:
            Number of templates created.
        """
        creadas = 0
        with transient_io("seed_defaults"):
            for datos in PLANTILLAS_DEFAULT:
                tipo = TipoServicio(datos["tipo_servicio"])
                if self._query(tipo) is not None:
                    continue
                fases = [Fase(**f) for f in datos["fases"]]
                assert_valid(fases)
                fila = WorkflowPlantilla(
                    tipo_servicio=tipo.value,
                    nombre=datos["nombre"],
                    descripcion=datos["descripcion"],
                )
                fila.fases = [_fila_desde_fase(f) for f in fases]
                self.db.add(fila)
                creadas += 1
            self.db.flush()
        if creadas:
            logger.info("seed_defaults: %d plantillas creadas", creadas)
        return creadas
