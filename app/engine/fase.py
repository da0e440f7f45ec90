"""
Phase data model for the workflow engine.

Pure data containers — no I/O, no SQLAlchemy.  Stores translate ORM rows into
these objects and back, and every engine component (editor, resolver,
execution) works exclusively on them.

Public API
----------
- ``TipoServicio``  — closed enum of service categories.
- ``EstadoFase``    — execution state of a phase within a committed list.
- ``ModoEdicion``   — global template vs. per-order exception.
- ``OrigenLista``   — where an effective list came from.
- ``Fase``          — one step of a workflow.
- ``FaseBorrador``  — draft used when appending a phase.
- ``PlantillaFlujo``, ``ExcepcionOrden``, ``OrdenResumen``, ``ListaEfectiva``.
- helpers: ``renumerar``, ``ordenes_contiguos``, ``calcular_tiempo_total``,
  ``formatear_tiempo``, ``generar_id_temporal``, ``generar_id_permanente``,
  ``es_id_temporal``.

Design notes
------------
- Label and colour lookups over the enums are functions with an exhaustive
  ``if`` chain ending in ``assert_never`` so a new member is caught by the
  type checker instead of falling through a string-keyed dict.
- ``Fase`` is a mutable dataclass, but the editor never mutates the caller's
  instances: it clones with ``Fase.copy`` before every change.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, assert_never

from app.utils.constants import (
    COLOR_FASE_DEFAULT,
    NOMBRE_FASE_DEFAULT,
    PREFIJO_ID_PERMANENTE,
    PREFIJOS_ID_TEMPORAL,
    TIEMPO_FASE_DEFAULT,
)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TipoServicio(str, Enum):
    """Service category; each one owns exactly one workflow template."""

    PREVENTIVO = "preventivo"
    CORRECTIVO = "correctivo"
    EXPRESS = "express"
    GARANTIA = "garantia"


class EstadoFase(str, Enum):
    """Execution state: ``PENDIENTE → EN_CURSO → COMPLETADO`` (terminal)."""

    PENDIENTE = "pendiente"
    EN_CURSO = "en_curso"
    COMPLETADO = "completado"


class ModoEdicion(str, Enum):
    GLOBAL = "global"
    EXCEPCION = "excepcion"


class OrigenLista(str, Enum):
    PLANTILLA = "plantilla"
    EXCEPCION = "excepcion"


def etiqueta_tipo_servicio(tipo: TipoServicio) -> str:
    """Human-readable label for a service category."""
    if tipo is TipoServicio.PREVENTIVO:
        return "Mantenimiento Preventivo"
    if tipo is TipoServicio.CORRECTIVO:
        return "Reparación Correctiva"
    if tipo is TipoServicio.EXPRESS:
        return "Servicio Express"
    if tipo is TipoServicio.GARANTIA:
        return "Servicio de Garantía"
    assert_never(tipo)


def etiqueta_estado(estado: EstadoFase) -> str:
    if estado is EstadoFase.PENDIENTE:
        return "Pendiente"
    if estado is EstadoFase.EN_CURSO:
        return "En curso"
    if estado is EstadoFase.COMPLETADO:
        return "Completada"
    assert_never(estado)


def color_estado(estado: EstadoFase) -> str:
    """Badge colour for the timeline (hex, matches the frontend palette)."""
    if estado is EstadoFase.PENDIENTE:
        return "#9CA3AF"
    if estado is EstadoFase.EN_CURSO:
        return "#3B82F6"
    if estado is EstadoFase.COMPLETADO:
        return "#10B981"
    assert_never(estado)


# ---------------------------------------------------------------------------
# Phase
# ---------------------------------------------------------------------------


@dataclass
class Fase:
    """One step in a service workflow.

    Attributes:
        id: Stable identifier, unique within its owning list.
        nombre: Phase name; must be non-blank to be saved.
        descripcion: Free text, may be empty.
        tiempo_estimado: Estimated duration in minutes (>= 1 to be saved).
        orden: 1-based position; contiguous and unique within the list.
        es_critica: Critical phases can never be removed from any list.
        ejecutada: Set only when the phase is completed on a real order.
        color: Cosmetic hex colour, no behavioural effect.
    """

    id: str
    nombre: str
    descripcion: str = ""
    tiempo_estimado: int = TIEMPO_FASE_DEFAULT
    orden: int = 0
    es_critica: bool = False
    ejecutada: bool = False
    color: str | None = None

    def copy(self, **cambios) -> Fase:
        return dataclasses.replace(self, **cambios)

    def mismo_contenido(self, otra: Fase) -> bool:
        """True when the historical content (name, description, time) matches."""
        return (
            self.nombre == otra.nombre
            and self.descripcion == otra.descripcion
            and self.tiempo_estimado == otra.tiempo_estimado
        )


@dataclass
class FaseBorrador:
    """Draft accepted by ``PhaseListEditor.add_phase``."""

    nombre: str = NOMBRE_FASE_DEFAULT
    descripcion: str = ""
    tiempo_estimado: int = TIEMPO_FASE_DEFAULT
    es_critica: bool = False
    color: str | None = COLOR_FASE_DEFAULT


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass
class PlantillaFlujo:
    """Global default phase list for one service category."""

    tipo_servicio: TipoServicio
    fases: list[Fase]
    nombre: str = ""
    descripcion: str = ""
    updated_at: datetime | None = None


@dataclass
class ExcepcionOrden:
    """Per-order phase list that diverges from the category template."""

    orden_id: int
    tipo_servicio: TipoServicio
    fases: list[Fase]
    modificado_por: str | None = None
    motivo: str | None = None
    updated_at: datetime | None = None


@dataclass
class OrdenResumen:
    """Active order as supplied by the order directory.

    ``fases_completadas`` is read-only ground truth for which phases have
    been executed on the order.
    """

    id: int
    codigo: str
    placa: str
    tipo_servicio: TipoServicio
    cliente_nombre: str = ""
    vehiculo_modelo: str = ""
    estado_actual: str = ""
    fases_completadas: list[str] = field(default_factory=list)


@dataclass
class ListaEfectiva:
    """Phase list shown and edited for a given context (never stored)."""

    fases: list[Fase]
    origen: OrigenLista
    tipo_servicio: TipoServicio
    orden_id: int | None = None
    fases_huerfanas: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def clonar(fases: Iterable[Fase]) -> list[Fase]:
    return [f.copy() for f in fases]


def ordenar(fases: Iterable[Fase]) -> list[Fase]:
    return sorted(fases, key=lambda f: f.orden)


def renumerar(fases: Iterable[Fase]) -> list[Fase]:
    """Return clones of *fases* in their current sequence with ``orden`` = 1..N."""
    return [f.copy(orden=i) for i, f in enumerate(fases, start=1)]


def ordenes_contiguos(fases: Iterable[Fase]) -> bool:
    """True when the ``orden`` values are exactly {1..N}."""
    ordenes = [f.orden for f in fases]
    return sorted(ordenes) == list(range(1, len(ordenes) + 1))


def calcular_tiempo_total(fases: Iterable[Fase]) -> int:
    return sum(f.tiempo_estimado for f in fases)


def formatear_tiempo(minutos: int) -> str:
    """Format minutes as ``"45 min"``, ``"2h"`` or ``"2h 30min"``."""
    horas, mins = divmod(minutos, 60)
    if horas == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{horas}h"
    return f"{horas}h {mins}min"


def generar_id_temporal() -> str:
    return f"{PREFIJOS_ID_TEMPORAL[0]}{uuid.uuid4().hex[:12]}"


def generar_id_permanente() -> str:
    return f"{PREFIJO_ID_PERMANENTE}{uuid.uuid4().hex[:12]}"


def es_id_temporal(fase_id: str) -> bool:
    return fase_id.startswith(PREFIJOS_ID_TEMPORAL)
