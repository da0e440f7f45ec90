"""
Pydantic v2 schemas for the workflow configuration and execution endpoints.

These models define the JSON shapes of ``app/routers/workflows.py`` and
``app/routers/ordenes.py``.  They stay free of SQLAlchemy imports; the
service layer converts between them and the engine dataclasses.

Boundary rules
--------------
Length limits (name ≤ 50, description ≤ 200, minutes ≤ 480) are enforced
here.  The business rules (non-blank name, at least 1 minute, at least two
phases …) are NOT: an edit session may legitimately hold an incomplete
phase, so they are checked by the engine on save and reported as a list of
``ErrorCampoSchema`` instead of a generic request-validation error.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.engine.editor import AccionEditor
from app.engine.fase import EstadoFase, OrigenLista, TipoServicio
from app.schemas.common import ErrorCampoSchema
from app.utils.constants import (
    COLOR_FASE_DEFAULT,
    DESCRIPCION_FASE_MAX,
    NOMBRE_FASE_MAX,
    TIEMPO_FASE_DEFAULT,
    TIEMPO_FASE_MAX,
)


# ---------------------------------------------------------------------------
# Phase
# ---------------------------------------------------------------------------


class FaseSchema(BaseModel):
    """One phase as exchanged with the editor UI.

    Attributes:
        id: Phase identifier; unsaved phases use ``fase-temp-…``.
        nombre: Phase name (may be blank while editing, required on save).
        descripcion: Free text.
        tiempo_estimado: Estimated minutes (0–480 while editing, ≥ 1 on save).
        orden: 1-based position.
        es_critica: Critical phases can never be deleted.
        ejecutada: Read-only for clients; re-derived by the server on save.
        color: Hex display colour.
    """

    id: str = Field(..., min_length=1, max_length=50, description="ID de la fase.")
    nombre: str = Field(default="", max_length=NOMBRE_FASE_MAX, description="Nombre de la fase.")
    descripcion: str = Field(
        default="", max_length=DESCRIPCION_FASE_MAX, description="Descripción breve."
    )
    tiempo_estimado: int = Field(
        default=TIEMPO_FASE_DEFAULT,
        ge=0,
        le=TIEMPO_FASE_MAX,
        description="Tiempo estimado en minutos (máximo 8 horas).",
    )
    orden: int = Field(default=0, ge=0, description="Posición en el flujo (base 1).")
    es_critica: bool = Field(default=False, description="Fase crítica (no eliminable).")
    ejecutada: bool = Field(default=False, description="Fase ya ejecutada en la orden.")
    color: str | None = Field(default=None, max_length=9, description="Color hex.")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "fase-1",
                "nombre": "Recepción",
                "descripcion": "Ingreso del vehículo y verificación de datos",
                "tiempo_estimado": 30,
                "orden": 1,
                "es_critica": True,
                "ejecutada": False,
                "color": "#3B82F6",
            }
        },
    )


class FaseResponse(FaseSchema):
    """Phase plus the delete guard, so the UI can pre-disable the action."""

    puede_eliminar: bool = Field(..., description="True si la fase puede eliminarse.")
    motivo_bloqueo: str | None = Field(
        default=None, description="Motivo por el que no puede eliminarse."
    )


class FaseBorradorSchema(BaseModel):
    """Draft for the ``agregar`` editor action; every field is optional."""

    nombre: str = Field(default="", max_length=NOMBRE_FASE_MAX)
    descripcion: str = Field(default="", max_length=DESCRIPCION_FASE_MAX)
    tiempo_estimado: int = Field(default=TIEMPO_FASE_DEFAULT, ge=0, le=TIEMPO_FASE_MAX)
    es_critica: bool = False
    color: str | None = Field(default=COLOR_FASE_DEFAULT, max_length=9)


class CambiosFaseSchema(BaseModel):
    """Patch for the ``actualizar`` editor action.

    Only the fields actually sent are applied; any other key is rejected.
    """

    nombre: str = Field(default="", max_length=NOMBRE_FASE_MAX)
    descripcion: str = Field(default="", max_length=DESCRIPCION_FASE_MAX)
    tiempo_estimado: int = Field(default=TIEMPO_FASE_DEFAULT, ge=0, le=TIEMPO_FASE_MAX)
    color: str | None = Field(default=None, max_length=9)

    model_config = ConfigDict(extra="forbid")


class ResumenFlujoResponse(BaseModel):
    """Footer totals: "N fases • Tiempo total estimado"."""

    total_fases: int
    tiempo_total: int = Field(..., description="Suma de minutos estimados.")
    tiempo_formateado: str = Field(..., description='Ej. "5h 15min".')
    fases_criticas: int
    fases_ejecutadas: int


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class ListaEfectivaResponse(BaseModel):
    """Effective phase list for a category or an order.

    Attributes:
        tipo_servicio: Category key.
        etiqueta_tipo: Human-readable category label.
        origen: ``plantilla`` or ``excepcion``.
        orden_id: Order the list belongs to; ``None`` in global mode.
        fases: Phases in ``orden`` order with their delete guard.
        fases_huerfanas: Completed ids with no phase in the list.
        resumen: Footer totals.
    """

    tipo_servicio: TipoServicio
    etiqueta_tipo: str
    origen: OrigenLista
    orden_id: int | None = None
    fases: list[FaseResponse]
    fases_huerfanas: list[str] = Field(default_factory=list)
    resumen: ResumenFlujoResponse


class PlantillaResponse(ListaEfectivaResponse):
    nombre: str
    descripcion: str
    updated_at: datetime.datetime | None = None


class TipoServicioItem(BaseModel):
    """Category row of the global-mode selector."""

    tipo_servicio: TipoServicio
    etiqueta: str
    nombre: str | None = Field(default=None, description="Nombre de la plantilla.")
    total_fases: int = 0
    tiempo_total: int = 0
    updated_at: datetime.datetime | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrdenResumenResponse(BaseModel):
    """Active order as returned by the search box."""

    id: int
    codigo: str
    placa: str
    tipo_servicio: TipoServicio
    cliente_nombre: str = ""
    vehiculo_modelo: str = ""
    estado_actual: str = ""
    fases_completadas: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "codigo": "OT-2025-MANT-101",
                "placa": "PCU6322",
                "tipo_servicio": "preventivo",
                "cliente_nombre": "Diego Armando Maradona",
                "vehiculo_modelo": "Great Wall Haval H6 2024",
                "estado_actual": "En Diagnóstico Inicial",
                "fases_completadas": ["fase-1"],
            }
        },
    )


class OrdenFlujoResponse(BaseModel):
    """Selected order with its effective list (exception mode)."""

    orden: OrdenResumenResponse
    lista: ListaEfectivaResponse
    modificado_por: str | None = None
    motivo: str | None = None
    updated_at: datetime.datetime | None = None


# ---------------------------------------------------------------------------
# Write / editor payloads
# ---------------------------------------------------------------------------


class GuardarPlantillaRequest(BaseModel):
    fases: list[FaseSchema]


class GuardarExcepcionRequest(BaseModel):
    """Exception save; ``ejecutada`` flags sent by the client are ignored."""

    fases: list[FaseSchema]
    motivo: str | None = Field(
        default=None, max_length=300, description="Motivo del cambio (opcional)."
    )


class OperacionEditorRequest(BaseModel):
    """One editor operation over an uncommitted list.

    Parameters used per ``accion``:

    * ``reordenar``  — ``nuevo_orden`` (every id, new sequence);
    * ``mover``      — ``fase_id`` and ``posicion`` (1-based);
    * ``agregar``    — optional ``borrador``;
    * ``actualizar`` — ``fase_id`` and ``cambios``;
    * ``eliminar``   — ``fase_id``.
    """

    fases: list[FaseSchema]
    accion: AccionEditor
    fase_id: str | None = None
    posicion: int | None = Field(default=None, ge=1)
    nuevo_orden: list[str] | None = None
    borrador: FaseBorradorSchema | None = None
    cambios: CambiosFaseSchema | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "accion": "eliminar",
                "fase_id": "fase-3",
                "fases": [],
            }
        },
    )


class OperacionEditorResponse(BaseModel):
    fases: list[FaseResponse]
    fase: FaseResponse | None = Field(
        default=None, description="Fase agregada, actualizada o eliminada."
    )
    resumen: ResumenFlujoResponse


class ValidarRequest(BaseModel):
    fases: list[FaseSchema]


class ValidacionResponse(BaseModel):
    valido: bool
    errores: list[ErrorCampoSchema] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class CompletarFaseRequest(BaseModel):
    observaciones: str = Field(
        default="", max_length=2000, description="Notas del técnico."
    )


class PasoTimelineResponse(BaseModel):
    """One step of the execution timeline."""

    fase: FaseSchema
    estado: EstadoFase
    etiqueta_estado: str
    color_estado: str
    observaciones: str | None = None
    registrado_por: str | None = None
    fecha_fin: datetime.datetime | None = None


class TimelineResponse(BaseModel):
    """Execution state of an order, phase by phase.

    Attributes:
        orden: The order.
        origen: Whether the list comes from the template or an exception.
        pasos: Steps in ``orden`` order.
        fase_actual_id: Phase in progress; ``None`` once the flow is complete.
        progreso: Completed percentage (0–100).
        completa: True when every phase is completed.
        fases_huerfanas: Completed ids with no phase in the list.
    """

    orden: OrdenResumenResponse
    origen: OrigenLista
    pasos: list[PasoTimelineResponse]
    fase_actual_id: str | None = None
    progreso: float = Field(..., ge=0, le=100)
    completa: bool
    fases_huerfanas: list[str] = Field(default_factory=list)
