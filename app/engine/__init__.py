"""Workflow template & phase execution engine.

Pure, I/O-free domain layer.  Services in ``app.services`` plug SQLAlchemy
stores into it; routers never import ORM models to make workflow decisions.

Public API
----------
Fase, FaseBorrador        — phase entity and append draft.
PlantillaFlujo            — global template for a service category.
ExcepcionOrden            — per-order override of the template.
OrdenResumen              — active order from the order directory.
ListaEfectiva             — resolved list shown to the editor.
TipoServicio, EstadoFase, ModoEdicion, OrigenLista — closed enums.
validate_for_save         — save-time validation (list of FieldError).
PhaseListEditor           — reorder / add / update / delete with guards.
OverrideResolver          — template vs. exception resolution and reset.
ExecutionEngine           — pending → en curso → completado state machine.
TemplateStore, OverrideStore, OrderDirectory — storage contracts.

Usage example::

    from app.engine import PhaseListEditor, validate_for_save

    editor = PhaseListEditor(lista.fases)
    editor.delete_phase("fase-3")
    errores = validate_for_save(editor.fases)
"""

from .almacenes import OrderDirectory, OverrideStore, TemplateStore
from .editor import AccionEditor, PhaseListEditor, can_delete, verify_integrity
from .ejecucion import ExecutionEngine, PasoEjecucion
from .errores import (
    FieldError,
    NotFoundError,
    StructuralGuardError,
    TransientIOError,
    WorkflowError,
    WorkflowValidationError,
)
from .fase import (
    EstadoFase,
    ExcepcionOrden,
    Fase,
    FaseBorrador,
    ListaEfectiva,
    ModoEdicion,
    OrdenResumen,
    OrigenLista,
    PlantillaFlujo,
    TipoServicio,
    calcular_tiempo_total,
    formatear_tiempo,
)
from .resolver import OverrideResolver, merge_completed
from .validacion import assert_valid, validate_for_save

__all__ = [
    "AccionEditor",
    "EstadoFase",
    "ExcepcionOrden",
    "ExecutionEngine",
    "Fase",
    "FaseBorrador",
    "FieldError",
    "ListaEfectiva",
    "ModoEdicion",
    "NotFoundError",
    "OrdenResumen",
    "OrderDirectory",
    "OrigenLista",
    "OverrideResolver",
    "OverrideStore",
    "PasoEjecucion",
    "PhaseListEditor",
    "PlantillaFlujo",
    "StructuralGuardError",
    "TemplateStore",
    "TipoServicio",
    "TransientIOError",
    "WorkflowError",
    "WorkflowValidationError",
    "assert_valid",
    "calcular_tiempo_total",
    "can_delete",
    "formatear_tiempo",
    "merge_completed",
    "validate_for_save",
    "verify_integrity",
]
