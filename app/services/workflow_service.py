"""
Workflow service — orchestrates the configuration screen and phase execution.

All database access for the ``/api/workflows`` and ``/api/ordenes`` endpoints
lives here.  Functions receive a SQLAlchemy ``Session``, wire the SQL stores
into the engine and return either engine dataclasses (core operations) or
schema instances ready for serialisation (``*_response`` builders).

Two editing modes:

* ``ModoEdicion.GLOBAL``    — edit the template of a service category; every
  future order of that category uses it.
* ``ModoEdicion.EXCEPCION`` — edit the list of one active order; stored as
  that order's exception, the template is untouched.

Design notes
------------
- Editor operations are stateless: the client posts its uncommitted list and
  one operation and receives the new list.  Abandoning an edit therefore
  never touches persistence.
- ``save`` validates first, then checks the list against the currently
  committed one with ``verify_integrity``; only then does it write.  The
  whole save is one transaction: stores only ``flush`` and the commit
  happens here, with a rollback on any error.
- On an exception save the ``ejecutada`` flags sent by the client are
  discarded and re-derived from the order's ``fases_completadas`` (plus the
  flags already stored on the exception).
- Temporary ids (``fase-temp-…`` / ``fase-new-…``) are replaced by permanent
  ones on save.
- Changing a template first freezes every started order of that category
  that still follows it: the order gets an exception with the list it
  resolves to now, so its executed phases stay a leading run.
- Concurrency is last-write-wins; there is no locking.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.orm import Session

from app.database import transient_io
from app.engine.editor import AccionEditor, PhaseListEditor, can_delete, verify_integrity
from app.engine.ejecucion import ExecutionEngine
from app.engine.errores import FieldError, WorkflowValidationError
from app.engine.fase import (
    ExcepcionOrden,
    Fase,
    FaseBorrador,
    ListaEfectiva,
    ModoEdicion,
    OrdenResumen,
    OrigenLista,
    TipoServicio,
    calcular_tiempo_total,
    clonar,
    color_estado,
    es_id_temporal,
    etiqueta_estado,
    etiqueta_tipo_servicio,
    formatear_tiempo,
    generar_id_permanente,
    ordenar,
)
from app.engine.resolver import OverrideResolver
from app.engine.validacion import assert_valid, validate_for_save
from app.exporters.excel_exporter import export_fases_xlsx
from app.services.excepcion_store import SqlOverrideStore
from app.services.orden_directory import SqlOrderDirectory
from app.services.plantilla_store import SqlTemplateStore
from app.schemas.common import ErrorCampoSchema
from app.schemas.workflow import (
    FaseBorradorSchema,
    FaseResponse,
    FaseSchema,
    ListaEfectivaResponse,
    OrdenFlujoResponse,
    OrdenResumenResponse,
    PasoTimelineResponse,
    PlantillaResponse,
    ResumenFlujoResponse,
    TimelineResponse,
    TipoServicioItem,
    ValidacionResponse,
)
from app.utils.constants import MOTIVO_PLANTILLA_ACTUALIZADA

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _resolver(db: Session) -> OverrideResolver:
    return OverrideResolver(SqlTemplateStore(db), SqlOverrideStore(db))


def _asignar_ids_permanentes(fases: Sequence[Fase]) -> list[Fase]:
    """Replace temporary ids with ``fase-<hex>`` ids, keeping the rest."""
    return [
        f.copy(id=generar_id_permanente()) if es_id_temporal(f.id) else f.copy()
        for f in fases
    ]


def fases_desde_schema(items: Sequence[FaseSchema]) -> list[Fase]:
    """Convert request phases into engine ``Fase`` objects."""
    return [Fase(**item.model_dump()) for item in items]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def list_service_types(db: Session) -> list[TipoServicioItem]:
    """Every category with a summary of its template (zeros if not seeded)."""
    plantillas = {p.tipo_servicio: p for p in SqlTemplateStore(db).list_templates()}
    items: list[TipoServicioItem] = []
    for tipo in TipoServicio:
        plantilla = plantillas.get(tipo)
        items.append(
            TipoServicioItem(
                tipo_servicio=tipo,
                etiqueta=etiqueta_tipo_servicio(tipo),
                nombre=plantilla.nombre if plantilla else None,
                total_fases=len(plantilla.fases) if plantilla else 0,
                tiempo_total=calcular_tiempo_total(plantilla.fases) if plantilla else 0,
                updated_at=plantilla.updated_at if plantilla else None,
            )
        )
    return items


def select_category(db: Session, tipo: TipoServicio) -> ListaEfectiva:
    """Global mode: the category template as an editable list.

    Raises:
        NotFoundError: The category has no template.
    """
    plantilla = SqlTemplateStore(db).get_template(tipo)
    logger.debug("select_category: tipo=%s fases=%d", tipo.value, len(plantilla.fases))
    return ListaEfectiva(
        fases=ordenar(clonar(plantilla.fases)),
        origen=OrigenLista.PLANTILLA,
        tipo_servicio=tipo,
    )


def search_orders(db: Session, query: str) -> list[OrdenResumen]:
    """Active orders whose plate or code contains *query*; blank → ``[]``."""
    return SqlOrderDirectory(db).search(query)


def get_order(db: Session, orden_id: int) -> OrdenResumen:
    return SqlOrderDirectory(db).get(orden_id)


def select_order(db: Session, orden_id: int) -> ListaEfectiva:
    """Exception mode: the order's effective list.

    Raises:
        NotFoundError: Unknown order, or no exception and no template.
    """
    orden = SqlOrderDirectory(db).get(orden_id)
    return _resolver(db).resolve(orden)


# ---------------------------------------------------------------------------
# Editing (stateless)
# ---------------------------------------------------------------------------


def edit_list(
    fases: Sequence[Fase],
    accion: AccionEditor,
    *,
    fase_id: str | None = None,
    posicion: int | None = None,
    nuevo_orden: Sequence[str] | None = None,
    borrador: FaseBorrador | None = None,
    cambios: dict[str, Any] | None = None,
) -> tuple[list[Fase], Fase | None]:
    """Apply one editor operation to an uncommitted list.

    Returns:
        ``(nueva_lista, fase_afectada)`` — the affected phase is the added,
        updated or removed one; ``None`` for reorders.

    Raises:
        StructuralGuardError: The operation violates a structural rule.
        WorkflowValidationError: A parameter the operation needs is missing.
        NotFoundError: Unknown *fase_id*.
    """
    editor = PhaseListEditor(fases)
    afectada: Fase | None = None

    if accion is AccionEditor.REORDENAR:
        editor.reorder(list(nuevo_orden or []))
    elif accion is AccionEditor.MOVER:
        editor.move(_requerido(fase_id, "fase_id"), _requerido(posicion, "posicion"))
    elif accion is AccionEditor.AGREGAR:
        afectada = editor.add_phase(borrador)
    elif accion is AccionEditor.ACTUALIZAR:
        afectada = editor.update_phase(_requerido(fase_id, "fase_id"), cambios or {})
    elif accion is AccionEditor.ELIMINAR:
        afectada = editor.delete_phase(_requerido(fase_id, "fase_id"))
    else:
        raise ValueError(f"Acción no soportada: {accion}")

    logger.debug("edit_list: accion=%s fases=%d", accion.value, len(editor))
    return editor.fases, afectada


def _requerido(valor: Any, nombre: str) -> Any:
    if valor is None:
        raise WorkflowValidationError(
            [FieldError(f"Falta el parámetro '{nombre}' para esta acción", campo=nombre)]
        )
    return valor


def validate(fases: Sequence[Fase]) -> list[FieldError]:
    """Save-time validation without saving."""
    return validate_for_save(fases)


# ---------------------------------------------------------------------------
# Save / reset
# ---------------------------------------------------------------------------


def save(
    db: Session,
    modo: ModoEdicion,
    fases: Sequence[Fase],
    *,
    tipo_servicio: TipoServicio | None = None,
    orden_id: int | None = None,
    usuario: str | None = None,
    motivo: str | None = None,
) -> ListaEfectiva:
    """Commit an edited list as a template (global) or an order exception.

    Args:
        db: Active session.
        modo: ``GLOBAL`` requires *tipo_servicio*; ``EXCEPCION`` requires
              *orden_id*.
        fases: The edited list.
        usuario: Username recorded on the exception.
        motivo: Optional reason recorded on the exception.

    Returns:
        The committed list as it now resolves.

    Raises:
        WorkflowValidationError: ``validate_for_save`` failed; nothing written.
        StructuralGuardError: A critical or executed phase of the committed
            list would be lost or altered; nothing written.
        NotFoundError: Unknown order.
    """
    try:
        if modo is ModoEdicion.GLOBAL:
            if tipo_servicio is None:
                raise ValueError("tipo_servicio es requerido en modo global")
            resultado = _save_template(db, tipo_servicio, fases, usuario)
        else:
            if orden_id is None:
                raise ValueError("orden_id es requerido en modo excepción")
            resultado = _save_exception(db, orden_id, fases, usuario, motivo)
        with transient_io("commit_save"):
            db.commit()
    except Exception:
        db.rollback()
        raise
    return resultado


def _save_template(
    db: Session, tipo: TipoServicio, fases: Sequence[Fase], usuario: str | None
) -> ListaEfectiva:
    assert_valid(fases)
    store = SqlTemplateStore(db)
    nuevas = _asignar_ids_permanentes(fases)

    actual = store.find_template(tipo)
    if actual is not None:
        verify_integrity(actual.fases, nuevas)
        if ordenar(clonar(actual.fases)) != ordenar([f.copy(ejecutada=False) for f in nuevas]):
            _conservar_ordenes_en_curso(db, store, tipo, usuario)

    plantilla = store.save_template(tipo, nuevas)
    return ListaEfectiva(
        fases=ordenar(clonar(plantilla.fases)),
        origen=OrigenLista.PLANTILLA,
        tipo_servicio=tipo,
    )


def _conservar_ordenes_en_curso(
    db: Session, store: SqlTemplateStore, tipo: TipoServicio, usuario: str | None
) -> None:
    """Freeze the current list of every started order that follows the template.

    Must run before the template is written: each such order gets an
    exception holding the list it resolves to now, so the new template only
    applies to orders that have not started.
    """
    excepciones = SqlOverrideStore(db)
    resolver = OverrideResolver(store, excepciones)
    for orden in SqlOrderDirectory(db).list_in_progress(tipo):
        if excepciones.get(orden.id) is not None:
            continue
        lista = resolver.resolve(orden)
        excepciones.put(
            ExcepcionOrden(
                orden_id=orden.id,
                tipo_servicio=tipo,
                fases=lista.fases,
                modificado_por=usuario,
                motivo=MOTIVO_PLANTILLA_ACTUALIZADA,
            )
        )
        logger.info(
            "save_template: orden=%d en curso conserva su flujo (tipo=%s)", orden.id, tipo.value
        )


def _save_exception(
    db: Session,
    orden_id: int,
    fases: Sequence[Fase],
    usuario: str | None,
    motivo: str | None,
) -> ListaEfectiva:
    directorio = SqlOrderDirectory(db)
    excepciones = SqlOverrideStore(db)
    resolver = OverrideResolver(SqlTemplateStore(db), excepciones)

    orden = directorio.get(orden_id)
    assert_valid(fases)

    comprometida = resolver.resolve(orden)
    ejecutadas = set(orden.fases_completadas) | {
        f.id for f in comprometida.fases if f.ejecutada
    }
    nuevas = [
        f.copy(ejecutada=f.id in ejecutadas) for f in _asignar_ids_permanentes(fases)
    ]
    verify_integrity(comprometida.fases, nuevas)

    excepciones.put(
        ExcepcionOrden(
            orden_id=orden.id,
            tipo_servicio=orden.tipo_servicio,
            fases=nuevas,
            modificado_por=usuario,
            motivo=motivo,
        )
    )
    logger.info(
        "save_exception: orden=%d fases=%d usuario=%s", orden.id, len(nuevas), usuario
    )
    return resolver.resolve(orden)


def reset_exception(db: Session, orden_id: int) -> ListaEfectiva:
    """Discard the order's exception and return the template-derived list.

    Destructive: the exception cannot be recovered.
    """
    orden = SqlOrderDirectory(db).get(orden_id)
    try:
        lista = _resolver(db).reset_to_template(orden)
        with transient_io("commit_reset_exception"):
            db.commit()
    except Exception:
        db.rollback()
        raise
    return lista


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def get_timeline(db: Session, orden_id: int) -> TimelineResponse:
    """Execution state of every phase of the order."""
    directorio = SqlOrderDirectory(db)
    orden = directorio.get(orden_id)
    lista = _resolver(db).resolve(orden)
    motor = ExecutionEngine(lista.fases)
    return _timeline_response(orden, lista, motor, directorio)


def complete_current_phase(
    db: Session,
    orden_id: int,
    observaciones: str = "",
    usuario: str | None = None,
) -> TimelineResponse:
    """Complete the in-progress phase of the order and start the next one.

    Persists the completed id in the order, the execution note and, when the
    order has an exception, the phase's ``ejecutada`` flag.

    Raises:
        StructuralGuardError: The flow is already complete, or its executed
            phases are not a leading run.
    """
    directorio = SqlOrderDirectory(db)
    excepciones = SqlOverrideStore(db)
    resolver = OverrideResolver(SqlTemplateStore(db), excepciones)

    try:
        orden = directorio.get(orden_id)
        lista = resolver.resolve(orden)
        motor = ExecutionEngine(lista.fases)
        paso = motor.complete_current_phase(observaciones)

        orden = directorio.record_completion(orden_id, paso.fase, observaciones, usuario)
        if lista.origen is OrigenLista.EXCEPCION:
            excepcion = excepciones.get(orden_id)
            if excepcion is not None:
                excepcion.fases = [
                    f.copy(ejecutada=True) if f.id == paso.fase.id else f
                    for f in excepcion.fases
                ]
                excepciones.put(excepcion)
        with transient_io("commit_complete_phase"):
            db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "complete_current_phase: orden=%d fase=%s usuario=%s progreso=%.2f",
        orden_id, paso.fase.id, usuario, motor.progreso,
    )
    lista = resolver.resolve(orden)
    return _timeline_response(orden, lista, ExecutionEngine(lista.fases), directorio)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_template_xlsx(db: Session, tipo: TipoServicio) -> tuple[str, bytes]:
    """Return ``(filename, xlsx_bytes)`` for the category template."""
    plantilla = SqlTemplateStore(db).get_template(tipo)
    contenido = export_fases_xlsx(
        plantilla.nombre or etiqueta_tipo_servicio(tipo),
        plantilla.fases,
        filtros={"Tipo de servicio": etiqueta_tipo_servicio(tipo), "Origen": "Plantilla"},
    )
    logger.debug("export_template_xlsx: tipo=%s bytes=%d", tipo.value, len(contenido))
    return f"flujo_{tipo.value}.xlsx", contenido


def export_order_xlsx(db: Session, orden_id: int) -> tuple[str, bytes]:
    """Return ``(filename, xlsx_bytes)`` for the effective list of an order."""
    orden = SqlOrderDirectory(db).get(orden_id)
    lista = _resolver(db).resolve(orden)
    origen = "Excepción" if lista.origen is OrigenLista.EXCEPCION else "Plantilla"
    contenido = export_fases_xlsx(
        f"Orden {orden.codigo}",
        lista.fases,
        filtros={
            "Placa": orden.placa,
            "Cliente": orden.cliente_nombre,
            "Tipo de servicio": etiqueta_tipo_servicio(orden.tipo_servicio),
            "Origen": origen,
        },
    )
    return f"flujo_{orden.codigo}.xlsx", contenido


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def resumen(fases: Sequence[Fase]) -> ResumenFlujoResponse:
    """Footer totals of a list."""
    total = calcular_tiempo_total(fases)
    return ResumenFlujoResponse(
        total_fases=len(fases),
        tiempo_total=total,
        tiempo_formateado=formatear_tiempo(total),
        fases_criticas=sum(1 for f in fases if f.es_critica),
        fases_ejecutadas=sum(1 for f in fases if f.ejecutada),
    )


def fase_response(fase: Fase) -> FaseResponse:
    permitido, motivo = can_delete(fase)
    return FaseResponse(
        **FaseSchema.model_validate(fase).model_dump(),
        puede_eliminar=permitido,
        motivo_bloqueo=motivo,
    )


def lista_response(lista: ListaEfectiva) -> ListaEfectivaResponse:
    return ListaEfectivaResponse(
        tipo_servicio=lista.tipo_servicio,
        etiqueta_tipo=etiqueta_tipo_servicio(lista.tipo_servicio),
        origen=lista.origen,
        orden_id=lista.orden_id,
        fases=[fase_response(f) for f in lista.fases],
        fases_huerfanas=list(lista.fases_huerfanas),
        resumen=resumen(lista.fases),
    )


def plantilla_response(db: Session, tipo: TipoServicio) -> PlantillaResponse:
    plantilla = SqlTemplateStore(db).get_template(tipo)
    fases = ordenar(clonar(plantilla.fases))
    return PlantillaResponse(
        tipo_servicio=tipo,
        etiqueta_tipo=etiqueta_tipo_servicio(tipo),
        origen=OrigenLista.PLANTILLA,
        fases=[fase_response(f) for f in fases],
        resumen=resumen(fases),
        nombre=plantilla.nombre,
        descripcion=plantilla.descripcion,
        updated_at=plantilla.updated_at,
    )


def orden_flujo_response(db: Session, orden_id: int) -> OrdenFlujoResponse:
    orden = SqlOrderDirectory(db).get(orden_id)
    excepciones = SqlOverrideStore(db)
    lista = OverrideResolver(SqlTemplateStore(db), excepciones).resolve(orden)
    excepcion = excepciones.get(orden_id) if lista.origen is OrigenLista.EXCEPCION else None
    return OrdenFlujoResponse(
        orden=OrdenResumenResponse.model_validate(orden),
        lista=lista_response(lista),
        modificado_por=excepcion.modificado_por if excepcion else None,
        motivo=excepcion.motivo if excepcion else None,
        updated_at=excepcion.updated_at if excepcion else None,
    )


def validacion_response(errores: Sequence[FieldError]) -> ValidacionResponse:
    return ValidacionResponse(
        valido=not errores,
        errores=[ErrorCampoSchema.model_validate(e) for e in errores],
    )


def borrador_desde_schema(item: FaseBorradorSchema | None) -> FaseBorrador | None:
    return FaseBorrador(**item.model_dump()) if item is not None else None


def _timeline_response(
    orden: OrdenResumen,
    lista: ListaEfectiva,
    motor: ExecutionEngine,
    directorio: SqlOrderDirectory,
) -> TimelineResponse:
    # Latest record per phase wins.
    registros = {r.fase_id: r for r in directorio.list_executions(orden.id)}
    pasos = []
    for paso in motor.pasos:
        registro = registros.get(paso.fase.id)
        pasos.append(
            PasoTimelineResponse(
                fase=FaseSchema.model_validate(paso.fase),
                estado=paso.estado,
                etiqueta_estado=etiqueta_estado(paso.estado),
                color_estado=color_estado(paso.estado),
                observaciones=registro.observaciones if registro else None,
                registrado_por=registro.registrado_por if registro else None,
                fecha_fin=registro.fecha_fin if registro else None,
            )
        )
    actual = motor.paso_actual
    return TimelineResponse(
        orden=OrdenResumenResponse.model_validate(orden),
        origen=lista.origen,
        pasos=pasos,
        fase_actual_id=actual.fase.id if actual else None,
        progreso=motor.progreso,
        completa=motor.completa,
        fases_huerfanas=list(lista.fases_huerfanas),
    )
