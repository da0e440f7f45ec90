"""Tests for PhaseListEditor structural rules and the commit-time guard."""

import pytest

from app.engine.editor import PhaseListEditor, can_delete, verify_integrity
from app.engine.errores import NotFoundError, StructuralGuardError, WorkflowValidationError
from app.engine.fase import Fase, FaseBorrador, es_id_temporal
from app.utils.constants import (
    COLOR_FASE_DEFAULT,
    MOTIVO_EDICION_EJECUTADA,
    MOTIVO_FASE_CRITICA,
    MOTIVO_FASE_EJECUTADA,
    MOTIVO_PERMUTACION_INVALIDA,
    MOTIVO_REORDEN_EJECUTADA,
    MSG_IDS_REPETIDOS,
    MSG_ORDEN_NO_CONSECUTIVO,
    TIEMPO_FASE_DEFAULT,
)


def _ids(fases):
    return [f.id for f in fases]


def _ordenes(fases):
    return [f.orden for f in fases]


@pytest.fixture()
def con_ejecutada(preventivo):
    """Preventive list where Recepción has already been executed."""
    fases = [f.copy() for f in preventivo]
    fases[0] = fases[0].copy(ejecutada=True)
    return fases


# ── construction ─────────────────────────────────────────────────────────


def test_editor_rejects_repeated_ids():
    fases = [Fase("a", "A1", orden=1), Fase("a", "A2", orden=2), Fase("b", "B", orden=3)]
    with pytest.raises(WorkflowValidationError) as exc_info:
        PhaseListEditor(fases)
    assert [e.mensaje for e in exc_info.value.errores] == [MSG_IDS_REPETIDOS]


def test_editor_rejects_non_consecutive_orden():
    fases = [Fase("a", "A"), Fase("b", "B")]
    with pytest.raises(WorkflowValidationError) as exc_info:
        PhaseListEditor(fases)
    assert [(e.mensaje, e.campo) for e in exc_info.value.errores] == [
        (MSG_ORDEN_NO_CONSECUTIVO, "orden")
    ]


def test_editor_accepts_unsorted_consecutive_orden(preventivo):
    editor = PhaseListEditor(list(reversed(preventivo)))
    assert _ids(editor.fases) == ["fase-1", "fase-2", "fase-3", "fase-4", "fase-5"]


# ── delete ───────────────────────────────────────────────────────────────


def test_delete_non_critical_phase_renumbers(preventivo):
    editor = PhaseListEditor(preventivo)
    eliminada = editor.delete_phase("fase-3")

    assert eliminada.nombre == "Mantenimiento"
    assert [f.nombre for f in editor.fases] == [
        "Recepción", "Diagnóstico", "Control de Calidad", "Entrega",
    ]
    assert _ordenes(editor.fases) == [1, 2, 3, 4]


def test_delete_critical_phase_is_rejected(preventivo):
    editor = PhaseListEditor(preventivo)
    with pytest.raises(StructuralGuardError) as exc_info:
        editor.delete_phase("fase-1")
    assert exc_info.value.motivo == MOTIVO_FASE_CRITICA
    assert exc_info.value.fase_id == "fase-1"
    assert len(editor) == 5


def test_delete_executed_phase_reports_execution_first(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    with pytest.raises(StructuralGuardError) as exc_info:
        editor.delete_phase("fase-1")
    assert exc_info.value.motivo == MOTIVO_FASE_EJECUTADA


def test_delete_executed_non_critical_phase_is_rejected(preventivo):
    preventivo[2] = preventivo[2].copy(ejecutada=True)
    with pytest.raises(StructuralGuardError):
        PhaseListEditor(preventivo).delete_phase("fase-3")


def test_delete_unknown_phase(preventivo):
    with pytest.raises(NotFoundError):
        PhaseListEditor(preventivo).delete_phase("fase-99")


def test_can_delete(preventivo, con_ejecutada):
    assert can_delete(preventivo[2]) == (True, None)
    assert can_delete(preventivo[0]) == (False, MOTIVO_FASE_CRITICA)
    assert can_delete(con_ejecutada[0]) == (False, MOTIVO_FASE_EJECUTADA)


# ── reorder / move ───────────────────────────────────────────────────────


def test_reorder_applies_permutation(preventivo):
    editor = PhaseListEditor(preventivo)
    editor.reorder(["fase-1", "fase-3", "fase-2", "fase-4", "fase-5"])
    assert _ids(editor.fases) == ["fase-1", "fase-3", "fase-2", "fase-4", "fase-5"]
    assert _ordenes(editor.fases) == [1, 2, 3, 4, 5]


def test_reorder_moving_executed_phase_is_rejected(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    antes = editor.fases
    with pytest.raises(StructuralGuardError) as exc_info:
        editor.reorder(["fase-2", "fase-1", "fase-3", "fase-4", "fase-5"])
    assert exc_info.value.motivo == MOTIVO_REORDEN_EJECUTADA
    assert editor.fases == antes


def test_reorder_around_executed_phase_is_allowed(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    editor.reorder(["fase-1", "fase-3", "fase-2", "fase-4", "fase-5"])
    assert editor.get("fase-1").orden == 1


@pytest.mark.parametrize(
    "nuevo_orden",
    [
        ["fase-1", "fase-2", "fase-3", "fase-4"],
        ["fase-1", "fase-2", "fase-3", "fase-4", "fase-4"],
        ["fase-1", "fase-2", "fase-3", "fase-4", "fase-9"],
    ],
)
def test_reorder_requires_a_full_permutation(preventivo, nuevo_orden):
    with pytest.raises(StructuralGuardError) as exc_info:
        PhaseListEditor(preventivo).reorder(nuevo_orden)
    assert exc_info.value.motivo == MOTIVO_PERMUTACION_INVALIDA


def test_move_clamps_position(preventivo):
    editor = PhaseListEditor(preventivo)
    editor.move("fase-3", 99)
    assert _ids(editor.fases)[-1] == "fase-3"
    editor.move("fase-3", 0)
    assert _ids(editor.fases)[0] == "fase-3"


def test_move_executed_phase_is_rejected(con_ejecutada):
    with pytest.raises(StructuralGuardError):
        PhaseListEditor(con_ejecutada).move("fase-1", 3)


# ── add ──────────────────────────────────────────────────────────────────


def test_add_phase_with_defaults(preventivo):
    editor = PhaseListEditor(preventivo)
    nueva = editor.add_phase()

    assert es_id_temporal(nueva.id)
    assert nueva.orden == 6
    assert nueva.nombre == ""
    assert nueva.tiempo_estimado == TIEMPO_FASE_DEFAULT
    assert nueva.color == COLOR_FASE_DEFAULT
    assert not nueva.ejecutada and not nueva.es_critica
    assert _ordenes(editor.fases) == [1, 2, 3, 4, 5, 6]


def test_add_phase_from_draft(preventivo):
    editor = PhaseListEditor(preventivo)
    nueva = editor.add_phase(FaseBorrador(nombre="Lavado", tiempo_estimado=45, es_critica=True))
    assert (nueva.nombre, nueva.tiempo_estimado, nueva.es_critica) == ("Lavado", 45, True)


def test_add_many_phases_has_no_upper_bound(preventivo):
    editor = PhaseListEditor(preventivo)
    for _ in range(30):
        editor.add_phase()
    assert len(editor) == 35
    assert _ordenes(editor.fases) == list(range(1, 36))


# ── update ───────────────────────────────────────────────────────────────


def test_update_phase_fields(preventivo):
    editor = PhaseListEditor(preventivo)
    actualizada = editor.update_phase("fase-3", {"nombre": "Cambio de aceite", "tiempo_estimado": 60})
    assert actualizada.nombre == "Cambio de aceite"
    assert editor.get("fase-3").tiempo_estimado == 60
    assert preventivo[2].nombre == "Mantenimiento"


def test_update_executed_phase_content_is_rejected(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    with pytest.raises(StructuralGuardError) as exc_info:
        editor.update_phase("fase-1", {"nombre": "Recepción Express"})
    assert exc_info.value.motivo == MOTIVO_EDICION_EJECUTADA
    assert editor.get("fase-1").nombre == "Recepción"


def test_update_executed_phase_colour_is_allowed(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    assert editor.update_phase("fase-1", {"color": "#000000"}).color == "#000000"


def test_update_executed_phase_with_unchanged_values_is_accepted(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    editor.update_phase("fase-1", {"nombre": "Recepción", "tiempo_estimado": 30})


@pytest.mark.parametrize("campo", ["es_critica", "ejecutada", "orden", "id"])
def test_update_non_editable_field_is_rejected(preventivo, campo):
    with pytest.raises(StructuralGuardError):
        PhaseListEditor(preventivo).update_phase("fase-3", {campo: 1})


def test_editor_never_mutates_input(preventivo):
    copia = [f.copy() for f in preventivo]
    editor = PhaseListEditor(preventivo)
    editor.delete_phase("fase-3")
    editor.add_phase()
    editor.update_phase("fase-2", {"nombre": "Otro"})
    assert preventivo == copia


# ── verify_integrity ─────────────────────────────────────────────────────


def test_verify_integrity_accepts_editor_output(con_ejecutada):
    editor = PhaseListEditor(con_ejecutada)
    editor.delete_phase("fase-3")
    editor.add_phase(FaseBorrador(nombre="Lavado"))
    verify_integrity(con_ejecutada, editor.fases)


def test_verify_integrity_rejects_missing_critical(preventivo):
    with pytest.raises(StructuralGuardError) as exc_info:
        verify_integrity(preventivo, preventivo[1:])
    assert exc_info.value.motivo == MOTIVO_FASE_CRITICA


def test_verify_integrity_rejects_uncritical_flag(preventivo):
    nueva = [f.copy(es_critica=False) if f.id == "fase-4" else f for f in preventivo]
    with pytest.raises(StructuralGuardError):
        verify_integrity(preventivo, nueva)


def test_verify_integrity_rejects_moved_executed_phase(con_ejecutada):
    nueva = [f.copy(orden=2) if f.id == "fase-1" else f.copy(orden=1) if f.id == "fase-2" else f
             for f in con_ejecutada]
    with pytest.raises(StructuralGuardError) as exc_info:
        verify_integrity(con_ejecutada, nueva)
    assert exc_info.value.motivo == MOTIVO_REORDEN_EJECUTADA


def test_verify_integrity_rejects_edited_executed_phase(con_ejecutada):
    nueva = [f.copy(descripcion="otra") if f.id == "fase-1" else f for f in con_ejecutada]
    with pytest.raises(StructuralGuardError) as exc_info:
        verify_integrity(con_ejecutada, nueva)
    assert exc_info.value.motivo == MOTIVO_EDICION_EJECUTADA
