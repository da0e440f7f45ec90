"""Tests for OverrideResolver and the template store contract."""

import logging

import pytest

from app.engine.errores import NotFoundError, WorkflowValidationError
from app.engine.fase import ExcepcionOrden, Fase, OrdenResumen, OrigenLista, TipoServicio
from app.engine.resolver import OverrideResolver, merge_completed


def _orden(completadas=(), tipo=TipoServicio.PREVENTIVO, orden_id=1):
    return OrdenResumen(
        id=orden_id,
        codigo="OT-2025-MANT-101",
        placa="PCU6322",
        tipo_servicio=tipo,
        fases_completadas=list(completadas),
    )


def test_resolve_from_template_flags_completed(plantillas, excepciones):
    lista = OverrideResolver(plantillas, excepciones).resolve(_orden(["fase-1"]))

    assert lista.origen is OrigenLista.PLANTILLA
    assert lista.orden_id == 1
    assert [f.ejecutada for f in lista.fases] == [True, False, False, False, False]
    assert [f.orden for f in lista.fases] == [1, 2, 3, 4, 5]
    assert lista.fases_huerfanas == []


def test_resolve_does_not_touch_the_template(plantillas, excepciones):
    OverrideResolver(plantillas, excepciones).resolve(_orden(["fase-1", "fase-2"]))
    guardada = plantillas.get_template(TipoServicio.PREVENTIVO)
    assert not any(f.ejecutada for f in guardada.fases)


def test_resolve_returns_exception_verbatim(plantillas, excepciones, preventivo):
    fases = [f.copy(ejecutada=f.id == "fase-1") for f in preventivo if f.id != "fase-3"]
    fases = [f.copy(orden=i) for i, f in enumerate(fases, start=1)]
    excepciones.put(ExcepcionOrden(orden_id=1, tipo_servicio=TipoServicio.PREVENTIVO, fases=fases))

    # fase-2 in the order record is ignored: the exception flags are authoritative
    lista = OverrideResolver(plantillas, excepciones).resolve(_orden(["fase-1", "fase-2"]))

    assert lista.origen is OrigenLista.EXCEPCION
    assert lista.fases == fases
    assert lista.fases_huerfanas == []


def test_resolve_without_template_raises(plantillas, excepciones):
    resolver = OverrideResolver(type(plantillas)(), excepciones)
    with pytest.raises(NotFoundError):
        resolver.resolve(_orden(tipo=TipoServicio.EXPRESS))


def test_ghost_completed_ids_are_reported(plantillas, excepciones, caplog):
    with caplog.at_level(logging.WARNING, logger="app.engine.resolver"):
        lista = OverrideResolver(plantillas, excepciones).resolve(
            _orden(["fase-1", "fase-borrada"])
        )

    assert lista.fases_huerfanas == ["fase-borrada"]
    assert lista.fases[0].ejecutada
    assert "fase-borrada" in caplog.text


def test_reset_to_template_discards_exception(plantillas, excepciones, preventivo):
    excepciones.put(
        ExcepcionOrden(orden_id=1, tipo_servicio=TipoServicio.PREVENTIVO, fases=preventivo[:2])
    )
    resolver = OverrideResolver(plantillas, excepciones)

    lista = resolver.reset_to_template(_orden(["fase-1"]))

    assert lista.origen is OrigenLista.PLANTILLA
    assert len(lista.fases) == 5
    assert lista.fases[0].ejecutada
    assert excepciones.get(1) is None


def test_reset_without_exception_is_harmless(plantillas, excepciones):
    lista = OverrideResolver(plantillas, excepciones).reset_to_template(_orden())
    assert lista.origen is OrigenLista.PLANTILLA


def test_merge_completed_deduplicates_ghosts(preventivo):
    fases, huerfanas = merge_completed(preventivo, ["x", "fase-2", "x"])
    assert huerfanas == ["x"]
    assert [f.id for f in fases if f.ejecutada] == ["fase-2"]


# ── TemplateStore contract ───────────────────────────────────────────────


def test_save_template_clears_executed_flags(plantillas, preventivo):
    preventivo[0] = preventivo[0].copy(ejecutada=True)
    guardada = plantillas.save_template(TipoServicio.PREVENTIVO, preventivo)
    assert not any(f.ejecutada for f in guardada.fases)


def test_save_template_rejects_invalid_list(plantillas):
    with pytest.raises(WorkflowValidationError):
        plantillas.save_template(TipoServicio.PREVENTIVO, [Fase("fase-1", "Única", orden=1)])
    assert plantillas.escrituras == 0


def test_save_template_leaves_exceptions_alone(plantillas, excepciones, preventivo):
    excepcion = ExcepcionOrden(orden_id=7, tipo_servicio=TipoServicio.PREVENTIVO, fases=preventivo)
    excepciones.put(excepcion)

    plantillas.save_template(TipoServicio.PREVENTIVO, preventivo[:2])

    assert excepciones.get(7).fases == preventivo


def test_get_template_unknown_category(plantillas):
    with pytest.raises(NotFoundError):
        plantillas.get_template(TipoServicio.GARANTIA)
    assert plantillas.find_template(TipoServicio.GARANTIA) is None
