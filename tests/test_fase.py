"""Tests for the phase data model helpers and enum mappings."""

import pytest

from app.engine.fase import (
    EstadoFase,
    Fase,
    TipoServicio,
    calcular_tiempo_total,
    color_estado,
    es_id_temporal,
    etiqueta_estado,
    etiqueta_tipo_servicio,
    formatear_tiempo,
    generar_id_permanente,
    generar_id_temporal,
    ordenes_contiguos,
    renumerar,
)


@pytest.mark.parametrize(
    "minutos, esperado",
    [(0, "0 min"), (45, "45 min"), (60, "1h"), (120, "2h"), (150, "2h 30min"), (245, "4h 5min")],
)
def test_formatear_tiempo(minutos, esperado):
    assert formatear_tiempo(minutos) == esperado


def test_calcular_tiempo_total(preventivo):
    assert calcular_tiempo_total(preventivo) == 245
    assert calcular_tiempo_total([]) == 0


def test_every_service_type_has_a_label():
    etiquetas = {etiqueta_tipo_servicio(t) for t in TipoServicio}
    assert len(etiquetas) == len(TipoServicio)
    assert etiqueta_tipo_servicio(TipoServicio.PREVENTIVO) == "Mantenimiento Preventivo"


def test_every_state_has_label_and_colour():
    for estado in EstadoFase:
        assert etiqueta_estado(estado)
        assert color_estado(estado).startswith("#")
    assert etiqueta_estado(EstadoFase.EN_CURSO) == "En curso"


def test_renumerar_returns_clones_numbered_from_one(preventivo):
    invertidas = list(reversed(preventivo))
    renumeradas = renumerar(invertidas)
    assert [f.orden for f in renumeradas] == [1, 2, 3, 4, 5]
    assert renumeradas[0].id == "fase-5"
    # originals untouched
    assert preventivo[4].orden == 5


def test_ordenes_contiguos():
    assert ordenes_contiguos([Fase("a", "A", orden=2), Fase("b", "B", orden=1)])
    assert not ordenes_contiguos([Fase("a", "A", orden=1), Fase("b", "B", orden=3)])
    assert not ordenes_contiguos([Fase("a", "A", orden=1), Fase("b", "B", orden=1)])
    assert ordenes_contiguos([])


def test_temporary_and_permanent_ids():
    temporal = generar_id_temporal()
    permanente = generar_id_permanente()
    assert es_id_temporal(temporal)
    assert es_id_temporal("fase-new-123")
    assert not es_id_temporal(permanente)
    assert permanente.startswith("fase-")
    assert generar_id_temporal() != temporal


def test_copy_does_not_share_state(preventivo):
    original = preventivo[0]
    copia = original.copy(nombre="Otra")
    assert original.nombre == "Recepción"
    assert copia.nombre == "Otra"
    assert copia.id == original.id


def test_mismo_contenido_ignores_colour_and_flags(preventivo):
    fase = preventivo[0]
    assert fase.mismo_contenido(fase.copy(color="#000000", ejecutada=True, orden=9))
    assert not fase.mismo_contenido(fase.copy(tiempo_estimado=31))
