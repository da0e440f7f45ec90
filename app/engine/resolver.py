"""
Override resolver — computes the effective phase list of an order.

Two branches:

* the order has a stored exception → its phases are returned unchanged
  (they already carry accurate ``ejecutada`` flags);
* otherwise the category template is cloned and each phase whose id is in
  ``orden.fases_completadas`` is flagged executed.  ``orden`` values are
  preserved from the template.

Ghost ids
---------
A completed-phase id with no matching phase in the resolved list (the
template phase was deleted after the order executed it, or the exception
dropped it) is neither fatal nor silently ignored: it is logged as a warning
and returned in ``ListaEfectiva.fases_huerfanas`` so the UI can flag it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from app.engine.almacenes import OverrideStore, TemplateStore
from app.engine.fase import (
    Fase,
    ListaEfectiva,
    OrdenResumen,
    OrigenLista,
    clonar,
    ordenar,
)

logger = logging.getLogger(__name__)


def merge_completed(
    fases: Sequence[Fase], completadas: Iterable[str]
) -> tuple[list[Fase], list[str]]:
    """Clone *fases* with ``ejecutada`` set from the completed-id set.

    Returns:
        ``(fases_clonadas, ids_huerfanos)`` — the second element lists the
        completed ids without a matching phase, in their original order.
    """
    completadas = list(dict.fromkeys(completadas))
    ids = {f.id for f in fases}
    hechas = set(completadas)
    clonadas = [f.copy(ejecutada=f.id in hechas) for f in ordenar(fases)]
    huerfanas = [fase_id for fase_id in completadas if fase_id not in ids]
    return clonadas, huerfanas


class OverrideResolver:
    """Resolve or reset the effective list of an order.

    Args:
        plantillas: Source of category templates.
        excepciones: Per-order exception storage.
    """

    def __init__(self, plantillas: TemplateStore, excepciones: OverrideStore) -> None:
        self._plantillas = plantillas
        self._excepciones = excepciones

    def resolve(self, orden: OrdenResumen) -> ListaEfectiva:
        """Return the exception verbatim, or the template merged with executions.

        Raises:
            NotFoundError: No exception and no template for the category.
        """
        excepcion = self._excepciones.get(orden.id)
        if excepcion is not None:
            ids = {f.id for f in excepcion.fases}
            huerfanas = [i for i in orden.fases_completadas if i not in ids]
            self._warn_huerfanas(orden, huerfanas)
            logger.debug("resolve: orden=%d origen=excepcion", orden.id)
            return ListaEfectiva(
                fases=ordenar(clonar(excepcion.fases)),
                origen=OrigenLista.EXCEPCION,
                tipo_servicio=excepcion.tipo_servicio,
                orden_id=orden.id,
                fases_huerfanas=huerfanas,
            )
        return self._from_template(orden)

    def reset_to_template(self, orden: OrdenResumen) -> ListaEfectiva:
        """Discard the order's exception (if any) and resolve from the template.

        Destructive: the exception cannot be recovered afterwards.
        """
        if self._excepciones.delete(orden.id):
            logger.info("reset_to_template: excepción descartada orden=%d", orden.id)
        return self._from_template(orden)

    def _from_template(self, orden: OrdenResumen) -> ListaEfectiva:
        plantilla = self._plantillas.get_template(orden.tipo_servicio)
        fases, huerfanas = merge_completed(plantilla.fases, orden.fases_completadas)
        self._warn_huerfanas(orden, huerfanas)
        logger.debug("resolve: orden=%d origen=plantilla", orden.id)
        return ListaEfectiva(
            fases=fases,
            origen=OrigenLista.PLANTILLA,
            tipo_servicio=orden.tipo_servicio,
            orden_id=orden.id,
            fases_huerfanas=huerfanas,
        )

    @staticmethod
    def _warn_huerfanas(orden: OrdenResumen, huerfanas: list[str]) -> None:
        if huerfanas:
            logger.warning(
                "resolve: orden=%d tiene fases completadas sin fase asociada: %s",
                orden.id, huerfanas,
            )
