"""
Save-time validation for phase lists.

``validate_for_save`` collects every problem instead of stopping at the first
one so the editor can highlight all offending phases at once.  Errors keyed
by phase id are field errors; errors with ``fase_id=None`` apply to the whole
list.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from app.engine.errores import FieldError, WorkflowValidationError
from app.engine.fase import Fase, calcular_tiempo_total, ordenes_contiguos
from app.utils.constants import (
    MIN_FASES_FLUJO,
    MSG_IDS_REPETIDOS,
    MSG_MINIMO_FASES,
    MSG_NOMBRE_REQUERIDO,
    MSG_NOMBRES_REPETIDOS,
    MSG_ORDEN_NO_CONSECUTIVO,
    MSG_TIEMPO_MINIMO,
    MSG_TIEMPO_TOTAL_CERO,
    TIEMPO_FASE_MIN,
)

logger = logging.getLogger(__name__)


def validate_phase(fase: Fase) -> list[FieldError]:
    """Field-level rules for a single phase."""
    errores: list[FieldError] = []
    if not fase.nombre or not fase.nombre.strip():
        errores.append(FieldError(MSG_NOMBRE_REQUERIDO, fase.id, "nombre"))
    if fase.tiempo_estimado < TIEMPO_FASE_MIN:
        errores.append(FieldError(MSG_TIEMPO_MINIMO, fase.id, "tiempo_estimado"))
    return errores


def validate_for_save(fases: Sequence[Fase]) -> list[FieldError]:
    """Return every validation error of *fases*; an empty list means OK.

    Rules:
        * each phase has a non-blank name and at least 1 minute;
        * at least two phases;
        * total estimated time greater than zero;
        * phase names (case and surrounding spaces ignored) and ids are unique;
        * ``orden`` values are exactly 1..N.
    """
    errores: list[FieldError] = []
    for fase in fases:
        errores.extend(validate_phase(fase))

    if len(fases) < MIN_FASES_FLUJO:
        errores.append(FieldError(MSG_MINIMO_FASES))

    # Redundant with the per-phase minimum, kept for a degenerate all-zero list.
    if calcular_tiempo_total(fases) <= 0:
        errores.append(FieldError(MSG_TIEMPO_TOTAL_CERO))

    nombres = Counter(f.nombre.strip().lower() for f in fases if f.nombre.strip())
    if any(n > 1 for n in nombres.values()):
        errores.append(FieldError(MSG_NOMBRES_REPETIDOS))

    if any(n > 1 for n in Counter(f.id for f in fases).values()):
        errores.append(FieldError(MSG_IDS_REPETIDOS))

    if not ordenes_contiguos(fases):
        errores.append(FieldError(MSG_ORDEN_NO_CONSECUTIVO))

    if errores:
        logger.debug("validate_for_save: %d errores en %d fases", len(errores), len(fases))
    return errores


def assert_valid(fases: Sequence[Fase]) -> None:
    """Raise ``WorkflowValidationError`` when ``validate_for_save`` finds problems."""
    errores = validate_for_save(fases)
    if errores:
        raise WorkflowValidationError(errores)
