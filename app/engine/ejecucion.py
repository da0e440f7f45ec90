"""
Execution engine — forward-only state machine over a committed phase list.

Each phase is ``PENDIENTE``, ``EN_CURSO`` or ``COMPLETADO``.  The state is
derived from the persisted ``ejecutada`` flags: executed phases are
completed, the first non-executed phase (by ``orden``) is in progress, the
rest are pending.  A fresh list therefore starts with phase 1 in progress.

Invariant: at most one phase is in progress; every phase before it is
completed and every phase after it is pending.  Lists whose executed phases
are not a leading run are rejected instead of being coerced.

There is no "uncomplete" operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from app.engine.errores import StructuralGuardError
from app.engine.fase import EstadoFase, Fase, clonar, ordenar
from app.utils.constants import MOTIVO_EJECUCION_INCONSISTENTE, MOTIVO_FLUJO_COMPLETO

logger = logging.getLogger(__name__)


@dataclass
class PasoEjecucion:
    """One phase with its execution state and completion record."""

    fase: Fase
    estado: EstadoFase
    observaciones: str | None = None
    fecha_fin: datetime | None = None


class ExecutionEngine:
    """Advance a committed list phase by phase.

    Args:
        fases: Committed list; cloned and sorted by ``orden``.

    Raises:
        StructuralGuardError: The executed phases are not a leading run.
    """

    def __init__(self, fases: Iterable[Fase]) -> None:
        ordenadas = ordenar(clonar(fases))
        ejecutadas = [f.ejecutada for f in ordenadas]
        primera_pendiente = ejecutadas.index(False) if False in ejecutadas else len(ejecutadas)
        if any(ejecutadas[primera_pendiente:]):
            raise StructuralGuardError(MOTIVO_EJECUCION_INCONSISTENTE)

        self._pasos: list[PasoEjecucion] = [
            PasoEjecucion(
                fase=f,
                estado=EstadoFase.COMPLETADO if f.ejecutada else EstadoFase.PENDIENTE,
            )
            for f in ordenadas
        ]
        if primera_pendiente < len(self._pasos):
            self._pasos[primera_pendiente].estado = EstadoFase.EN_CURSO

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def pasos(self) -> list[PasoEjecucion]:
        return list(self._pasos)

    @property
    def fases(self) -> list[Fase]:
        return [p.fase.copy() for p in self._pasos]

    @property
    def paso_actual(self) -> PasoEjecucion | None:
        """The ``EN_CURSO`` step, or ``None`` when the list is complete."""
        for paso in self._pasos:
            if paso.estado is EstadoFase.EN_CURSO:
                return paso
        return None

    @property
    def completa(self) -> bool:
        return all(p.estado is EstadoFase.COMPLETADO for p in self._pasos)

    @property
    def progreso(self) -> float:
        """Completed share of the list, 0.0–100.0 rounded to two decimals."""
        if not self._pasos:
            return 0.0
        hechas = sum(1 for p in self._pasos if p.estado is EstadoFase.COMPLETADO)
        return round(hechas / len(self._pasos) * 100, 2)

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    def complete_current_phase(self, observaciones: str = "") -> PasoEjecucion:
        """Complete the in-progress phase and start the next pending one.

        Args:
            observaciones: Free-text notes recorded with the completion.

        Returns:
            The step that was just completed.

        Raises:
            StructuralGuardError: Every phase is already completed.
        """
        actual = self.paso_actual
        if actual is None:
            raise StructuralGuardError(MOTIVO_FLUJO_COMPLETO)

        actual.estado = EstadoFase.COMPLETADO
        actual.fase = actual.fase.copy(ejecutada=True)
        actual.observaciones = observaciones
        actual.fecha_fin = datetime.now(timezone.utc)

        indice = next(i for i, p in enumerate(self._pasos) if p is actual)
        if indice + 1 < len(self._pasos):
            siguiente = self._pasos[indice + 1]
            if siguiente.estado is EstadoFase.PENDIENTE:
                siguiente.estado = EstadoFase.EN_CURSO

        logger.debug(
            "complete_current_phase: fase=%s orden=%d progreso=%.2f",
            actual.fase.id, actual.fase.orden, self.progreso,
        )
        return actual
