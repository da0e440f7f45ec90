"""
Phase list editor — reorder / add / update / delete on an uncommitted list.

``PhaseListEditor`` wraps an in-memory copy of an effective phase list.  The
caller commits the result through the template store or as an order
exception; nothing here touches persistence.

Structural rules
----------------
- Every rejected operation raises and leaves the list exactly as it was:
  the new list is built aside and only swapped in once all checks pass.
- After any accepted operation ``orden`` is exactly 1..N.
- An executed phase keeps its ``orden``, its content and its existence.
- A critical phase can never be deleted, executed or not.
- ``color`` is cosmetic and may always change.

``verify_integrity`` applies the same rules at commit time, comparing the
list about to be saved against the one currently committed, so a client that
bypasses the editor endpoints cannot drop history either.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from app.engine.errores import (
    FieldError,
    NotFoundError,
    StructuralGuardError,
    WorkflowValidationError,
)
from app.engine.fase import (
    Fase,
    FaseBorrador,
    clonar,
    generar_id_temporal,
    ordenar,
    ordenes_contiguos,
    renumerar,
)
from app.utils.constants import (
    MOTIVO_CAMPO_NO_EDITABLE,
    MOTIVO_EDICION_EJECUTADA,
    MOTIVO_FASE_CRITICA,
    MOTIVO_FASE_EJECUTADA,
    MOTIVO_PERMUTACION_INVALIDA,
    MOTIVO_REORDEN_EJECUTADA,
    MSG_IDS_REPETIDOS,
    MSG_ORDEN_NO_CONSECUTIVO,
)

logger = logging.getLogger(__name__)


class AccionEditor(str, Enum):
    """Operations accepted by the stateless editor endpoint."""

    REORDENAR = "reordenar"
    MOVER = "mover"
    AGREGAR = "agregar"
    ACTUALIZAR = "actualizar"
    ELIMINAR = "eliminar"


CAMPOS_EDITABLES: frozenset[str] = frozenset(
    {"nombre", "descripcion", "tiempo_estimado", "color"}
)
# Fields frozen once a phase is executed (``color`` stays editable).
CAMPOS_HISTORICOS: frozenset[str] = frozenset(
    {"nombre", "descripcion", "tiempo_estimado"}
)


def can_delete(fase: Fase) -> tuple[bool, str | None]:
    """Pure delete guard used to pre-disable the delete action.

    Executed is checked first so an executed critical phase reports the
    execution reason.

    Returns:
        ``(True, None)`` when deletable, otherwise ``(False, motivo)``.
    """
    if fase.ejecutada:
        return False, MOTIVO_FASE_EJECUTADA
    if fase.es_critica:
        return False, MOTIVO_FASE_CRITICA
    return True, None


class PhaseListEditor:
    """Mutable editing session over a phase list.

    Args:
        fases: Starting list; cloned and sorted by ``orden``.  The caller's
               objects are never modified.

    Raises:
        WorkflowValidationError: If ids repeat or ``orden`` is not 1..N.
    """

    def __init__(self, fases: Iterable[Fase]) -> None:
        self._fases: list[Fase] = ordenar(clonar(fases))
        errores = []
        if len({f.id for f in self._fases}) != len(self._fases):
            errores.append(FieldError(MSG_IDS_REPETIDOS, campo="id"))
        if not ordenes_contiguos(self._fases):
            errores.append(FieldError(MSG_ORDEN_NO_CONSECUTIVO, campo="orden"))
        if errores:
            raise WorkflowValidationError(errores)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def fases(self) -> list[Fase]:
        """Current list (clones, in ``orden`` order)."""
        return clonar(self._fases)

    def __len__(self) -> int:
        return len(self._fases)

    def get(self, fase_id: str) -> Fase:
        return self._fases[self._index_of(fase_id)].copy()

    def _index_of(self, fase_id: str) -> int:
        for i, fase in enumerate(self._fases):
            if fase.id == fase_id:
                return i
        raise NotFoundError("Fase", fase_id)

    # ------------------------------------------------------------------
    # Reorder
    # ------------------------------------------------------------------

    def reorder(self, nuevo_orden: Sequence[str]) -> list[Fase]:
        """Apply a full permutation given as a sequence of phase ids.

        Raises:
            StructuralGuardError: If *nuevo_orden* is not a permutation of the
                current ids, or if any executed phase would end up at a
                different ``orden`` than it has now.
        """
        actuales = [f.id for f in self._fases]
        if len(nuevo_orden) != len(actuales) or set(nuevo_orden) != set(actuales):
            raise StructuralGuardError(MOTIVO_PERMUTACION_INVALIDA)

        por_id = {f.id: f for f in self._fases}
        for posicion, fase_id in enumerate(nuevo_orden, start=1):
            fase = por_id[fase_id]
            if fase.ejecutada and fase.orden != posicion:
                logger.debug(
                    "reorder: rechazado, fase ejecutada %s pasaría de %d a %d",
                    fase_id, fase.orden, posicion,
                )
                raise StructuralGuardError(MOTIVO_REORDEN_EJECUTADA, fase_id)

        self._fases = renumerar(por_id[fase_id] for fase_id in nuevo_orden)
        return self.fases

    def move(self, fase_id: str, posicion: int) -> list[Fase]:
        """Drag-and-drop form of ``reorder``: move one phase to a 1-based position.

        Positions outside 1..N are clamped to the nearest end.
        """
        ids = [f.id for f in self._fases]
        origen = self._index_of(fase_id)
        destino = min(max(posicion, 1), len(ids)) - 1
        ids.insert(destino, ids.pop(origen))
        return self.reorder(ids)

    # ------------------------------------------------------------------
    # Add / update / delete
    # ------------------------------------------------------------------

    def add_phase(self, borrador: FaseBorrador | None = None) -> Fase:
        """Append a new, non-executed phase with the next ``orden``."""
        borrador = borrador or FaseBorrador()
        nueva = Fase(
            id=generar_id_temporal(),
            nombre=borrador.nombre,
            descripcion=borrador.descripcion,
            tiempo_estimado=borrador.tiempo_estimado,
            orden=len(self._fases) + 1,
            es_critica=borrador.es_critica,
            ejecutada=False,
            color=borrador.color,
        )
        self._fases = [*self._fases, nueva]
        return nueva.copy()

    def update_phase(self, fase_id: str, cambios: Mapping[str, Any]) -> Fase:
        """Patch ``nombre``, ``descripcion``, ``tiempo_estimado`` or ``color``.

        Sending an unchanged value for a frozen field of an executed phase is
        accepted as a no-op, so clients may post the whole phase back.

        Raises:
            NotFoundError: Unknown *fase_id*.
            StructuralGuardError: A key outside the editable set, or a real
                change to historical content of an executed phase.
        """
        indice = self._index_of(fase_id)
        fase = self._fases[indice]

        desconocidos = sorted(set(cambios) - CAMPOS_EDITABLES)
        if desconocidos:
            raise StructuralGuardError(
                f"{MOTIVO_CAMPO_NO_EDITABLE}: {', '.join(desconocidos)}", fase_id
            )

        if fase.ejecutada:
            modificados = [
                campo for campo in CAMPOS_HISTORICOS
                if campo in cambios and cambios[campo] != getattr(fase, campo)
            ]
            if modificados:
                raise StructuralGuardError(MOTIVO_EDICION_EJECUTADA, fase_id)

        actualizada = fase.copy(**dict(cambios))
        self._fases = [
            actualizada if i == indice else f for i, f in enumerate(self._fases)
        ]
        return actualizada.copy()

    def delete_phase(self, fase_id: str) -> Fase:
        """Remove a phase and renumber the rest to 1..N-1.

        Raises:
            NotFoundError: Unknown *fase_id*.
            StructuralGuardError: The phase is executed or critical.
        """
        indice = self._index_of(fase_id)
        fase = self._fases[indice]
        permitido, motivo = can_delete(fase)
        if not permitido:
            raise StructuralGuardError(motivo, fase_id)

        self._fases = renumerar(f for i, f in enumerate(self._fases) if i != indice)
        logger.debug("delete_phase: %s eliminada, quedan %d", fase_id, len(self._fases))
        return fase.copy()


# ---------------------------------------------------------------------------
# Commit-time guard
# ---------------------------------------------------------------------------


def verify_integrity(anterior: Sequence[Fase], nueva: Sequence[Fase]) -> None:
    """Check that *nueva* preserves every protected phase of *anterior*.

    Protected phases are the critical and the executed ones.  Each must still
    be present in *nueva*; executed ones additionally keep their ``orden``,
    their content and their executed flag.

    Raises:
        StructuralGuardError: With the same reasons the editor uses.
    """
    por_id = {f.id: f for f in nueva}
    for previa in anterior:
        if not (previa.ejecutada or previa.es_critica):
            continue
        actual = por_id.get(previa.id)
        if actual is None:
            _, motivo = can_delete(previa)
            raise StructuralGuardError(motivo, previa.id)
        if previa.es_critica and not actual.es_critica:
            raise StructuralGuardError(MOTIVO_FASE_CRITICA, previa.id)
        if not previa.ejecutada:
            continue
        if actual.orden != previa.orden:
            raise StructuralGuardError(MOTIVO_REORDEN_EJECUTADA, previa.id)
        if not actual.mismo_contenido(previa):
            raise StructuralGuardError(MOTIVO_EDICION_EJECUTADA, previa.id)
