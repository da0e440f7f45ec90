"""
Storage contracts consumed by the workflow engine.

The engine needs only get / put / delete semantics with single-record
atomicity.  Concrete SQLAlchemy implementations live in ``app.services``;
tests may substitute in-memory subclasses.

Subclasses implement the underscore hooks; the public methods add the
behaviour every backend must share (validation before a template write,
``NotFoundError`` on a missing record).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from app.engine.errores import NotFoundError
from app.engine.fase import (
    ExcepcionOrden,
    Fase,
    OrdenResumen,
    PlantillaFlujo,
    TipoServicio,
)
from app.engine.validacion import assert_valid

logger = logging.getLogger(__name__)


class TemplateStore(ABC):
    """Exactly one ``PlantillaFlujo`` per service category, replaced on save."""

    def get_template(self, tipo: TipoServicio) -> PlantillaFlujo:
        """Return the template for *tipo*.

        Raises:
            NotFoundError: The category has not been seeded.
        """
        plantilla = self._read(tipo)
        if plantilla is None:
            raise NotFoundError("Plantilla", tipo.value)
        return plantilla

    def find_template(self, tipo: TipoServicio) -> PlantillaFlujo | None:
        """Return the template for *tipo*, or ``None`` when it does not exist."""
        return self._read(tipo)

    def save_template(self, tipo: TipoServicio, fases: Sequence[Fase]) -> PlantillaFlujo:
        """Validate and replace the stored phase list of *tipo* wholesale.

        Templates carry no execution history, so every ``ejecutada`` flag is
        cleared before writing.  Order exceptions are never touched.

        Raises:
            WorkflowValidationError: *fases* fails ``validate_for_save``.
        """
        assert_valid(fases)
        limpias = [f.copy(ejecutada=False) for f in fases]
        plantilla = self._write(tipo, limpias)
        logger.info("save_template: tipo=%s fases=%d", tipo.value, len(limpias))
        return plantilla

    @abstractmethod
    def _read(self, tipo: TipoServicio) -> PlantillaFlujo | None:
        """Load the template or return ``None``."""

    @abstractmethod
    def _write(self, tipo: TipoServicio, fases: list[Fase]) -> PlantillaFlujo:
        """Persist *fases* as the whole template of *tipo* (create if missing)."""


class OverrideStore(ABC):
    """Per-order exceptions keyed by order id."""

    @abstractmethod
    def get(self, orden_id: int) -> ExcepcionOrden | None:
        """Return the stored exception or ``None``."""

    @abstractmethod
    def put(self, excepcion: ExcepcionOrden) -> ExcepcionOrden:
        """Create or replace the exception of ``excepcion.orden_id``."""

    @abstractmethod
    def delete(self, orden_id: int) -> bool:
        """Discard the exception; ``True`` if one existed."""


class OrderDirectory(ABC):
    """Read side of the active-order directory plus completion recording."""

    @abstractmethod
    def search(self, query: str) -> list[OrdenResumen]:
        """Orders whose plate or code contains *query* (case-insensitive)."""

    @abstractmethod
    def _read(self, orden_id: int) -> OrdenResumen | None:
        """Load one order or return ``None``."""

    @abstractmethod
    def record_completion(
        self,
        orden_id: int,
        fase: Fase,
        observaciones: str,
        usuario: str | None = None,
    ) -> OrdenResumen:
        """Append ``fase.id`` to the order's completed phases and store the note."""

    @abstractmethod
    def list_in_progress(self, tipo: TipoServicio) -> list[OrdenResumen]:
        """Orders of *tipo* with at least one completed phase."""

    def get(self, orden_id: int) -> OrdenResumen:
        """Return the order.

        Raises:
            NotFoundError: No active order with that id.
        """
        orden = self._read(orden_id)
        if orden is None:
            raise NotFoundError("Orden", orden_id)
        return orden
