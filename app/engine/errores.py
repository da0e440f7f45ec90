"""
Error taxonomy of the workflow engine.

Every operation either returns a value or raises one of these exceptions;
none of them is fatal.  ``app.main`` registers one FastAPI exception handler
per class so routers never translate them by hand:

* ``WorkflowValidationError`` → 422 with the field/list error list.
* ``StructuralGuardError``    → 409 with the human-readable reason.
* ``NotFoundError``           → 404.
* ``TransientIOError``        → 503 (retryable, no internal retry).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One validation problem.

    Attributes:
        mensaje: Operator-facing message.
        fase_id: Phase the error belongs to; ``None`` for list-level errors.
        campo: Offending field name (``nombre``, ``tiempo_estimado`` …).
    """

    mensaje: str
    fase_id: str | None = None
    campo: str | None = None


class WorkflowError(Exception):
    """Base class for every recoverable workflow engine error."""


class WorkflowValidationError(WorkflowError):
    def __init__(self, errores: list[FieldError]) -> None:
        self.errores = list(errores)
        super().__init__("; ".join(e.mensaje for e in self.errores))


class StructuralGuardError(WorkflowError):
    """Attempted change to a critical or executed phase (or malformed reorder).

    ``motivo`` is shown directly by the UI to explain why the action is
    disabled.
    """

    def __init__(self, motivo: str, fase_id: str | None = None) -> None:
        self.motivo = motivo
        self.fase_id = fase_id
        super().__init__(motivo)


class NotFoundError(WorkflowError):
    def __init__(self, recurso: str, clave: object) -> None:
        self.recurso = recurso
        self.clave = clave
        super().__init__(f"{recurso} '{clave}' no encontrado")


class TransientIOError(WorkflowError):
    """Persistence or order directory temporarily unavailable."""
