"""
Shared Pydantic v2 schemas reused across the workflow routers.

Error envelopes mirror what the exception handlers in ``app.main`` return so
that the OpenAPI document describes the 404 / 409 / 422 / 503 bodies.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ErrorCampoSchema(BaseModel):
    """One validation problem, keyed by phase when it is field-level."""

    mensaje: str = Field(..., description="Mensaje para el operador.")
    fase_id: str | None = Field(
        default=None, description="Fase con el error. None = error de la lista."
    )
    campo: str | None = Field(default=None, description="Campo con el error.")

    model_config = ConfigDict(from_attributes=True)


class ValidationErrorResponse(BaseModel):
    """Body of a 422 raised by the workflow validation rules."""

    detail: str = Field(..., description="Resumen de los errores.")
    errores: list[ErrorCampoSchema] = Field(default_factory=list)


class GuardErrorResponse(BaseModel):
    """Body of a 409 raised when a critical or executed phase is protected."""

    detail: str = Field(..., description="Motivo por el que se rechazó la acción.")
    fase_id: str | None = Field(default=None, description="Fase protegida.")


class HealthResponse(BaseModel):
    status: str
    app: str
