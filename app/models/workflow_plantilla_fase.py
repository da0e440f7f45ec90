"""WorkflowPlantillaFase model — one phase of a category template."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class WorkflowPlantillaFase(Base):
    """One phase of a global template (never carries execution state).

    Attributes:
        id: Primary key.
        plantilla_id: FK to WorkflowPlantilla.
        fase_id: Stable phase identifier shared with orders, e.g. "fase-1".
        nombre: Phase name.
        descripcion: Brief description.
        tiempo_estimado: Estimated minutes.
        orden: 1-based position.
        es_critica: Critical phases can never be removed.
        color: Display colour (hex).
    """

    __tablename__ = "workflow_plantilla_fase"
    __table_args__ = (
        UniqueConstraint("plantilla_id", "fase_id", name="uq_plantilla_fase_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plantilla_id = Column(Integer, ForeignKey("workflow_plantilla.id"), nullable=False)
    fase_id = Column(String(50), nullable=False)
    nombre = Column(String(50), nullable=False)
    descripcion = Column(String(200), nullable=False, default="")
    tiempo_estimado = Column(Integer, nullable=False)
    orden = Column(Integer, nullable=False)
    es_critica = Column(Boolean, nullable=False, default=False)
    color = Column(String(9), nullable=True)

    # Relationships
    plantilla = relationship("WorkflowPlantilla", back_populates="fases", lazy="select")
