"""WorkflowExcepcionFase model — one phase of an order exception."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class WorkflowExcepcionFase(Base):
    """Phase of an order-specific workflow, with persisted execution flag.

    Attributes:
        id: Primary key.
        excepcion_id: FK to WorkflowExcepcion.
        fase_id: Stable phase identifier.
        nombre: Phase name.
        descripcion: Brief description.
        tiempo_estimado: Estimated minutes.
        orden: 1-based position.
        es_critica: Critical phases can never be removed.
        ejecutada: True once the phase was completed on the order (permanent).
        color: Display colour (hex).
    """

    __tablename__ = "workflow_excepcion_fase"
    __table_args__ = (
        UniqueConstraint("excepcion_id", "fase_id", name="uq_excepcion_fase_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    excepcion_id = Column(Integer, ForeignKey("workflow_excepcion.id"), nullable=False)
    fase_id = Column(String(50), nullable=False)
    nombre = Column(String(50), nullable=False)
    descripcion = Column(String(200), nullable=False, default="")
    tiempo_estimado = Column(Integer, nullable=False)
    orden = Column(Integer, nullable=False)
    es_critica = Column(Boolean, nullable=False, default=False)
    ejecutada = Column(Boolean, nullable=False, default=False)
    color = Column(String(9), nullable=True)

    # Relationships
    excepcion = relationship("WorkflowExcepcion", back_populates="fases", lazy="select")
