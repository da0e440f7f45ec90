"""WorkflowExcepcion model — per-order override of the category template."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class WorkflowExcepcion(Base):
    """Custom phase list for a single active order.

    Created lazily the first time an exception is saved for the order and
    deleted by "restablecer a plantilla".  Only the current state is kept;
    ``modificado_por`` and ``motivo`` describe the last save.

    Attributes:
        id: Primary key.
        orden_trabajo_id: FK to OrdenTrabajo (one exception per order).
        tipo_servicio: Category of the order at save time.
        modificado_por: Username that saved the exception.
        motivo: Optional reason given by the operator.
        created_at: Record creation timestamp.
        updated_at: Last save timestamp.
    """

    __tablename__ = "workflow_excepcion"

    id = Column(Integer, primary_key=True, autoincrement=True)
    orden_trabajo_id = Column(
        Integer, ForeignKey("orden_trabajo.id"), unique=True, nullable=False
    )
    tipo_servicio = Column(String(20), nullable=False)
    modificado_por = Column(String(50), nullable=True)
    motivo = Column(String(300), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    orden_trabajo = relationship("OrdenTrabajo", back_populates="excepcion", lazy="select")
    fases = relationship(
        "WorkflowExcepcionFase",
        back_populates="excepcion",
        order_by="WorkflowExcepcionFase.orden",
        lazy="select",
        cascade="all, delete-orphan",
    )
