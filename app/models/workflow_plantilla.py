"""WorkflowPlantilla model — global phase template of one service category."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class WorkflowPlantilla(Base):
    """Default ordered phase list applied to every new order of a category.

    Exactly one row per ``tipo_servicio``.  Saving replaces the child phases
    wholesale; there is no version history.

    Attributes:
        id: Primary key.
        tipo_servicio: Service category key, e.g. "preventivo".
        nombre: Display name, e.g. "Flujo de Mantenimiento Preventivo".
        descripcion: One-line summary of the workflow.
        created_at: Record creation timestamp.
        updated_at: Last save timestamp.
    """

    __tablename__ = "workflow_plantilla"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tipo_servicio = Column(String(20), unique=True, nullable=False)
    nombre = Column(String(100), nullable=False, default="")
    descripcion = Column(String(300), nullable=False, default="")
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    fases = relationship(
        "WorkflowPlantillaFase",
        back_populates="plantilla",
        order_by="WorkflowPlantillaFase.orden",
        lazy="select",
        cascade="all, delete-orphan",
    )
