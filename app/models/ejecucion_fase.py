"""EjecucionFase model — completion record of one phase on one order."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class EjecucionFase(Base):
    """Notes and timestamp written when a technician completes a phase.

    Attributes:
        id: Primary key.
        orden_trabajo_id: FK to OrdenTrabajo.
        fase_id: Completed phase identifier.
        fase_nombre: Phase name at completion time.
        observaciones: Free-text notes entered by the technician.
        registrado_por: Username that completed the phase.
        fecha_fin: Completion timestamp.
    """

    __tablename__ = "ejecucion_fase"

    id = Column(Integer, primary_key=True, autoincrement=True)
    orden_trabajo_id = Column(Integer, ForeignKey("orden_trabajo.id"), nullable=False)
    fase_id = Column(String(50), nullable=False)
    fase_nombre = Column(String(50), nullable=False)
    observaciones = Column(Text, nullable=False, default="")
    registrado_por = Column(String(50), nullable=True)
    fecha_fin = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    orden_trabajo = relationship("OrdenTrabajo", back_populates="ejecuciones", lazy="select")
