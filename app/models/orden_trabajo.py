"""OrdenTrabajo model — active service order as seen by the workflow module."""

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class OrdenTrabajo(Base):
    """Active work order (OT) searchable by plate or code.

    ``fases_completadas`` is the ground truth of executed phases: a JSON
    array of phase ids in completion order.

    Attributes:
        id: Primary key.
        codigo: Unique order code, e.g. "OT-2025-MANT-101".
        placa: Vehicle license plate.
        cliente_nombre: Customer full name.
        vehiculo_modelo: Vehicle make/model/year.
        tipo_servicio: Service category key.
        estado_actual: Current status description shown to operators.
        fases_completadas: Completed phase ids.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "orden_trabajo"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(30), unique=True, nullable=False)
    placa = Column(String(15), nullable=False, index=True)
    cliente_nombre = Column(String(150), nullable=False, default="")
    vehiculo_modelo = Column(String(150), nullable=False, default="")
    tipo_servicio = Column(String(20), nullable=False)
    estado_actual = Column(String(100), nullable=False, default="")
    fases_completadas = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    excepcion = relationship(
        "WorkflowExcepcion",
        back_populates="orden_trabajo",
        uselist=False,
        lazy="select",
        cascade="all, delete-orphan",
    )
    ejecuciones = relationship(
        "EjecucionFase",
        back_populates="orden_trabajo",
        order_by="EjecucionFase.fecha_fin",
        lazy="select",
        cascade="all, delete-orphan",
    )
