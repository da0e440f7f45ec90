"""SQLAlchemy models package for the taller workflow backend.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from app.models import OrdenTrabajo, WorkflowPlantilla
"""

# Global templates
from app.models.workflow_plantilla import WorkflowPlantilla  # noqa: F401
from app.models.workflow_plantilla_fase import WorkflowPlantillaFase  # noqa: F401

# Active orders (order directory) and their execution records
from app.models.orden_trabajo import OrdenTrabajo  # noqa: F401
from app.models.ejecucion_fase import EjecucionFase  # noqa: F401

# Per-order exceptions
from app.models.workflow_excepcion import WorkflowExcepcion  # noqa: F401
from app.models.workflow_excepcion_fase import WorkflowExcepcionFase  # noqa: F401

__all__ = [
    "WorkflowPlantilla",
    "WorkflowPlantillaFase",
    "OrdenTrabajo",
    "EjecucionFase",
    "WorkflowExcepcion",
    "WorkflowExcepcionFase",
]
