"""
Application-wide constants for the taller workflow backend.

Defines user roles, business rule thresholds, and the operator-facing
messages raised by the workflow engine.  Messages are Spanish because they
are shown verbatim in the shop-floor UI.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User roles (issued by the external auth service inside the JWT ``rol`` claim)
# ---------------------------------------------------------------------------

ROLES: Final[list[str]] = [
    "ADMIN",
    "MANAGER",
    "OPERATOR",
    "TECHNICIAN",
]

ROLES_PLANTILLA: Final[tuple[str, ...]] = ("ADMIN", "MANAGER")
ROLES_EXCEPCION: Final[tuple[str, ...]] = ("ADMIN", "MANAGER", "OPERATOR")
ROLES_EJECUCION: Final[tuple[str, ...]] = ("ADMIN", "MANAGER", "TECHNICIAN")

# ---------------------------------------------------------------------------
# Phase field limits (API schema boundary)
# ---------------------------------------------------------------------------

NOMBRE_FASE_MAX: Final[int] = 50
DESCRIPCION_FASE_MAX: Final[int] = 200
TIEMPO_FASE_MIN: Final[int] = 1
TIEMPO_FASE_MAX: Final[int] = 480  # 8 hours
MIN_FASES_FLUJO: Final[int] = 2

# Defaults for a phase appended from the editor
NOMBRE_FASE_DEFAULT: Final[str] = ""
TIEMPO_FASE_DEFAULT: Final[int] = 30
COLOR_FASE_DEFAULT: Final[str] = "#6B7280"

# Unsaved phases carry a temporary id; it is replaced on save.
PREFIJOS_ID_TEMPORAL: Final[tuple[str, ...]] = ("fase-temp-", "fase-new-")
PREFIJO_ID_PERMANENTE: Final[str] = "fase-"

# ---------------------------------------------------------------------------
# Validation messages
# ---------------------------------------------------------------------------

MSG_NOMBRE_REQUERIDO: Final[str] = "El nombre es requerido"
MSG_TIEMPO_MINIMO: Final[str] = "El tiempo debe ser al menos 1 minuto"
MSG_MINIMO_FASES: Final[str] = "El flujo debe tener al menos 2 fases"
MSG_TIEMPO_TOTAL_CERO: Final[str] = "El tiempo total no puede ser 0"
MSG_NOMBRES_REPETIDOS: Final[str] = "Los nombres de las fases no pueden repetirse"
MSG_IDS_REPETIDOS: Final[str] = "Los identificadores de las fases no pueden repetirse"
MSG_ORDEN_NO_CONSECUTIVO: Final[str] = "El orden de las fases debe ser consecutivo desde 1"

# ---------------------------------------------------------------------------
# Structural guard reasons
# ---------------------------------------------------------------------------

MOTIVO_FASE_CRITICA: Final[str] = "Las fases críticas no pueden eliminarse"
MOTIVO_FASE_EJECUTADA: Final[str] = "La fase ya fue ejecutada y no puede eliminarse"
MOTIVO_EDICION_EJECUTADA: Final[str] = "La fase ya fue ejecutada y su contenido no puede modificarse"
MOTIVO_REORDEN_EJECUTADA: Final[str] = "Las fases ya ejecutadas no pueden reordenarse"
MOTIVO_PERMUTACION_INVALIDA: Final[str] = "El nuevo orden debe incluir exactamente las fases actuales"
MOTIVO_CAMPO_NO_EDITABLE: Final[str] = "Campo no editable"
MOTIVO_EJECUCION_INCONSISTENTE: Final[str] = (
    "Las fases ejecutadas deben ser las primeras del flujo"
)
MOTIVO_FLUJO_COMPLETO: Final[str] = "Todas las fases del flujo ya fueron completadas"

# Reason recorded on the exception that keeps an in-progress order on the
# list it started with when its template changes.
MOTIVO_PLANTILLA_ACTUALIZADA: Final[str] = (
    "Flujo conservado al modificar la plantilla con la orden en curso"
)
