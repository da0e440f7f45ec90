"""
Shared pytest fixtures for the taller workflow test suite.

Provides:
    - db: Per-test SQLAlchemy session over an in-memory SQLite database
      (tables created before and dropped after every test)
    - seeded_db: ``db`` with the four default templates loaded
    - crear_orden: Factory inserting an ``OrdenTrabajo``
    - client: FastAPI ``TestClient`` (lifespan not run, so nothing is seeded)
    - auth_headers: Factory returning a Bearer header for a given role
    - preventivo: The five-phase preventive maintenance list
    - plantillas / excepciones: In-memory engine stores
"""

import os

# Must be set before ``app`` is imported: settings and the engine are built
# at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_TEMPLATES"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401  (registers every table on Base.metadata)
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.engine.almacenes import OverrideStore, TemplateStore  # noqa: E402
from app.engine.fase import Fase, PlantillaFlujo, TipoServicio, clonar  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models import OrdenTrabajo  # noqa: E402
from app.services.plantilla_store import SqlTemplateStore  # noqa: E402
from app.utils.security import create_access_token  # noqa: E402


# ── In-memory stores for engine tests ────────────────────────────────────


class MemoriaPlantillas(TemplateStore):
    def __init__(self, plantillas=None):
        self.datos = {p.tipo_servicio: p for p in (plantillas or [])}
        self.escrituras = 0

    def _read(self, tipo):
        return self.datos.get(tipo)

    def _write(self, tipo, fases):
        self.escrituras += 1
        self.datos[tipo] = PlantillaFlujo(tipo_servicio=tipo, fases=clonar(fases))
        return self.datos[tipo]


class MemoriaExcepciones(OverrideStore):
    def __init__(self):
        self.datos = {}

    def get(self, orden_id):
        return self.datos.get(orden_id)

    def put(self, excepcion):
        self.datos[excepcion.orden_id] = excepcion
        return excepcion

    def delete(self, orden_id):
        return self.datos.pop(orden_id, None) is not None


# ── Phase lists ──────────────────────────────────────────────────────────


def _preventivo() -> list[Fase]:
    return [
        Fase("fase-1", "Recepción", "Ingreso del vehículo", 30, 1, es_critica=True),
        Fase("fase-2", "Diagnóstico", "Inspección inicial", 45, 2, es_critica=True),
        Fase("fase-3", "Mantenimiento", "Servicio programado", 120, 3),
        Fase("fase-4", "Control de Calidad", "Verificación", 30, 4, es_critica=True),
        Fase("fase-5", "Entrega", "Entrega al cliente", 20, 5, es_critica=True),
    ]


@pytest.fixture()
def preventivo() -> list[Fase]:
    """Recepción(30,c) · Diagnóstico(45,c) · Mantenimiento(120) · Control de Calidad(30,c) · Entrega(20,c)."""
    return _preventivo()


@pytest.fixture()
def plantillas() -> MemoriaPlantillas:
    return MemoriaPlantillas(
        [PlantillaFlujo(tipo_servicio=TipoServicio.PREVENTIVO, fases=_preventivo())]
    )


@pytest.fixture()
def excepciones() -> MemoriaExcepciones:
    return MemoriaExcepciones()


# ── DB fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seeded_db(db):
    SqlTemplateStore(db).seed_defaults()
    db.commit()
    return db


@pytest.fixture()
def crear_orden(db):
    """Insert and commit an order; returns its id."""

    def _crear(
        codigo="OT-2025-MANT-101",
        placa="PCU6322",
        tipo_servicio="preventivo",
        fases_completadas=None,
        **extra,
    ) -> int:
        orden = OrdenTrabajo(
            codigo=codigo,
            placa=placa,
            tipo_servicio=tipo_servicio,
            fases_completadas=list(fases_completadas or []),
            cliente_nombre=extra.get("cliente_nombre", "Diego Armando Maradona"),
            vehiculo_modelo=extra.get("vehiculo_modelo", "Great Wall Haval H6 2024"),
            estado_actual=extra.get("estado_actual", ""),
        )
        db.add(orden)
        db.commit()
        return orden.id

    return _crear


# ── HTTP fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def client(db):
    """Test client sharing the in-memory database of ``db``."""
    return TestClient(fastapi_app)


@pytest.fixture()
def auth_headers():
    def _headers(rol: str = "ADMIN", username: str = "tester") -> dict[str, str]:
        token = create_access_token({"sub": username, "rol": rol})
        return {"Authorization": f"Bearer {token}"}

    return _headers
