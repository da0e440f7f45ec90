"""Seed data script for the taller workflow database.

Loads the four default workflow templates and a set of demo active orders
(two of them with an existing exception) for development and manual testing.
The script is idempotent: it checks for existing records before inserting.

Usage (from the repository root):
    python seed_workflows.py
"""

from __future__ import annotations

import os
import sys

# Ensure the backend package is importable when running from the repo root
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models import (  # noqa: E402
    OrdenTrabajo,
    WorkflowExcepcion,
    WorkflowExcepcionFase,
)
from app.services.plantilla_store import SqlTemplateStore  # noqa: E402

# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

ORDENES_DEMO: list[dict] = [
    {
        "codigo": "OT-2025-MANT-101",
        "placa": "PCU6322",
        "cliente_nombre": "Diego Armando Maradona",
        "vehiculo_modelo": "Great Wall Haval H6 2024",
        "tipo_servicio": "preventivo",
        "estado_actual": "En Diagnóstico Inicial",
        "fases_completadas": ["fase-1"],
    },
    {
        "codigo": "OT-2025-REP-055",
        "placa": "PDI2144",
        "cliente_nombre": "Carlos Alberto Paredes",
        "vehiculo_modelo": "Chevrolet Captiva 2023",
        "tipo_servicio": "correctivo",
        "estado_actual": "En Reparación Especializada",
        "fases_completadas": ["fase-pdi-1", "fase-pdi-2", "fase-pdi-3"],
    },
    {
        "codigo": "OT-2025-GAR-012",
        "placa": "PCU7089",
        "cliente_nombre": "María Fernanda López",
        "vehiculo_modelo": "Kia Sportage 2025",
        "tipo_servicio": "garantia",
        "estado_actual": "Validación con Fábrica",
        "fases_completadas": ["fase-g1", "fase-g2"],
    },
    {
        "codigo": "OT-2025-MANT-001",
        "placa": "ABC-1234",
        "cliente_nombre": "Juan Pérez",
        "vehiculo_modelo": "Toyota Corolla 2022",
        "tipo_servicio": "preventivo",
        "estado_actual": "En Diagnóstico",
        "fases_completadas": ["fase-1"],
    },
    {
        "codigo": "OT-2025-REP-042",
        "placa": "XYZ-7890",
        "cliente_nombre": "María González",
        "vehiculo_modelo": "Chevrolet Sail 2021",
        "tipo_servicio": "correctivo",
        "estado_actual": "En Reparación",
        "fases_completadas": ["fase-c1", "fase-c2", "fase-c3"],
    },
    {
        "codigo": "OT-2025-EXP-015",
        "placa": "DEF-4567",
        "cliente_nombre": "Carlos Rodríguez",
        "vehiculo_modelo": "Hyundai Accent 2023",
        "tipo_servicio": "express",
        "estado_actual": "En Servicio",
        "fases_completadas": ["fase-e1"],
    },
    {
        "codigo": "OT-2025-GAR-008",
        "placa": "GHI-8901",
        "cliente_nombre": "Ana Martínez",
        "vehiculo_modelo": "Kia Rio 2024",
        "tipo_servicio": "garantia",
        "estado_actual": "Validación Garantía",
        "fases_completadas": ["fase-g1", "fase-g2"],
    },
    {
        "codigo": "OT-2025-MANT-089",
        "placa": "JKL-2345",
        "cliente_nombre": "Roberto Sánchez",
        "vehiculo_modelo": "Nissan Sentra 2020",
        "tipo_servicio": "preventivo",
        "estado_actual": "En Mantenimiento",
        "fases_completadas": ["fase-1", "fase-2"],
    },
]

# Tuple layout: (fase_id, nombre, descripcion, minutos, critica, ejecutada, color)
EXCEPCIONES_DEMO: dict[str, list[tuple]] = {
    "OT-2025-REP-055": [
        ("fase-pdi-1", "Recepción Urgente", "Ingreso prioritario por falla crítica", 15, True, True, "#DC2626"),
        ("fase-pdi-2", "Diagnóstico Electrónico", "Escaneo completo de módulos", 120, True, True, "#8B5CF6"),
        ("fase-pdi-3", "Aprobación Cliente", "Cotización aprobada vía WhatsApp", 30, True, True, "#EC4899"),
        ("fase-pdi-4", "Reparación de Transmisión", "Trabajo especializado en caja CVT", 480, False, False, "#F59E0B"),
        ("fase-pdi-5", "Prueba de Ruta Extendida", "Verificación en carretera por 80km", 180, False, False, "#14B8A6"),
        ("fase-pdi-6", "Control de Calidad Final", "Revisión exhaustiva post-reparación", 60, True, False, "#10B981"),
        ("fase-pdi-7", "Entrega con Garantía", "Entrega con 6 meses de garantía en transmisión", 45, True, False, "#22C55E"),
    ],
    "OT-2025-REP-042": [
        ("fase-c1", "Recepción", "Ingreso del vehículo y registro de síntomas", 30, True, True, "#3B82F6"),
        ("fase-c2", "Diagnóstico Completo", "Identificación detallada del problema", 90, True, True, "#8B5CF6"),
        ("fase-c3", "Cotización", "Elaboración y aprobación de presupuesto", 60, True, True, "#EC4899"),
        ("fase-c4-custom", "Reparación de Motor", "Trabajo especializado en motor", 300, False, False, "#F59E0B"),
        ("fase-c5-custom", "Prueba de Ruta Extendida", "Verificación en carretera por 50km", 120, False, False, "#14B8A6"),
        ("fase-c6", "Control de Calidad", "Verificación y prueba de funcionamiento", 45, True, False, "#10B981"),
        ("fase-c7", "Entrega", "Entrega del vehículo con garantía de servicio", 30, True, False, "#22C55E"),
    ],
}


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_plantillas(session) -> None:
    """Insert the default template of every category that has none."""
    creadas = SqlTemplateStore(session).seed_defaults()
    if creadas == 0:
        print("  [SKIP] WorkflowPlantilla — every category already has a template.")
    else:
        print(f"  [OK] WorkflowPlantilla — {creadas} plantillas insertadas.")


def seed_ordenes(session) -> dict[str, OrdenTrabajo]:
    """Insert the demo active orders if the table is empty."""
    if session.query(OrdenTrabajo).count() > 0:
        print("  [SKIP] OrdenTrabajo — table already has data.")
        return {o.codigo: o for o in session.query(OrdenTrabajo).all()}

    registros = [OrdenTrabajo(**datos) for datos in ORDENES_DEMO]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] OrdenTrabajo — {len(registros)} registros insertados.")
    return {o.codigo: o for o in registros}


def seed_excepciones(session, ordenes: dict[str, OrdenTrabajo]) -> None:
    """Insert the demo order exceptions if the table is empty."""
    if session.query(WorkflowExcepcion).count() > 0:
        print("  [SKIP] WorkflowExcepcion — table already has data.")
        return

    insertadas = 0
    for codigo, fases in EXCEPCIONES_DEMO.items():
        orden = ordenes.get(codigo)
        if orden is None:
            continue
        excepcion = WorkflowExcepcion(
            orden_trabajo_id=orden.id,
            tipo_servicio=orden.tipo_servicio,
            modificado_por="seed",
            motivo="Datos de demostración",
        )
        excepcion.fases = [
            WorkflowExcepcionFase(
                fase_id=fase_id,
                nombre=nombre,
                descripcion=descripcion,
                tiempo_estimado=minutos,
                orden=i,
                es_critica=critica,
                ejecutada=ejecutada,
                color=color,
            )
            for i, (fase_id, nombre, descripcion, minutos, critica, ejecutada, color)
            in enumerate(fases, start=1)
        ]
        session.add(excepcion)
        insertadas += 1
    session.flush()
    print(f"  [OK] WorkflowExcepcion — {insertadas} registros insertados.")


def main() -> None:
    """Run the complete seed process within a single database transaction."""
    print("=" * 60)
    print("  Taller Workflows — Seed Data Script")
    print("=" * 60)

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        print("\n[1/3] Plantillas de flujo...")
        seed_plantillas(session)

        print("\n[2/3] Órdenes activas...")
        ordenes = seed_ordenes(session)

        print("\n[3/3] Excepciones de flujo...")
        seed_excepciones(session, ordenes)

        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completado exitosamente.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed fallido — se hizo rollback.")
        print(f"  Detalle: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
