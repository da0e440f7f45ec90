"""
Default workflow templates loaded when a service category has none.

Each entry is a plain dict with the following keys:

* ``tipo_servicio`` — category key (``TipoServicio`` value).
* ``nombre``        — template display name (Spanish).
* ``descripcion``   — one-line summary.
* ``fases``         — ordered list of phase dicts using the ``Fase`` field
  names (``id``, ``nombre``, ``descripcion``, ``tiempo_estimado``,
  ``orden``, ``es_critica``, ``color``).

Phase ids are stable across deploys: active orders reference them in
``fases_completadas``.
"""

from __future__ import annotations

from typing import Any, Final

PLANTILLAS_DEFAULT: Final[list[dict[str, Any]]] = [
    {
        "tipo_servicio": "preventivo",
        "nombre": "Flujo de Mantenimiento Preventivo",
        "descripcion": "Proceso estándar para servicios de mantenimiento programado",
        "fases": [
            {"id": "fase-1", "nombre": "Recepción", "descripcion": "Ingreso del vehículo y verificación de datos", "tiempo_estimado": 30, "orden": 1, "es_critica": True, "color": "#3B82F6"},
            {"id": "fase-2", "nombre": "Diagnóstico Inicial", "descripcion": "Inspección visual y lectura de códigos", "tiempo_estimado": 45, "orden": 2, "es_critica": True, "color": "#8B5CF6"},
            {"id": "fase-3", "nombre": "Mantenimiento", "descripcion": "Ejecución del servicio de mantenimiento programado", "tiempo_estimado": 120, "orden": 3, "es_critica": False, "color": "#F59E0B"},
            {"id": "fase-4", "nombre": "Control de Calidad", "descripcion": "Verificación de trabajos realizados", "tiempo_estimado": 30, "orden": 4, "es_critica": True, "color": "#10B981"},
            {"id": "fase-5", "nombre": "Lavado y Limpieza", "descripcion": "Limpieza exterior e interior del vehículo", "tiempo_estimado": 45, "orden": 5, "es_critica": False, "color": "#06B6D4"},
            {"id": "fase-6", "nombre": "Entrega", "descripcion": "Entrega del vehículo al cliente con explicación", "tiempo_estimado": 20, "orden": 6, "es_critica": True, "color": "#22C55E"},
        ],
    },
    {
        "tipo_servicio": "correctivo",
        "nombre": "Flujo de Reparación Correctiva",
        "descripcion": "Proceso para reparaciones no programadas",
        "fases": [
            {"id": "fase-c1", "nombre": "Recepción", "descripcion": "Ingreso del vehículo y registro de síntomas", "tiempo_estimado": 30, "orden": 1, "es_critica": True, "color": "#3B82F6"},
            {"id": "fase-c2", "nombre": "Diagnóstico Completo", "descripcion": "Identificación detallada del problema", "tiempo_estimado": 90, "orden": 2, "es_critica": True, "color": "#8B5CF6"},
            {"id": "fase-c3", "nombre": "Cotización", "descripcion": "Elaboración y aprobación de presupuesto", "tiempo_estimado": 60, "orden": 3, "es_critica": True, "color": "#EC4899"},
            {"id": "fase-c4", "nombre": "Reparación", "descripcion": "Ejecución de los trabajos de reparación", "tiempo_estimado": 240, "orden": 4, "es_critica": False, "color": "#F59E0B"},
            {"id": "fase-c5", "nombre": "Control de Calidad", "descripcion": "Verificación y prueba de funcionamiento", "tiempo_estimado": 45, "orden": 5, "es_critica": True, "color": "#10B981"},
            {"id": "fase-c6", "nombre": "Entrega", "descripcion": "Entrega del vehículo con garantía de servicio", "tiempo_estimado": 30, "orden": 6, "es_critica": True, "color": "#22C55E"},
        ],
    },
    {
        "tipo_servicio": "express",
        "nombre": "Flujo de Servicio Express",
        "descripcion": "Proceso rápido para servicios básicos",
        "fases": [
            {"id": "fase-e1", "nombre": "Recepción Express", "descripcion": "Registro rápido del vehículo", "tiempo_estimado": 10, "orden": 1, "es_critica": True, "color": "#3B82F6"},
            {"id": "fase-e2", "nombre": "Servicio Rápido", "descripcion": "Ejecución del servicio express", "tiempo_estimado": 45, "orden": 2, "es_critica": False, "color": "#F59E0B"},
            {"id": "fase-e3", "nombre": "Verificación", "descripcion": "Control rápido de calidad", "tiempo_estimado": 10, "orden": 3, "es_critica": True, "color": "#10B981"},
            {"id": "fase-e4", "nombre": "Entrega Inmediata", "descripcion": "Entrega del vehículo", "tiempo_estimado": 5, "orden": 4, "es_critica": True, "color": "#22C55E"},
        ],
    },
    {
        "tipo_servicio": "garantia",
        "nombre": "Flujo de Servicio de Garantía",
        "descripcion": "Proceso para reclamos de garantía",
        "fases": [
            {"id": "fase-g1", "nombre": "Recepción de Garantía", "descripcion": "Verificación de cobertura de garantía", "tiempo_estimado": 45, "orden": 1, "es_critica": True, "color": "#3B82F6"},
            {"id": "fase-g2", "nombre": "Diagnóstico Técnico", "descripcion": "Evaluación del problema reportado", "tiempo_estimado": 60, "orden": 2, "es_critica": True, "color": "#8B5CF6"},
            {"id": "fase-g3", "nombre": "Validación Garantía", "descripcion": "Aprobación con fábrica o distribuidor", "tiempo_estimado": 120, "orden": 3, "es_critica": True, "color": "#EC4899"},
            {"id": "fase-g4", "nombre": "Reparación/Reemplazo", "descripcion": "Ejecución del servicio cubierto", "tiempo_estimado": 180, "orden": 4, "es_critica": False, "color": "#F59E0B"},
            {"id": "fase-g5", "nombre": "Control de Calidad", "descripcion": "Verificación final del trabajo", "tiempo_estimado": 30, "orden": 5, "es_critica": True, "color": "#10B981"},
            {"id": "fase-g6", "nombre": "Documentación y Entrega", "descripcion": "Cierre de caso de garantía y entrega", "tiempo_estimado": 30, "orden": 6, "es_critica": True, "color": "#22C55E"},
        ],
    },
]
