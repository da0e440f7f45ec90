"""HTTP tests for the /api/workflows router."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.utils.constants import (
    MOTIVO_FASE_CRITICA,
    MSG_IDS_REPETIDOS,
    MSG_MINIMO_FASES,
    MSG_ORDEN_NO_CONSECUTIVO,
)

BASE = "/api/workflows"


def _plantilla(client, headers, tipo="preventivo"):
    resp = client.get(f"{BASE}/plantillas/{tipo}", headers=headers)
    assert resp.status_code == 200
    return resp.json()


def test_health_needs_no_token(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── auth ─────────────────────────────────────────────────────────────────


def test_missing_token_is_401(client, seeded_db):
    assert client.get(f"{BASE}/tipos-servicio").status_code == 401


def test_invalid_token_is_401(client, seeded_db):
    resp = client.get(f"{BASE}/tipos-servicio", headers={"Authorization": "Bearer basura"})
    assert resp.status_code == 401


def test_unknown_role_is_401(client, seeded_db, auth_headers):
    resp = client.get(f"{BASE}/tipos-servicio", headers=auth_headers("INVITADO"))
    assert resp.status_code == 401


def test_save_template_requires_manager(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    for rol in ("OPERATOR", "TECHNICIAN"):
        resp = client.put(f"{BASE}/plantillas/preventivo", json={"fases": fases}, headers=auth_headers(rol))
        assert resp.status_code == 403


# ── global mode ──────────────────────────────────────────────────────────


def test_list_service_types(client, seeded_db, auth_headers):
    resp = client.get(f"{BASE}/tipos-servicio", headers=auth_headers("TECHNICIAN"))
    assert resp.status_code == 200
    assert [i["tipo_servicio"] for i in resp.json()] == [
        "preventivo", "correctivo", "express", "garantia",
    ]


def test_get_template_includes_delete_guard(client, seeded_db, auth_headers):
    data = _plantilla(client, auth_headers())

    assert data["origen"] == "plantilla"
    assert data["nombre"] == "Flujo de Mantenimiento Preventivo"
    assert data["resumen"]["total_fases"] == 6
    assert data["resumen"]["tiempo_formateado"] == "4h 50min"
    recepcion, _, mantenimiento = data["fases"][:3]
    assert recepcion["puede_eliminar"] is False
    assert recepcion["motivo_bloqueo"] == MOTIVO_FASE_CRITICA
    assert mantenimiento["puede_eliminar"] is True


def test_get_template_not_seeded(client, db, auth_headers):
    resp = client.get(f"{BASE}/plantillas/express", headers=auth_headers())
    assert resp.status_code == 404


def test_save_template(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    fases[2]["tiempo_estimado"] = 90

    resp = client.put(f"{BASE}/plantillas/preventivo", json={"fases": fases}, headers=auth_headers("MANAGER"))

    assert resp.status_code == 200
    assert resp.json()["fases"][2]["tiempo_estimado"] == 90
    assert _plantilla(client, auth_headers())["resumen"]["tiempo_total"] == 260


def test_save_template_validation_errors(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"][:1]
    fases[0]["nombre"] = "   "

    resp = client.put(f"{BASE}/plantillas/preventivo", json={"fases": fases}, headers=auth_headers())

    assert resp.status_code == 422
    errores = resp.json()["errores"]
    assert {"mensaje": MSG_MINIMO_FASES, "fase_id": None, "campo": None} in errores
    assert any(e["fase_id"] == "fase-1" and e["campo"] == "nombre" for e in errores)


def test_save_template_dropping_critical_phase_is_409(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"][1:]
    for i, fase in enumerate(fases, start=1):
        fase["orden"] = i

    resp = client.put(f"{BASE}/plantillas/preventivo", json={"fases": fases}, headers=auth_headers())

    assert resp.status_code == 409
    assert resp.json() == {"detail": MOTIVO_FASE_CRITICA, "fase_id": "fase-1"}


def test_save_template_with_storage_down_is_503(client, seeded_db, auth_headers, monkeypatch):
    fases = _plantilla(client, auth_headers())["fases"]
    fases[2]["tiempo_estimado"] = 90

    def _sin_conexion(self):
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(Session, "commit", _sin_conexion)
    resp = client.put(f"{BASE}/plantillas/preventivo", json={"fases": fases}, headers=auth_headers())

    assert resp.status_code == 503
    assert resp.headers["retry-after"] == "5"


def test_export_template(client, seeded_db, auth_headers):
    resp = client.get(f"{BASE}/plantillas/correctivo/exportar", headers=auth_headers())
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert 'filename="flujo_correctivo.xlsx"' in resp.headers["content-disposition"]
    assert resp.content[:2] == b"PK"


# ── editor ───────────────────────────────────────────────────────────────


def test_editor_delete_renumbers(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": fases, "accion": "eliminar", "fase_id": "fase-3"},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["fase"]["nombre"] == "Mantenimiento"
    assert [f["orden"] for f in data["fases"]] == [1, 2, 3, 4, 5]
    assert data["resumen"]["total_fases"] == 5


def test_editor_delete_critical_is_409(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": fases, "accion": "eliminar", "fase_id": "fase-1"},
        headers=auth_headers(),
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == MOTIVO_FASE_CRITICA


def test_editor_add_returns_temporary_id(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": fases, "accion": "agregar", "borrador": {"nombre": "Alineación"}},
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    nueva = resp.json()["fase"]
    assert nueva["id"].startswith("fase-temp-")
    assert nueva["orden"] == 7
    assert nueva["puede_eliminar"] is True


def test_editor_missing_parameter_is_422(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor", json={"fases": fases, "accion": "mover"}, headers=auth_headers()
    )
    assert resp.status_code == 422
    assert resp.json()["errores"][0]["campo"] == "fase_id"


def test_editor_update_applies_only_sent_fields(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor",
        json={
            "fases": fases,
            "accion": "actualizar",
            "fase_id": "fase-3",
            "cambios": {"tiempo_estimado": 90},
        },
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    fase = resp.json()["fase"]
    assert (fase["nombre"], fase["tiempo_estimado"]) == ("Mantenimiento", 90)


@pytest.mark.parametrize(
    "cambios",
    [{"tiempo_estimado": -5}, {"tiempo_estimado": 481}, {"nombre": "x" * 51}, {"es_critica": True}],
)
def test_editor_update_with_bad_changes_is_422(client, seeded_db, auth_headers, cambios):
    fases = _plantilla(client, auth_headers())["fases"]
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": fases, "accion": "actualizar", "fase_id": "fase-3", "cambios": cambios},
        headers=auth_headers(),
    )
    assert resp.status_code == 422


def test_editor_list_without_orden_is_422(client, seeded_db, auth_headers):
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": [{"id": "a"}, {"id": "b"}], "accion": "agregar"},
        headers=auth_headers(),
    )
    assert resp.status_code == 422
    assert resp.json()["errores"][0]["mensaje"] == MSG_ORDEN_NO_CONSECUTIVO


def test_editor_list_with_repeated_ids_is_422(client, seeded_db, auth_headers):
    fases = [
        {"id": "a", "nombre": "A1", "orden": 1},
        {"id": "a", "nombre": "A2", "orden": 2},
        {"id": "b", "nombre": "B", "orden": 3},
    ]
    resp = client.post(
        f"{BASE}/editor",
        json={"fases": fases, "accion": "reordenar", "nuevo_orden": ["a", "b", "b"]},
        headers=auth_headers(),
    )
    assert resp.status_code == 422
    assert resp.json()["errores"][0]["mensaje"] == MSG_IDS_REPETIDOS


def test_validate_endpoint(client, seeded_db, auth_headers):
    fases = _plantilla(client, auth_headers())["fases"]
    ok = client.post(f"{BASE}/validar", json={"fases": fases}, headers=auth_headers())
    assert ok.json() == {"valido": True, "errores": []}

    fases[1]["tiempo_estimado"] = 0
    resp = client.post(f"{BASE}/validar", json={"fases": fases}, headers=auth_headers())
    assert resp.status_code == 200
    assert resp.json()["valido"] is False
    assert resp.json()["errores"][0]["campo"] == "tiempo_estimado"


# ── exception mode ───────────────────────────────────────────────────────


def test_search_orders(client, seeded_db, crear_orden, auth_headers):
    crear_orden()
    crear_orden(codigo="OT-2025-EXP-015", placa="DEF-4567", tipo_servicio="express")

    resp = client.get(f"{BASE}/ordenes", params={"q": "pcu"}, headers=auth_headers())
    assert resp.status_code == 200
    assert [o["placa"] for o in resp.json()] == ["PCU6322"]
    assert client.get(f"{BASE}/ordenes", headers=auth_headers()).json() == []


def test_get_order_flow(client, seeded_db, crear_orden, auth_headers):
    orden_id = crear_orden(fases_completadas=["fase-1"])
    resp = client.get(f"{BASE}/ordenes/{orden_id}", headers=auth_headers())

    assert resp.status_code == 200
    data = resp.json()
    assert data["orden"]["codigo"] == "OT-2025-MANT-101"
    assert data["lista"]["origen"] == "plantilla"
    assert data["lista"]["fases"][0]["ejecutada"] is True
    assert data["lista"]["fases"][0]["motivo_bloqueo"] is not None
    assert data["modificado_por"] is None


def test_get_unknown_order_is_404(client, seeded_db, auth_headers):
    assert client.get(f"{BASE}/ordenes/999", headers=auth_headers()).status_code == 404


def test_save_and_reset_order_exception(client, seeded_db, crear_orden, auth_headers):
    orden_id = crear_orden(fases_completadas=["fase-1"])
    fases = client.get(f"{BASE}/ordenes/{orden_id}", headers=auth_headers()).json()["lista"]["fases"]
    fases = [f for f in fases if f["id"] != "fase-5"]
    for i, fase in enumerate(fases, start=1):
        fase["orden"] = i

    resp = client.put(
        f"{BASE}/ordenes/{orden_id}",
        json={"fases": fases, "motivo": "Sin lavado"},
        headers=auth_headers("OPERATOR", "operador1"),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["lista"]["origen"] == "excepcion"
    assert data["lista"]["resumen"]["total_fases"] == 5
    assert (data["modificado_por"], data["motivo"]) == ("operador1", "Sin lavado")
    assert _plantilla(client, auth_headers())["resumen"]["total_fases"] == 6

    resp = client.delete(f"{BASE}/ordenes/{orden_id}/excepcion", headers=auth_headers("OPERATOR"))
    assert resp.status_code == 200
    assert resp.json()["origen"] == "plantilla"
    assert resp.json()["resumen"]["total_fases"] == 6


def test_save_order_exception_forbidden_for_technician(client, seeded_db, crear_orden, auth_headers):
    orden_id = crear_orden()
    fases = client.get(f"{BASE}/ordenes/{orden_id}", headers=auth_headers()).json()["lista"]["fases"]
    resp = client.put(f"{BASE}/ordenes/{orden_id}", json={"fases": fases}, headers=auth_headers("TECHNICIAN"))
    assert resp.status_code == 403


def test_save_order_exception_removing_executed_phase_is_409(client, seeded_db, crear_orden, auth_headers):
    orden_id = crear_orden(fases_completadas=["fase-1", "fase-2", "fase-3"])
    fases = client.get(f"{BASE}/ordenes/{orden_id}", headers=auth_headers()).json()["lista"]["fases"]
    fases = [f for f in fases if f["id"] != "fase-3"]
    for i, fase in enumerate(fases, start=1):
        fase["orden"] = i

    resp = client.put(f"{BASE}/ordenes/{orden_id}", json={"fases": fases}, headers=auth_headers())

    assert resp.status_code == 409
    assert resp.json()["fase_id"] == "fase-3"


def test_export_order_flow(client, seeded_db, crear_orden, auth_headers):
    orden_id = crear_orden(fases_completadas=["fase-1"])
    resp = client.get(f"{BASE}/ordenes/{orden_id}/exportar", headers=auth_headers())
    assert resp.status_code == 200
    assert 'filename="flujo_OT-2025-MANT-101.xlsx"' in resp.headers["content-disposition"]
    assert resp.content[:2] == b"PK"
