from __future__ import annotations

import pytest

from src.inventory_system.inventory_system.main import create_app


@pytest.fixture
def app():
    return create_app("config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email="admin@example.com", password="admin123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_and_me(client):
    resp = _login(client)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["role"] == "admin"
    assert "password_hash" not in body
    assert "roles.manage" in body["permissions"]

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.get_json()["email"] == "admin@example.com"


def test_bad_login_is_401(client):
    assert _login(client, password="nope").status_code == 401


def test_requires_login(client):
    resp = client.get("/api/employees")
    assert resp.status_code == 401
    assert resp.get_json()["message"]


def test_archive_flow_over_http(client):
    _login(client)
    employee = client.post(
        "/api/employees", json={"full_name": "P1", "position": "Engineer", "grade": "1"}
    ).get_json()
    item = client.post(
        "/api/equipment",
        json={"name": "Laptop", "inventory_number": "INV-1", "employee_id": employee["employee_id"], "cost": "999.90"},
    )
    assert item.status_code == 201
    assert item.get_json()["state"] == "assigned"

    resp = client.post(f"/api/employees/{employee['employee_id']}/archive")
    assert resp.status_code == 200
    assert resp.get_json()["is_archived"] is True

    warehouse = client.get("/api/warehouse/equipment").get_json()
    assert [e["inventory_number"] for e in warehouse] == ["INV-1"]
    archived = client.get("/api/employees/archived").get_json()
    assert [e["full_name"] for e in archived] == ["P1"]

    logs = client.get("/api/audit-logs?entity_type=employee&action=archive").get_json()
    assert len(logs) == 1


def test_domain_errors_map_to_status_codes(client):
    _login(client)
    item = client.post("/api/equipment", json={"name": "Old PC", "inventory_number": "INV-9"}).get_json()
    eid = item["equipment_id"]

    assert client.post("/api/equipment", json={"name": "", "inventory_number": "INV-10"}).status_code == 400
    assert client.post(f"/api/equipment/{eid}/decommission").status_code == 200
    assert client.post(f"/api/equipment/{eid}/assign", json={"employee_id": 1}).status_code == 409
    assert client.delete(f"/api/equipment/{eid}").status_code == 200
    assert client.delete(f"/api/equipment/{eid}").status_code == 404

    roles = client.get("/api/roles").get_json()
    admin_role = next(r for r in roles if r["name"] == "admin")
    assert client.delete(f"/api/roles/{admin_role['role_id']}").status_code == 409


def test_permission_denied_is_403(client):
    _login(client)
    client.post(
        "/api/users",
        json={"email": "om@example.com", "password": "secret1", "full_name": "Office", "role": "office-manager"},
    )
    client.post("/api/auth/logout")

    _login(client, "om@example.com", "secret1")
    assert client.get("/api/warehouse/equipment").status_code == 200
    assert client.post("/api/roles", json={"name": "R1", "display_name": "R1"}).status_code == 403
    assert client.get("/api/employees").status_code == 403


def test_document_fields_hidden_without_documents_view(client):
    _login(client)
    created = client.post(
        "/api/employees",
        json={"full_name": "P1", "position": "Engineer", "grade": "1", "passport_number": "123456"},
    ).get_json()
    assert created["passport_number"] == "123456"

    client.post(
        "/api/users",
        json={"email": "sa@example.com", "password": "secret1", "full_name": "Sys", "role": "sysadmin"},
    )
    role_id = next(r["role_id"] for r in client.get("/api/roles").get_json() if r["name"] == "sysadmin")
    perms = client.get("/api/permissions").get_json()
    view_id = next(p["permission_id"] for p in perms["employees"] if p["name"] == "employees.view")
    assert client.post(f"/api/roles/{role_id}/permissions/{view_id}").get_json() == {"changed": True}
    client.post("/api/auth/logout")

    _login(client, "sa@example.com", "secret1")
    card = client.get(f"/api/employees/{created['employee_id']}").get_json()
    assert card["full_name"] == "P1"
    assert "passport_number" not in card


def test_registration_round_trip(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": "secret1", "full_name": "New", "role": "sysadmin"},
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["request_id"]
    assert "password_hash" not in resp.get_json()

    _login(client)
    pending = client.get("/api/registration-requests?status=pending").get_json()
    assert [r["request_id"] for r in pending] == [request_id]
    assert client.post(f"/api/registration-requests/{request_id}/approve").status_code == 201
    assert client.post(f"/api/registration-requests/{request_id}/approve").status_code == 409
    client.post("/api/auth/logout")

    assert _login(client, "new@example.com", "secret1").status_code == 200


def test_notifications_for_other_users(client):
    _login(client)
    client.post(
        "/api/users",
        json={"email": "acc@example.com", "password": "secret1", "full_name": "Acc", "role": "accountant"},
    )
    client.post("/api/employees", json={"full_name": "P1", "position": "Engineer", "grade": "1"})
    client.post("/api/auth/logout")

    _login(client, "acc@example.com", "secret1")
    assert client.get("/api/notifications/unread-count").get_json() == {"count": 1}
    notes = client.get("/api/notifications").get_json()
    assert client.put(f"/api/notifications/{notes[0]['notification_id']}/read").status_code == 200
    assert client.get("/api/notifications/unread-count").get_json() == {"count": 0}
