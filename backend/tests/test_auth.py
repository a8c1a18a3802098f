from fastapi.testclient import TestClient

import backend.config as config
import backend.security as security
from backend.main import create_app
from conftest import insert_visit
from database.db import Database


def test_login_returns_token_and_user(client):
    res = client.post(
        "/auth/login",
        json={"username": config.ADMIN_USERNAME, "password": config.ADMIN_PASSWORD},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["expires_in"] > 0
    assert data["user"]["username"] == config.ADMIN_USERNAME
    assert data["user"]["displayName"] == config.ADMIN_DISPLAY_NAME


def test_login_rejects_invalid_credentials(client):
    res = client.post(
        "/auth/login",
        json={"username": config.ADMIN_USERNAME, "password": "wrong-password"},
    )
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": "Invalid admin credentials."}

    res = client.post("/auth/login", json={"username": "", "password": "x"})
    assert res.status_code == 400


def test_me_reflects_session(client, auth_headers):
    res = client.get("/auth/me", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["data"]["username"] == config.ADMIN_USERNAME


def test_tampered_token_is_rejected(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    res = client.get("/auth/me", headers={"Authorization": f"Bearer {token}x"})
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid or expired session token."

    res = client.get("/auth/me", headers={"Authorization": f"Basic {token}"})
    assert res.status_code == 401


def test_register_requires_session(client):
    res = client.post("/auth/register", json={"username": "pustakawan", "password": "rahasia1"})
    assert res.status_code == 401


def test_register_then_login(client, auth_headers):
    res = client.post(
        "/auth/register",
        json={"username": "pustakawan", "password": "rahasia1", "displayName": "Pustakawan"},
        headers=auth_headers,
    )
    assert res.status_code == 201
    assert res.json()["data"]["displayName"] == "Pustakawan"

    res = client.post("/auth/login", json={"username": "pustakawan", "password": "rahasia1"})
    assert res.status_code == 200

    listed = client.get("/auth/admins", headers=auth_headers).json()["data"]
    assert {a["username"] for a in listed} == {config.ADMIN_USERNAME, "pustakawan"}


def test_password_whitespace_is_significant(client, auth_headers):
    res = client.post(
        "/auth/register",
        json={"username": "pustakawan", "password": "rahasia1 "},
        headers=auth_headers,
    )
    assert res.status_code == 201

    res = client.post("/auth/login", json={"username": "pustakawan", "password": "rahasia1 "})
    assert res.status_code == 200

    res = client.post("/auth/login", json={"username": "pustakawan", "password": "rahasia1"})
    assert res.status_code == 401


def test_register_validation(client, auth_headers):
    res = client.post(
        "/auth/register",
        json={"username": "pendek", "password": "12345"},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert "at least 6" in res.json()["error"]

    res = client.post(
        "/auth/register",
        json={"username": config.ADMIN_USERNAME.upper(), "password": "123456"},
        headers=auth_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Username already exists."


def test_admins_list_requires_session(client):
    assert client.get("/auth/admins").status_code == 401


def test_change_password(client):
    base = {"username": config.ADMIN_USERNAME}

    res = client.put("/auth/password", json={**base, "currentPassword": "nope", "newPassword": "baru123"})
    assert res.status_code == 401

    res = client.put(
        "/auth/password",
        json={**base, "currentPassword": config.ADMIN_PASSWORD, "newPassword": "123"},
    )
    assert res.status_code == 400

    res = client.put(
        "/auth/password",
        json={"username": "ghost", "currentPassword": "whatever", "newPassword": "baru123"},
    )
    assert res.status_code == 404

    res = client.put(
        "/auth/password",
        json={**base, "currentPassword": config.ADMIN_PASSWORD, "newPassword": "baru123"},
    )
    assert res.status_code == 200

    old = client.post("/auth/login", json={"username": config.ADMIN_USERNAME, "password": config.ADMIN_PASSWORD})
    assert old.status_code == 401
    new = client.post("/auth/login", json={"username": config.ADMIN_USERNAME, "password": "baru123"})
    assert new.status_code == 200


def test_init_is_forbidden_without_configured_secret(client, monkeypatch):
    monkeypatch.setattr(security, "INIT_SECRET", "")
    res = client.post("/auth/init", headers={"X-Init-Secret": ""})
    assert res.status_code == 403
    assert res.json() == {"success": False, "error": "Forbidden"}


def test_init_reports_existing_admin(client, monkeypatch):
    monkeypatch.setattr(security, "INIT_SECRET", "bootstrap-me")

    res = client.post("/auth/init", headers={"X-Init-Secret": "wrong"})
    assert res.status_code == 403

    res = client.post("/auth/init", headers={"X-Init-Secret": "bootstrap-me"})
    assert res.status_code == 200
    body = res.json()
    assert body["initialized"] is False
    assert config.ADMIN_PASSWORD not in body["message"]


def test_init_seeds_admin_into_empty_table(client, db, monkeypatch):
    monkeypatch.setattr(security, "INIT_SECRET", "bootstrap-me")
    db.execute("DELETE FROM admins")

    res = client.post("/auth/init", headers={"X-Init-Secret": "bootstrap-me"})
    assert res.status_code == 200
    assert res.json()["initialized"] is True

    res = client.post(
        "/auth/login",
        json={"username": config.ADMIN_USERNAME, "password": config.ADMIN_PASSWORD},
    )
    assert res.status_code == 200


def test_debug_lockers_is_not_mounted_by_default(client):
    res = client.get("/debug/lockers")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_debug_lockers_requires_session_when_enabled(tmp_path, clock, monkeypatch):
    monkeypatch.setattr(config, "ENABLE_DEBUG_ENDPOINTS", True)
    app = create_app(db=Database(tmp_path / "debug.db", flush_delay=60, clock=clock))

    with TestClient(app) as client:
        insert_visit(app.state.db, visit_time="2026-03-10 09:00:00", locker_number="11")
        insert_visit(app.state.db, visit_time="2026-03-10 09:05:00")

        res = client.get("/debug/lockers")
        assert res.status_code == 401

        login = client.post(
            "/auth/login",
            json={"username": config.ADMIN_USERNAME, "password": config.ADMIN_PASSWORD},
        )
        headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}
        res = client.get("/debug/lockers", headers=headers)
        assert res.status_code == 200
        body = res.json()
        assert body["totalRows"] == 1
        assert body["data"][0]["locker_number"] == "11"
