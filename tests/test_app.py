"""Composition root: health endpoints, fallbacks and blanket error handling."""

import os

from fastapi.testclient import TestClient

import main
from config import LOG_DIR
from database import get_db


def test_health_endpoint(client):
    response = client.get("/api/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["message"] == "Medzy Backend Server is running!"
    assert data["environment"] == "test"
    assert "timestamp" in data


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "running"
    assert data["message"] == "Medzy Healthcare & Medicine Tracker API"


def test_unknown_route_returns_route_not_found(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Route not found", "path": "/api/does-not-exist"}


def test_unknown_route_any_method(client):
    response = client.delete("/nowhere/at/all")
    assert response.status_code == 404
    assert response.json()["path"] == "/nowhere/at/all"


def test_unsupported_method_on_known_path_is_route_not_found(client):
    response = client.delete("/api/health")
    assert response.status_code == 404
    assert response.json() == {"message": "Route not found", "path": "/api/health"}


def test_handler_404_keeps_its_detail(client):
    response = client.get("/api/medicines/999999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Medicine not found"}


def _boom():
    raise RuntimeError("database exploded")


def test_unhandled_error_is_logged_and_masked_outside_production(client):
    main.app.dependency_overrides[get_db] = _boom
    try:
        response = client.get("/api/medicines/")
    finally:
        main.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong!", "error": "database exploded"}
    with open(os.path.join(LOG_DIR, "errors.log"), encoding="utf-8") as f:
        assert "Unhandled server error on GET /api/medicines/" in f.read()


def test_unhandled_error_hides_detail_in_production(client, monkeypatch):
    monkeypatch.setattr(main, "IS_PRODUCTION", True)
    main.app.dependency_overrides[get_db] = _boom
    try:
        response = client.get("/api/medicines/")
    finally:
        main.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"


def test_oversized_body_is_rejected(client, monkeypatch):
    monkeypatch.setattr(main, "MAX_BODY_BYTES", 100)
    response = client.post(
        "/api/auth/login",
        content=b"{" + b" " * 200 + b"}",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json() == {"message": "Request body too large"}


def test_cors_allows_development_origin(client):
    response = client.options(
        "/api/health",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_serverless_app_has_same_routes_without_lifespan():
    serverless_app = main.create_app(serverless=True)
    paths = set(serverless_app.openapi()["paths"])
    assert "/api/health" in paths
    assert "/api/orders/" in paths

    response = TestClient(serverless_app).get("/api/health")
    assert response.status_code == 200


def test_all_route_modules_are_mounted(client):
    prefixes = [
        "/api/auth",
        "/api/users",
        "/api/profile",
        "/api/support",
        "/api/medicines",
        "/api/cart",
        "/api/medicine-requests",
        "/api/orders",
        "/api/donations",
        "/api/daily-updates",
        "/api/reviews",
        "/api/service-reviews",
        "/api/payments",
        "/api/disputes",
        "/api/smart-doctor",
        "/api/medicine-reminders",
        "/api/medical-profile",
        "/api/customer-points",
        "/api/revenue-adjustments",
    ]
    paths = list(main.app.openapi()["paths"])
    for prefix in prefixes:
        assert any(p.startswith(prefix) for p in paths), prefix
