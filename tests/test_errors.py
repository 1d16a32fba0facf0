import pytest
from fastapi.testclient import TestClient

from ecommerce_api.config import get_settings
from ecommerce_api.errors import RouteNotFoundError, status_for_message
from ecommerce_api.main import app

HEADERS = {"X-API-Key": "secret-api-key-123"}


@pytest.fixture
def development_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rotated_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "rotated-key")
    get_settings.cache_clear()
    yield "rotated-key"
    get_settings.cache_clear()


def test_status_for_message() -> None:
    assert status_for_message("product with that id not found") == 404
    assert status_for_message("Route /x Not Found") == 404
    assert status_for_message("Expecting value") == 400
    assert status_for_message("") == 400


def test_route_not_found_message() -> None:
    error = RouteNotFoundError("/api/nothing")
    assert error.message == "Route /api/nothing not found"
    assert error.path == "/api/nothing"


def test_development_mode_exposes_stack(development_env) -> None:
    with TestClient(app) as client:
        response = client.get("/api/products/99", headers=HEADERS)
        assert response.status_code == 404
        body = response.json()
        assert "NotFoundError" in body["errors"]["stack"]


def test_development_mode_stack_for_unhandled_errors(development_env) -> None:
    with TestClient(app) as client:
        response = client.post(
            "/api/products",
            content="[1, 2",
            headers={**HEADERS, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "JSONDecodeError" in response.json()["errors"]["stack"]


def test_development_mode_keeps_validation_shape(development_env) -> None:
    with TestClient(app) as client:
        response = client.post("/api/products", json={"name": "Lamp"}, headers=HEADERS)
        assert response.status_code == 400
        assert isinstance(response.json()["errors"], list)


def test_production_mode_hides_stack() -> None:
    with TestClient(app) as client:
        response = client.get("/missing/route", headers=HEADERS)
        assert response.status_code == 404
        assert "errors" not in response.json()


def test_api_key_comes_from_settings(rotated_key) -> None:
    with TestClient(app) as client:
        assert client.get("/api/products", headers=HEADERS).status_code == 403
        assert client.get("/api/products", headers={"X-API-Key": rotated_key}).status_code == 200
