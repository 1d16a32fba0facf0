from fastapi.testclient import TestClient

from ecommerce_api.main import app

HEADERS = {"X-API-Key": "secret-api-key-123"}

NEW_USER = {"name": "Rina", "email": "rina@gmail.com", "status": "User", "role": "Cashier"}


def test_list_users() -> None:
    with TestClient(app) as client:
        response = client.get("/api/users", headers=HEADERS)
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "user list"
        assert [user["name"] for user in body["data"]] == ["Ujang", "Haikal", "MuZaky"]


def test_search_users_is_reachable_and_case_insensitive() -> None:
    with TestClient(app) as client:
        response = client.get("/api/users/search", params={"name": "HAI"}, headers=HEADERS)
        assert response.status_code == 200
        assert [user["email"] for user in response.json()["data"]] == ["haikal@gmail.com"]


def test_get_user_and_unknown_user() -> None:
    with TestClient(app) as client:
        found = client.get("/api/users/1", headers=HEADERS)
        assert found.status_code == 200
        assert found.json()["data"]["email"] == "ujang@gmail.com"

        missing = client.get("/api/users/42", headers=HEADERS)
        assert missing.status_code == 404
        assert missing.json() == {"success": False, "message": "user with that id not found"}


def test_create_user() -> None:
    with TestClient(app) as client:
        response = client.post("/api/users", json=NEW_USER, headers=HEADERS)
        assert response.status_code == 201
        assert response.json()["data"] == {"id": 4, **NEW_USER}


def test_create_user_validates_email_and_required_fields() -> None:
    with TestClient(app) as client:
        response = client.post(
            "/api/users",
            json={"name": "  ", "email": "not-an-email", "status": "User"},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "name", "message": "name is required"},
            {"field": "email", "message": "email must be a valid email address"},
            {"field": "role", "message": "role is required"},
        ]


def test_update_and_delete_user() -> None:
    with TestClient(app) as client:
        updated = client.put("/api/users/2", json=NEW_USER, headers=HEADERS)
        assert updated.status_code == 200
        assert updated.json()["data"] == {"id": 2, **NEW_USER}

        deleted = client.delete("/api/users/2", headers=HEADERS)
        assert deleted.status_code == 200
        assert deleted.json()["data"]["name"] == "Rina"

        assert client.delete("/api/users/2", headers=HEADERS).status_code == 404
        assert client.put("/api/users/2", json=NEW_USER, headers=HEADERS).json() == {
            "success": False,
            "message": "user not found",
        }


def test_user_ids_beyond_integer_range_are_not_found() -> None:
    too_big = "1" + "0" * 25
    with TestClient(app) as client:
        assert client.get(f"/api/users/{too_big}", headers=HEADERS).status_code == 404
        assert client.put(f"/api/users/{too_big}", json=NEW_USER, headers=HEADERS).status_code == 404
        assert client.delete(f"/api/users/{too_big}", headers=HEADERS).status_code == 404
