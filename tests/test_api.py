"""
HTTP-level tests against an app backed by in-memory SQLite.
"""

import logging
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from auth.jwt import TokenService

from conftest import TEST_SECRET, auth_headers, register


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


class TestPublicEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["environment"] == "test"
        assert "timestamp" in body
        assert "X-Process-Time" in response.headers

    def test_root(self, client):
        body = client.get("/").json()
        assert set(body) == {"message", "version", "description"}
        assert body["version"] == "1.0.0"


class TestRegistration:
    def test_register_returns_public_projection(self, client):
        response = register(client, "alice1")
        assert response.status_code == 201
        body = response.json()
        assert body["message"]
        assert set(body["user"]) == {"id", "login", "role", "created_at"}
        assert body["user"]["login"] == "alice1"
        assert body["user"]["role"] == "USER"
        assert "password" not in response.text

    def test_duplicate_login_is_409(self, client):
        assert register(client, "duplicateuser").status_code == 201
        response = register(client, "duplicateuser", "another1")
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Conflict"
        assert body["status"] == 409

    def test_validation_report_shape(self, client):
        response = client.post("/register", json={"login": "ab", "password": "123"})
        assert response.status_code == 400
        body = response.json()
        assert set(body) == {"timestamp", "status", "error", "fieldErrors"}
        assert body["status"] == 400
        assert body["error"] == "Bad Request"
        assert body["fieldErrors"] == [
            {
                "field": "login",
                "code": "INVALID_LENGTH",
                "message": "Login must be between 3 and 50 characters",
            },
            {
                "field": "password",
                "code": "INVALID_LENGTH",
                "message": "Password must be at least 6 characters",
            },
        ]

    @pytest.mark.parametrize("length, status", [(3, 201), (50, 201), (2, 400), (51, 400)])
    def test_login_length_boundaries(self, client, length, status):
        response = register(client, "a" * length)
        assert response.status_code == status
        if status == 400:
            assert response.json()["fieldErrors"][0]["code"] == "INVALID_LENGTH"

    def test_empty_body_reports_required_fields(self, client):
        response = client.post("/register")
        assert response.status_code == 400
        codes = [(e["field"], e["code"]) for e in response.json()["fieldErrors"]]
        assert codes == [("login", "REQUIRED"), ("password", "REQUIRED")]

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert [(e["field"], e["code"]) for e in response.json()["fieldErrors"]] == [
            ("body", "INVALID_FORMAT"),
        ]

    def test_non_object_body_is_400(self, client):
        response = client.post("/register", json=["alice1", "secret1"])
        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"
        assert response.json()["fieldErrors"][0]["field"] == "body"


class TestLogin:
    def test_login_returns_token_for_account(self, client):
        user = register(client, "alice1").json()["user"]
        response = client.post("/login", json={"login": "alice1", "password": "secret1"})
        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": user["id"], "login": "alice1", "role": "USER"}
        claims = TokenService(TEST_SECRET).verify(body["token"])
        assert (claims.id, claims.login, claims.role.value) == (user["id"], "alice1", "USER")

    def test_wrong_password_and_unknown_login_are_identical(self, client):
        register(client, "alice1")
        wrong = client.post("/login", json={"login": "alice1", "password": "wrong12"})
        unknown = client.post("/login", json={"login": "ghost1", "password": "secret1"})
        assert wrong.status_code == unknown.status_code == 401

        def strip(body):
            return {k: v for k, v in body.items() if k != "timestamp"}

        assert strip(wrong.json()) == strip(unknown.json())

    def test_missing_fields_is_400(self, client):
        response = client.post("/login", json={"login": "alice1"})
        assert response.status_code == 400
        assert response.json()["fieldErrors"][0]["code"] == "REQUIRED"


class TestTasks:
    def test_end_to_end_scenario(self, client):
        assert register(client, "alice1", "secret1").status_code == 201
        login = client.post("/login", json={"login": "alice1", "password": "secret1"})
        assert login.status_code == 200
        headers = {"Authorization": f"Bearer {login.json()['token']}"}

        created = client.post("/tasks", json={"title": "Buy milk"}, headers=headers)
        assert created.status_code == 201
        task = created.json()
        assert task["status"] == "PENDING"
        assert task["description"] is None

        listed = client.get("/tasks", headers=headers)
        assert listed.status_code == 200
        assert [t["id"] for t in listed.json()] == [task["id"]]

        deleted = client.delete(f"/tasks/{task['id']}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"]

        assert client.get(f"/tasks/{task['id']}", headers=headers).status_code == 404
        assert client.delete(f"/tasks/{task['id']}", headers=headers).status_code == 404

    def test_update_round_trip(self, client):
        headers = auth_headers(client, "alice1")
        task = client.post(
            "/tasks", json={"title": "Buy milk", "description": "2 cartons"}, headers=headers,
        ).json()

        response = client.put(
            f"/tasks/{task['id']}",
            json={"title": "Buy milk", "status": "COMPLETED"},
            headers=headers,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["status"] == "COMPLETED"
        assert updated["description"] == "2 cartons"

        fetched = client.get(f"/tasks/{task['id']}", headers=headers).json()
        assert fetched["status"] == "COMPLETED"
        assert _parse(fetched["updated_at"]) > _parse(fetched["created_at"])
        assert _parse(fetched["created_at"]) == _parse(task["created_at"])

    def test_update_can_clear_description(self, client):
        headers = auth_headers(client, "alice1")
        task = client.post(
            "/tasks", json={"title": "t", "description": "d"}, headers=headers,
        ).json()
        updated = client.put(
            f"/tasks/{task['id']}",
            json={"title": "t", "description": None, "status": "IN_PROGRESS"},
            headers=headers,
        ).json()
        assert updated["description"] is None
        assert updated["status"] == "IN_PROGRESS"

    def test_other_account_gets_404_not_403(self, client):
        alice = auth_headers(client, "alice1")
        bob = auth_headers(client, "bob_22")
        task = client.post("/tasks", json={"title": "Alice only"}, headers=alice).json()

        assert client.get("/tasks", headers=bob).json() == []
        assert client.get(f"/tasks/{task['id']}", headers=bob).status_code == 404
        put = client.put(f"/tasks/{task['id']}", json={"title": "mine"}, headers=bob)
        assert put.status_code == 404
        assert client.delete(f"/tasks/{task['id']}", headers=bob).status_code == 404

        missing = client.get("/tasks/999999", headers=bob)
        assert put.json()["message"] == missing.json()["message"]

        still_there = client.get(f"/tasks/{task['id']}", headers=alice).json()
        assert still_there["title"] == "Alice only"

    def test_list_is_newest_first(self, client):
        headers = auth_headers(client, "alice1")
        ids = [
            client.post("/tasks", json={"title": f"task {i}"}, headers=headers).json()["id"]
            for i in range(3)
        ]
        listed = client.get("/tasks", headers=headers).json()
        assert [t["id"] for t in listed] == list(reversed(ids))

    @pytest.mark.parametrize("length, status", [(255, 201), (256, 400)])
    def test_title_boundaries(self, client, length, status):
        headers = auth_headers(client, "alice1")
        response = client.post("/tasks", json={"title": "t" * length}, headers=headers)
        assert response.status_code == status

    def test_create_reports_all_fields(self, client):
        headers = auth_headers(client, "alice1")
        response = client.post(
            "/tasks",
            json={"title": "", "description": "d" * 1001, "status": "DONE"},
            headers=headers,
        )
        assert response.status_code == 400
        codes = [(e["field"], e["code"]) for e in response.json()["fieldErrors"]]
        assert codes == [
            ("title", "REQUIRED"),
            ("description", "INVALID_LENGTH"),
            ("status", "INVALID_VALUE"),
        ]

    def test_non_integer_id_is_400(self, client):
        headers = auth_headers(client, "alice1")
        response = client.get("/tasks/abc", headers=headers)
        assert response.status_code == 400
        assert response.json()["fieldErrors"][0]["field"] == "task_id"

    @pytest.mark.parametrize("task_id", ["99999999999999999999", "2147483648", "0", "-1"])
    def test_ids_outside_storage_range_are_404(self, client, task_id):
        headers = auth_headers(client, "alice1")
        client.post("/tasks", json={"title": "Buy milk"}, headers=headers)

        assert client.get(f"/tasks/{task_id}", headers=headers).status_code == 404
        put = client.put(f"/tasks/{task_id}", json={"title": "x"}, headers=headers)
        assert put.status_code == 404
        assert put.json()["message"] == "Task not found"
        assert client.delete(f"/tasks/{task_id}", headers=headers).status_code == 404
        assert len(client.get("/tasks", headers=headers).json()) == 1


class TestAccessLog:
    def test_logs_account_of_authenticated_requests(self, client, caplog):
        headers = auth_headers(client, "alice1")
        account_id = client.post(
            "/login", json={"login": "alice1", "password": "secret1"},
        ).json()["user"]["id"]

        with caplog.at_level(logging.DEBUG, logger="main"):
            response = client.get("/tasks", headers=headers)
        assert "X-Process-Time" in response.headers
        messages = [r.getMessage() for r in caplog.records if r.name == "main"]
        assert any(
            m.startswith("GET /tasks -> 200") and f"(account={account_id})" in m
            for m in messages
        )

    def test_anonymous_requests_log_no_account(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="main"):
            client.get("/tasks")
        messages = [r.getMessage() for r in caplog.records if r.name == "main"]
        assert any(m.startswith("GET /tasks -> 401") and "(account=-)" in m for m in messages)


class TestInternalErrors:
    def test_unexpected_errors_are_opaque(self, settings):
        from main import create_app

        app = create_app(settings)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("connection to db failed: password=hunter2")

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "Internal server error"
        assert "hunter2" not in response.text
