from datetime import datetime

from fastapi.testclient import TestClient

from users_api.errors import StoreError
from users_api.main import create_app

from conftest import JOHN

USERS = "/api/v1/users"


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "OK"}


def test_create_user(client):
    response = client.post(USERS, json=JOHN)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["first_name"] == "John"
    assert body["last_name"] == "Doe"
    assert body["email"] == "john@example.com"
    assert body["created_at"] == body["updated_at"]
    assert _parse(body["created_at"]).tzinfo is not None


def test_create_then_get_returns_same_user(client):
    created = client.post(USERS, json=JOHN).json()

    response = client.get(f"{USERS}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_duplicate_email_conflicts(client):
    assert client.post(USERS, json=JOHN).status_code == 201

    response = client.post(USERS, json=JOHN)

    assert response.status_code == 409
    assert response.json() == {"error": "User already exists"}


def test_ids_are_not_reused(client):
    first = client.post(USERS, json=JOHN).json()
    client.post(USERS, json=JOHN)
    second = client.post(USERS, json={**JOHN, "email": "other@example.com"}).json()

    assert second["id"] > first["id"]


def test_get_missing_user(client):
    response = client.get(f"{USERS}/999999")

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_update_user(client):
    created = client.post(USERS, json=JOHN).json()
    update = {"first_name": "Jane", "last_name": "Roe", "email": "jane@example.com"}

    response = client.put(f"{USERS}/{created['id']}", json=update)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["first_name"] == "Jane"
    assert body["last_name"] == "Roe"
    assert body["email"] == "jane@example.com"
    assert body["created_at"] == created["created_at"]
    assert _parse(body["updated_at"]) > _parse(created["updated_at"])

    fetched = client.get(f"{USERS}/{created['id']}").json()
    assert fetched == body


def test_update_missing_user(client):
    response = client.put(f"{USERS}/999999", json=JOHN)

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_update_to_taken_email_is_server_error(client):
    client.post(USERS, json=JOHN)
    other = client.post(USERS, json={**JOHN, "email": "other@example.com"}).json()

    response = client.put(f"{USERS}/{other['id']}", json=JOHN)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_missing_body(client):
    assert client.post(USERS).json() == {"error": "Missing request body"}
    assert client.post(USERS).status_code == 400

    created = client.post(USERS, json=JOHN).json()
    response = client.put(f"{USERS}/{created['id']}")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing request body"}


def test_missing_body_does_not_reach_store(fake_client, fake_store):
    response = fake_client.post(USERS)

    assert response.status_code == 400
    assert fake_store.calls == []


def test_invalid_payloads_are_rejected(client):
    cases = [
        {**JOHN, "email": ""},
        {**JOHN, "email": "not-an-email"},
        {**JOHN, "first_name": ""},
        {"first_name": "John", "email": "john@example.com"},
    ]
    for payload in cases:
        response = client.post(USERS, json=payload)
        assert response.status_code == 400, payload
        assert response.json() == {"error": "Invalid request"}


def test_email_is_stored_as_sent(client):
    payload = {**JOHN, "email": "John.Doe@EXAMPLE.COM"}

    created = client.post(USERS, json=payload)

    assert created.status_code == 201
    assert created.json()["email"] == "John.Doe@EXAMPLE.COM"
    assert client.get(f"{USERS}/{created.json()['id']}").json()["email"] == "John.Doe@EXAMPLE.COM"


def test_display_name_email_is_rejected(client):
    for email in ("Mallory <john@example.com>", "<john@example.com>"):
        response = client.post(USERS, json={**JOHN, "email": email})
        assert response.status_code == 400, email
        assert response.json() == {"error": "Invalid request"}


def test_malformed_json_is_rejected(client):
    response = client.post(USERS, content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}


def test_malformed_ids_are_rejected(client):
    for user_id in ("abc", "-1", "1.5"):
        response = client.get(f"{USERS}/{user_id}")
        assert response.status_code == 400, user_id
        assert response.json() == {"error": "Invalid request"}


def test_store_failures_return_generic_error(fake_client, fake_store):
    fake_store.error = StoreError("failed to create user: relation users does not exist")

    response = fake_client.post(USERS, json=JOHN)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unexpected_errors_become_500(fake_client, fake_store):
    fake_store.error = RuntimeError("boom")

    response = fake_client.get(f"{USERS}/1")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/v1/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_store_closed_on_shutdown(settings, fake_store):
    with TestClient(create_app(settings, store=fake_store)):
        assert not fake_store.closed
    assert fake_store.closed
