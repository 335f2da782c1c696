from unittest.mock import MagicMock

from dependency_injector import providers
from config.config import Settings

AUTH_KEY = "open-sesame"


def test_authorize_correct_key(client):
    response = client.post("/authorize", json={"key": AUTH_KEY})
    assert response.status_code == 200
    assert response.json() == {"authorized": True, "message": "Authorization successful."}


def test_authorize_wrong_key(client):
    response = client.post("/authorize", json={"key": "open-sesame "})
    assert response.status_code == 401
    assert response.json() == {"authorized": False, "message": "Invalid authorization key."}


def test_authorize_empty_key_is_unauthorized(client):
    response = client.post("/authorize", json={"key": ""})
    assert response.status_code == 401
    assert response.json()["authorized"] is False


def test_authorize_very_long_key(client):
    response = client.post("/authorize", json={"key": "x" * 100_000})
    assert response.status_code == 401


def test_authorize_lone_surrogate_key(client):
    response = client.post(
        "/authorize",
        content=b'{"key": "\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    # Rejected either by validation or by the comparison, never authorized.
    assert response.status_code in (400, 401)
    assert response.json().get("authorized") is not True


def test_authorize_unicode_secret(client, container, monkeypatch):
    monkeypatch.setenv("POST_AUTHORIZATION_KEY", "ключ-🔑")
    container.settings.override(providers.Object(Settings()))

    assert client.post("/authorize", json={"key": "ключ-🔑"}).status_code == 200
    assert client.post("/authorize", json={"key": "ключ"}).status_code == 401


def test_authorize_records_presenting_identity(client, identities):
    response = client.post(
        "/authorize",
        json={"key": AUTH_KEY},
        headers={"Authorization": "Bearer token-stranger"},
    )
    assert response.status_code == 200
    assert identities.is_authorized("uid-stranger")


def test_authorize_wrong_key_does_not_record_identity(client, identities):
    client.post(
        "/authorize",
        json={"key": "nope"},
        headers={"Authorization": "Bearer token-stranger"},
    )
    assert not identities.is_authorized("uid-stranger")


def test_authorize_rejects_invalid_identity_token(client):
    response = client.post(
        "/authorize",
        json={"key": AUTH_KEY},
        headers={"Authorization": "Bearer forged"},
    )
    assert response.status_code == 401
    assert response.json() == {
        "authorized": False,
        "message": "Unauthorized: Invalid or missing identity token.",
    }


def test_authorize_rejects_malformed_header(client):
    response = client.post(
        "/authorize", json={"key": AUTH_KEY}, headers={"Authorization": "Basic abc"}
    )
    assert response.status_code == 401
    assert response.json()["authorized"] is False


def test_authorize_wrong_key_with_forged_token_reports_the_key(client, verifier):
    verifier.verify = MagicMock(wraps=verifier.verify)
    response = client.post(
        "/authorize",
        json={"key": "nope"},
        headers={"Authorization": "Bearer forged"},
    )
    assert response.status_code == 401
    assert response.json() == {"authorized": False, "message": "Invalid authorization key."}
    verifier.verify.assert_not_called()


def test_authorize_missing_secret(client, container, monkeypatch):
    monkeypatch.delenv("POST_AUTHORIZATION_KEY")
    container.settings.override(providers.Object(Settings()))

    response = client.post("/authorize", json={"key": AUTH_KEY})
    assert response.status_code == 500
    assert "Authorization key is missing" in response.json()["message"]


def test_authorize_missing_body(client):
    response = client.post("/authorize")
    assert response.status_code == 400
    assert response.json()["message"] == "Missing or malformed request body."


def test_authorize_missing_key_field(client):
    response = client.post("/authorize", json={})
    assert response.status_code == 400
    assert "key" in response.json()["message"]


def test_authorize_non_string_key(client):
    response = client.post("/authorize", json={"key": 12345})
    assert response.status_code == 400


def test_authorize_get_not_allowed(client):
    assert client.get("/authorize").status_code == 405


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_cors_preflight(client):
    response = client.options(
        "/authorize",
        headers={
            "Origin": "http://localhost:8501",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:8501"
