"""
HTTP tests for the current-user endpoints.
"""
from datetime import timedelta

from utils.security import ACCESS, create_token

from conftest import ACCESS_SECRET, ISSUER


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_me(client, register, login):
    user = register()
    tokens = login()
    resp = client.get("/api/v1/users/me", headers=_bearer(tokens["accessToken"]))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == user["id"]
    assert "password_hash" not in data


def test_me_requires_token(client):
    resp = client.get("/api/v1/users/me")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "UNAUTHORIZED", "message": "Unauthorized request", "status": 401}


def test_me_rejects_expired_access_token(client, register):
    user = register()
    expired = create_token(user["id"], ACCESS, ACCESS_SECRET, timedelta(seconds=-5), issuer=ISSUER)
    resp = client.get("/api/v1/users/me", headers=_bearer(expired))
    assert resp.status_code == 401


def test_me_for_deleted_identity(client):
    orphan = create_token("ghost", ACCESS, ACCESS_SECRET, timedelta(minutes=5), issuer=ISSUER)
    resp = client.get("/api/v1/users/me", headers=_bearer(orphan))
    assert resp.status_code == 401


def test_update_account(client, register, login):
    register()
    tokens = login()
    resp = client.patch(
        "/api/v1/users/me",
        json={"full_name": "Ada King", "email": "Ada@X.com"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["full_name"] == "Ada King"
    assert data["email"] == "ada@x.com"

    # the new email is the login identifier from now on
    assert client.post("/api/v1/auth/login", json={"email": "ada@x.com", "password": "p"}).status_code == 200


def test_update_account_requires_both_fields(client, register, login):
    register()
    tokens = login()
    resp = client.patch("/api/v1/users/me", json={"full_name": "X"}, headers=_bearer(tokens["accessToken"]))
    assert resp.status_code == 400


def test_update_account_email_taken(client, register, login):
    register()
    register(email="b@x.com", enrollment_number="EN-002")
    tokens = login()
    resp = client.patch(
        "/api/v1/users/me",
        json={"full_name": "Ada", "email": "b@x.com"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 409


def test_change_password(client, register, login):
    register()
    tokens = login()
    resp = client.post(
        "/api/v1/users/me/password",
        json={"old_password": "p", "new_password": "new-secret"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 200

    assert client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "p"}).status_code == 401
    assert client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "new-secret"}).status_code == 200


def test_change_password_wrong_old_password(client, register, login):
    register()
    tokens = login()
    resp = client.post(
        "/api/v1/users/me/password",
        json={"old_password": "wrong", "new_password": "new-secret"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Incorrect old password"
