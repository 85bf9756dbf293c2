"""
Registration, login and the current-user endpoint.
"""

import bcrypt

from app.core.hasher import PasswordHelper
from conftest import auth_headers

REGISTRATION = {
    "email": "Mona.Adel@Example.com",
    "password": "s3cure-pass",
    "first_name": "Mona",
    "last_name": "Adel",
    "phone_number": "+971 50 123 4567",
}


def test_register_and_login(client):
    registered = client.post("/auth/register", json=REGISTRATION)

    assert registered.status_code == 201
    body = registered.json()
    assert body["success"] is True
    assert body["access_token"]
    assert body["user"]["email"] == "mona.adel@example.com"
    assert body["user"]["role"] == "student"

    login = client.post(
        "/auth/login",
        json={"email": "mona.adel@example.com", "password": "s3cure-pass"},
    )
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Mona Adel"


def test_register_duplicate_email(client):
    client.post("/auth/register", json=REGISTRATION)
    response = client.post("/auth/register", json=REGISTRATION)
    assert response.status_code == 400


def test_register_validation(client):
    response = client.post(
        "/auth/register", json={**REGISTRATION, "password": "short", "email": "nope"}
    )
    assert response.status_code == 400
    fields = {tuple(d["loc"]) for d in response.json()["details"]}
    assert ("body", "password") in fields
    assert ("body", "email") in fields


def test_login_wrong_password(client, user):
    response = client.post(
        "/auth/login", json={"email": user.email, "password": "wrong-password"}
    )
    assert response.status_code == 401


def test_login_inactive_user(client, db, user):
    user.is_active = False
    db.commit()
    response = client.post(
        "/auth/login", json={"email": user.email, "password": "password123"}
    )
    assert response.status_code == 403


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401


def test_me_with_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_me_with_fixture_user(client, user):
    response = client.get("/auth/me", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_login_upgrades_hash_cost(client, db, user):
    user.hashed_password = bcrypt.hashpw(b"password123", bcrypt.gensalt(rounds=5)).decode()
    db.commit()

    response = client.post(
        "/auth/login", json={"email": user.email, "password": "password123"}
    )

    assert response.status_code == 200
    db.expire_all()
    assert user.hashed_password.startswith("$2b$04$")


def test_malformed_hash_never_matches():
    assert PasswordHelper.check_password("anything", "plain-text") is False
    assert PasswordHelper.needs_rehash("plain-text") is True
