# File: tests/test_auth.py

from datetime import datetime, timedelta, timezone

import pytest

from app.core.security import TokenClaims
from app.models.enums import Role
from app.models.user import User
from app.services import auth_service

API = "/api/v1"


def test_first_user_is_admin_then_members(register):
    first = register("Ada")
    second = register("Ben")
    third = register("Cy")

    assert first.role == Role.ADMIN.value
    assert second.role == Role.TEAM_MEMBER.value
    assert third.role == Role.TEAM_MEMBER.value


def test_register_duplicate_email(client, register):
    register("Ada")
    resp = client.post(
        f"{API}/auth/register",
        json={"name": "Other Ada", "email": "ada@example.com", "password": "pw"},
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "conflict"
    assert "already exists" in resp.json()["detail"].lower()


def test_register_missing_field(client):
    resp = client.post(f"{API}/auth/register", json={"email": "x@example.com", "password": "pw"})
    assert resp.status_code == 422


def test_bootstrap_slot_is_claimed_once(db):
    a = auth_service._insert_user(db, name="A", email="a@example.com", password_hash="h", first=True)
    b = auth_service._insert_user(db, name="B", email="b@example.com", password_hash="h", first=True)

    assert a is not None and a.role is Role.ADMIN
    assert b is None
    assert db.query(User).count() == 1


def test_losing_the_bootstrap_slot_registers_a_member(db, monkeypatch):
    db.add(User(name="A", email="a@example.com", password_hash="h", role=Role.ADMIN, bootstrap_slot=1))
    db.commit()
    # a racing registration that still counted zero accounts
    monkeypatch.setattr(auth_service, "_no_accounts_yet", lambda _db: True)

    user = auth_service.register_user(db, name="B", email="b@example.com", password="pw")

    assert user.role is Role.TEAM_MEMBER
    assert user.bootstrap_slot is None
    assert db.query(User).count() == 2


@pytest.mark.parametrize("password", ["p" * 73, "é" * 37])
def test_register_rejects_password_over_72_bytes(client, password):
    resp = client.post(
        f"{API}/auth/register",
        json={"name": "Ada", "email": "ada@example.com", "password": password},
    )
    assert resp.status_code == 422
    assert client.post(
        f"{API}/auth/login", json={"email": "ada@example.com", "password": password}
    ).status_code == 401


def test_register_accepts_72_byte_password(client):
    resp = client.post(
        f"{API}/auth/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "p" * 72},
    )
    assert resp.status_code == 201


def test_login_and_profile_with_cookie(client, register):
    register("Ada", password="pw-ada")
    client.cookies.clear()

    resp = client.post(f"{API}/auth/login", json={"email": "ada@example.com", "password": "pw-ada"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["role"] == Role.ADMIN.value
    assert body["access_token"]
    assert "jwt" in resp.cookies

    profile = client.get(f"{API}/auth/profile")
    assert profile.status_code == 200
    assert profile.json()["email"] == "ada@example.com"
    assert "password_hash" not in profile.json()


@pytest.mark.parametrize(
    "email,password",
    [("ada@example.com", "wrong"), ("nobody@example.com", "pw-ada")],
)
def test_login_rejects_bad_credentials(client, register, email, password):
    register("Ada", password="pw-ada")
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_protected_route_without_token(client):
    client.cookies.clear()
    resp = client.get(f"{API}/auth/profile")
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthenticated"


def test_garbage_token_is_rejected(client):
    client.cookies.clear()
    resp = client.get(f"{API}/tasks", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_logout_revokes_token(client, register):
    ada = register("Ada")
    client.cookies.clear()

    assert client.get(f"{API}/auth/profile", headers=ada.headers).status_code == 200

    resp = client.post(f"{API}/auth/logout", headers=ada.headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logged out successfully"

    assert client.get(f"{API}/auth/profile", headers=ada.headers).status_code == 401


def test_logout_without_token_succeeds(client):
    client.cookies.clear()
    assert client.post(f"{API}/auth/logout").status_code == 200


def test_profile_of_deleted_user_is_not_found(client, accounts):
    client.cookies.clear()
    resp = client.delete(f"{API}/users/{accounts.member.id}", headers=accounts.admin.headers)
    assert resp.status_code == 200

    resp = client.get(f"{API}/auth/profile", headers=accounts.member.headers)
    assert resp.status_code == 404


def test_unknown_route(client):
    assert client.get(f"{API}/nope").status_code == 404


def test_health_endpoint(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_purge_expired_tokens(db):
    now = datetime.now(timezone.utc)
    auth_service.revoke_token(db, TokenClaims(user_id=1, jti="old", expires_at=now - timedelta(days=1)))
    auth_service.revoke_token(db, TokenClaims(user_id=1, jti="live", expires_at=now + timedelta(days=1)))

    assert auth_service.purge_expired_tokens(db) == 1
    assert not auth_service.is_revoked(db, "old")
    assert auth_service.is_revoked(db, "live")
