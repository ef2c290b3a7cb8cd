# File: tests/test_users.py

from app.services import user_service

API = "/api/v1"


def _team(client, accounts, name, members):
    resp = client.post(
        f"{API}/teams", json={"name": name, "members": members}, headers=accounts.admin.headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _members(client, accounts, team_id):
    teams = client.get(f"{API}/teams", headers=accounts.admin.headers).json()
    team = next(t for t in teams if t["id"] == team_id)
    return {m["id"] for m in team["members"]}


def test_list_users_hides_password_and_populates_team(client, accounts):
    eng = _team(client, accounts, "Eng", [accounts.member.id])

    resp = client.get(f"{API}/users", headers=accounts.admin.headers)
    assert resp.status_code == 200
    users = {u["id"]: u for u in resp.json()}
    assert len(users) == 4
    assert all("password_hash" not in u and "password" not in u for u in users.values())
    assert users[accounts.member.id]["team"] == {"id": eng["id"], "name": "Eng"}
    assert users[accounts.other.id]["team"] is None


def test_user_admin_is_admin_only(client, accounts):
    for who in (accounts.lead, accounts.member):
        assert client.get(f"{API}/users", headers=who.headers).status_code == 403
        assert client.put(f"{API}/users/{accounts.other.id}", json={"name": "X"}, headers=who.headers).status_code == 403
        assert client.delete(f"{API}/users/{accounts.other.id}", headers=who.headers).status_code == 403


def test_update_user_leaves_password_alone(client, accounts):
    resp = client.put(
        f"{API}/users/{accounts.member.id}",
        json={"name": "Mia Lee", "role": "Team Lead", "password": "hijacked"},
        headers=accounts.admin.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Mia Lee"
    assert resp.json()["role"] == "Team Lead"

    login = client.post(
        f"{API}/auth/login",
        json={"email": accounts.member.email, "password": accounts.member.password},
    )
    assert login.status_code == 200


def test_update_user_email_conflict(client, accounts):
    resp = client.put(
        f"{API}/users/{accounts.member.id}",
        json={"email": accounts.other.email},
        headers=accounts.admin.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "conflict"


def test_email_taken_at_commit_is_a_conflict(client, accounts, monkeypatch):
    # the pre-check misses a duplicate written by a concurrent request
    monkeypatch.setattr(user_service, "_email_taken", lambda *_: False)

    resp = client.put(
        f"{API}/users/{accounts.member.id}",
        json={"email": accounts.other.email},
        headers=accounts.admin.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "conflict"

    users = {u["id"]: u for u in client.get(f"{API}/users", headers=accounts.admin.headers).json()}
    assert users[accounts.member.id]["email"] == accounts.member.email


def test_update_user_team_moves_membership(client, accounts):
    eng = _team(client, accounts, "Eng", [accounts.member.id])
    ops = _team(client, accounts, "Ops", [])

    resp = client.put(
        f"{API}/users/{accounts.member.id}", json={"team_id": ops["id"]}, headers=accounts.admin.headers
    )
    assert resp.status_code == 200
    assert resp.json()["team_id"] == ops["id"]
    assert _members(client, accounts, eng["id"]) == set()
    assert _members(client, accounts, ops["id"]) == {accounts.member.id}

    resp = client.put(
        f"{API}/users/{accounts.member.id}", json={"team_id": None}, headers=accounts.admin.headers
    )
    assert resp.status_code == 200
    assert resp.json()["team_id"] is None
    assert _members(client, accounts, ops["id"]) == set()


def test_update_user_unknown_team(client, accounts):
    resp = client.put(
        f"{API}/users/{accounts.member.id}", json={"team_id": 999}, headers=accounts.admin.headers
    )
    assert resp.status_code == 400


def test_update_name_only_keeps_team(client, accounts):
    eng = _team(client, accounts, "Eng", [accounts.member.id])
    resp = client.put(f"{API}/users/{accounts.member.id}", json={"name": "M"}, headers=accounts.admin.headers)
    assert resp.json()["team_id"] == eng["id"]
    assert _members(client, accounts, eng["id"]) == {accounts.member.id}


def test_delete_user_drops_membership(client, accounts):
    eng = _team(client, accounts, "Eng", [accounts.member.id, accounts.other.id])

    resp = client.delete(f"{API}/users/{accounts.member.id}", headers=accounts.admin.headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "User removed"
    assert _members(client, accounts, eng["id"]) == {accounts.other.id}

    assert client.delete(f"{API}/users/{accounts.member.id}", headers=accounts.admin.headers).status_code == 404
    assert client.put(f"{API}/users/{accounts.member.id}", json={}, headers=accounts.admin.headers).status_code == 404
