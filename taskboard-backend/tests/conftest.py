# File: tests/conftest.py

import os

# Must be set before app modules read settings / build the engine.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_db, get_policy
from app.core.config import LeadTaskScope
from app.db.init_db import init_db
from app.db.session import build_engine
from app.main import app
from app.models.base import Base
from app.models.enums import Role
from app.models.user import User
from app.services.access_policy import AccessPolicy

API = "/api/v1"


@pytest.fixture()
def engine():
    eng = build_engine("sqlite://")
    init_db(eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def policy() -> AccessPolicy:
    return AccessPolicy(LeadTaskScope.GLOBAL)


@pytest.fixture()
def client(session_factory, policy):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_policy] = lambda: policy
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    """Insert a user directly, bypassing registration."""

    def _make(name: str, role: Role = Role.TEAM_MEMBER) -> User:
        user = User(
            name=name,
            email=f"{name.lower()}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def register(client):
    """Register through the API and return the account with bearer headers."""

    def _register(name: str, password: str = "secret123") -> SimpleNamespace:
        email = f"{name.lower()}@example.com"
        resp = client.post(
            f"{API}/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return SimpleNamespace(
            id=body["id"],
            name=name,
            email=email,
            password=password,
            role=body["role"],
            token=body["access_token"],
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )

    return _register


@pytest.fixture()
def accounts(client, register):
    """An Admin, a Team Lead and two Team Members, all without a team."""
    admin = register("Alice")
    lead = register("Liam")
    member = register("Mia")
    other = register("Omar")

    resp = client.put(
        f"{API}/users/{lead.id}", json={"role": Role.TEAM_LEAD.value}, headers=admin.headers
    )
    assert resp.status_code == 200, resp.text
    lead.role = Role.TEAM_LEAD.value

    return SimpleNamespace(admin=admin, lead=lead, member=member, other=other)
