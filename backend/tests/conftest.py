"""
Shared fixtures.

The database URL must point at in-memory SQLite before protectron.database
is imported anywhere, so it is set at module import time here.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from datetime import datetime
from uuid import uuid4

import pytest


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    from protectron.database import Base, SessionLocal, engine, init_db

    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from protectron.main import app

    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, organization_name="Acme AI", email=None):
    """Register a user with a new organization and return auth headers."""
    suffix = uuid4().hex[:8]
    email = email or f"user-{suffix}@example.com"
    password = "correct-horse-battery"
    response = client.post("/auth/register", json={
        "email": email,
        "username": f"user-{suffix}",
        "password": password,
        "organization_name": organization_name,
    })
    assert response.status_code == 201, response.text

    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def organization(db_session):
    from protectron.models.db_models import OrganizationDB

    org = OrganizationDB(id=str(uuid4()), name="Acme AI")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture
def ai_system(db_session, organization):
    from protectron.models.db_models import AISystemDB, RiskLevel

    system = AISystemDB(
        id=str(uuid4()),
        organization_id=organization.id,
        name="Support Bot",
        risk_level=RiskLevel.HIGH,
        sdk_connected=False,
    )
    db_session.add(system)
    db_session.commit()
    return system


@pytest.fixture
def now():
    return datetime(2025, 6, 15, 12, 0, 0)
