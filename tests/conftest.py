import os

# Configure before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["CRON_SECRET"] = "cron-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from budget_app.core.jwt import create_access_token
from budget_app.core.security import hash_password
from budget_app.database import get_session
from budget_app.main import app
from budget_app.models import budget, category, exchange_rate, membership, plan, transaction, user  # noqa: F401
from budget_app.models.user import User
from budget_app.services import exchange_rates


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    app.dependency_overrides[get_session] = lambda: session
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_rate_cache():
    exchange_rates.clear_rate_cache()
    yield
    exchange_rates.clear_rate_cache()


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Fail rate fetches unless a test provides its own rate table."""

    def _offline(client=None):
        raise exchange_rates.ExchangeRateError("network disabled in tests")

    monkeypatch.setattr(exchange_rates, "fetch_usd_rates", _offline)


@pytest.fixture(name="make_user")
def make_user_fixture(session):
    def _make_user(email: str, name: str = None, password: str = "secret123"):
        u = User(email=email, name=name, hashed_password=hash_password(password))
        session.add(u)
        session.commit()
        session.refresh(u)
        token = create_access_token({"sub": str(u.id), "email": u.email})
        return u, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture(name="owner")
def owner_fixture(make_user):
    return make_user("owner@example.com", "Olivia Owner")


@pytest.fixture(name="budget_id")
def budget_id_fixture(client, owner):
    _, headers = owner
    resp = client.post("/budgets", json={"name": "Household", "currency": "EUR"}, headers=headers)
    assert resp.status_code == 201
    return resp.json()["id"]


@pytest.fixture(name="add_member")
def add_member_fixture(client, owner, budget_id, make_user):
    """Create a user and invite them into the shared budget with ``role``."""

    def _add_member(email: str, role: str):
        u, headers = make_user(email)
        resp = client.post(
            f"/budgets/{budget_id}/members",
            json={"email": email, "role": role},
            headers=owner[1],
        )
        assert resp.status_code == 201
        return u, headers, resp.json()["id"]

    return _add_member


@pytest.fixture(name="category_id")
def category_id_fixture(client, owner, budget_id):
    """Look up a seeded category of the shared budget by name."""

    def _category_id(name: str):
        resp = client.get("/categories", params={"budget_id": budget_id}, headers=owner[1])
        assert resp.status_code == 200
        return next(c["id"] for c in resp.json() if c["name"] == name)

    return _category_id
