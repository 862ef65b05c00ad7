import os

# antes de importar storefront: config se lee al importar
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.db import Base, enable_sqlite_foreign_keys, get_db, init_db
from storefront.main import app
from storefront.models import Category

API = "/api/v1"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(eng)
    init_db(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    def _register(email, password="secret123", role=None, **extra):
        body = {
            "first_name": extra.pop("first_name", "Ada"),
            "last_name": extra.pop("last_name", "Lovelace"),
            "email": email,
            "password": password,
            **extra,
        }
        if role:
            body["role"] = role
        return client.post(f"{API}/users/register", json=body)

    return _register


@pytest.fixture
def admin_token(register):
    resp = register("admin@shop.com", role="admin")
    assert resp.status_code == 201
    return resp.json()["data"]["token"]


@pytest.fixture
def user_token(register):
    resp = register("customer@shop.com")
    assert resp.status_code == 201
    return resp.json()["data"]["token"]


@pytest.fixture
def category(db):
    cat = Category(name="Electronics", description="Phones and laptops")
    db.add(cat)
    db.commit()
    return cat
