"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.models.food_item import FoodItem
from src.models.user import User
from src.services.auth import get_password_hash


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/foodshare", "/foodshare_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, name: str) -> AuthHeaders:
    """Register a user through the API and return their auth headers."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com", "Test User")


@pytest.fixture
def other_auth_headers(client):
    """A second user, e.g. a neighbour claiming listings."""
    return register(client, "neighbour@example.com", "Neighbour")


@pytest.fixture
def third_auth_headers(client):
    """A third user."""
    return register(client, "third@example.com", "Third User")


@pytest.fixture
def catalog(db):
    """Seed a small food catalog, keyed by lower-case name."""
    items = [
        FoodItem(name="Apple", category="fruit", unit="pcs", typical_expiration_days=14),
        FoodItem(name="Banana", category="fruit", unit="pcs", typical_expiration_days=5),
        FoodItem(name="Milk", category="dairy", unit="litre", typical_expiration_days=7),
        FoodItem(name="Bread", category="bakery", unit="pcs", typical_expiration_days=3),
    ]
    db.add_all(items)
    db.commit()
    for item in items:
        db.refresh(item)
    return {item.name.lower(): item for item in items}


@pytest.fixture
def users(db):
    """Two users created directly in the database for service tests."""
    password_hash = get_password_hash("testpass123")
    lister = User(email="lister@example.com", password_hash=password_hash, name="Lister")
    claimer = User(email="claimer@example.com", password_hash=password_hash, name="Claimer")
    db.add_all([lister, claimer])
    db.commit()
    db.refresh(lister)
    db.refresh(claimer)
    return lister, claimer


@pytest.fixture
def other_session():
    """An independent session, standing in for a concurrent request."""
    session = TestingSessionLocal()
    yield session
    session.rollback()
    session.close()
