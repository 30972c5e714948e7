import os

# Settings() is built at import time; give it what it needs before any
# labmgr module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-that-is-long-enough-for-hs256")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from labmgr.core.config import Settings
from labmgr.database import Base, get_db
from labmgr.main import create_app
from labmgr.models.user import Role, User

DEFAULT_PASSWORD = "Secr3t!"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def app(session_factory, tmp_path):
    settings = Settings(
        database_url="sqlite://",
        session_secret="test-session-secret-that-is-long-enough-for-hs256",
        upload_dir=str(tmp_path / "uploads"),
    )
    app = create_app(settings)

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def make_client(app):
    """Each client carries its own cookie jar, i.e. its own browser session."""
    clients = []

    def _make() -> TestClient:
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def client(make_client):
    return make_client()


def registration_payload(username: str, password: str = DEFAULT_PASSWORD, **extra) -> dict:
    payload = {
        "username": username,
        "password": password,
        "firstName": username.capitalize(),
        "lastName": "Tester",
        "email": f"{username.lower()}@lab.example.org",
        "role": "researcher",
    }
    payload.update(extra)
    return payload


def register(client: TestClient, username: str, password: str = DEFAULT_PASSWORD, **extra):
    return client.post("/api/register", json=registration_payload(username, password, **extra))


def promote_to_admin(db, username: str) -> None:
    db.query(User).filter(User.username == username.lower()).update({User.role: Role.ADMIN})
    db.commit()


@pytest.fixture()
def admin_client(make_client, db):
    client = make_client()
    assert register(client, "root").status_code == 201
    promote_to_admin(db, "root")
    return client


def sample_payload(sample_id: str = "W-0001", **extra) -> dict:
    payload = {
        "sampleId": sample_id,
        "sampleType": "water",
        "collectionDate": "2026-10-18T09:30:00Z",
        "collectionTime": "09:30",
        "location": "North inlet",
        "geolocation": {"lat": 52.1, "lng": 4.3},
        "temperature": "14.25",
        "ph": "7.2",
    }
    payload.update(extra)
    return payload
