import os
import tempfile
from datetime import timedelta

# Settings are read from the environment; give every test a complete one.
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdef0123456789")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdef012345678")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_INIT_MODE", "create_all")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "jobportal-tests", "app.log"))

import pytest
from fastapi.testclient import TestClient

from jobportal.config import Settings
from jobportal.core.database import Database
from jobportal.core.security import PasswordHasher
from jobportal.main import create_app
from jobportal.repositories.sqlalchemy_store import SQLAlchemyCredentialStore
from jobportal.services.auth_service import AuthService
from jobportal.services.token_service import TokenService

ADMIN_EMAIL = "admin@jobs.io"
ADMIN_PASSWORD = "AdminPassw0rd!"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        DB_INIT_MODE="create_all",
        BCRYPT_ROUNDS=4,
        ENVIRONMENT="test",
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SQLAlchemyCredentialStore(db_session)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(settings):
    return TokenService.from_settings(settings)


@pytest.fixture
def expired_token_service(settings):
    """Same secrets as token_service, but everything it issues is already expired."""
    return TokenService(
        access_secret=settings.JWT_ACCESS_SECRET,
        refresh_secret=settings.JWT_REFRESH_SECRET,
        access_ttl=timedelta(seconds=-30),
        refresh_ttl=timedelta(seconds=-30),
    )


@pytest.fixture
def auth_service(store, hasher, token_service):
    return AuthService(store, hasher, token_service)


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client, email="alice@x.com", password="Passw0rd!", role="job_seeker", **extra):
    payload = {"email": email, "password": password, "full_name": "Alice Doe", "role": role}
    payload.update(extra)
    return client.post("/api/v1/auth/register", json=payload)


def login(client, email, password):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
