import os
import tempfile

import pytest

# Configure a throwaway database before anything imports socialnet.config
_tmp_dir = tempfile.mkdtemp(prefix="socialnet-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["FIREBASE_SERVICE_ACCOUNT_JSON"] = os.path.join(_tmp_dir, "missing-service-account.json")
os.environ["FRIENDING_LOCK_TIMEOUT_SECONDS"] = "5"

from fastapi.testclient import TestClient  # noqa: E402

from socialnet.main import app as fastapi_app  # noqa: E402
from socialnet.database import Base, get_engine, get_session_local  # noqa: E402
from socialnet.services.friending import FriendingEngine  # noqa: E402
from socialnet.services.identity import IdentityResolver  # noqa: E402
from socialnet import crud  # noqa: E402

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def clean_tables():
    """Every test starts from empty tables."""
    yield
    with get_engine().begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def app():
    return fastapi_app


@pytest.fixture
def db():
    session = get_session_local()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory():
    """Hands out extra sessions, closed at teardown."""
    sessions = []

    def _make():
        session = get_session_local()()
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        session.close()


@pytest.fixture
def identity():
    return IdentityResolver()


@pytest.fixture
def friending(identity):
    return FriendingEngine(identity, lock_timeout=5)


@pytest.fixture
def make_user(db):
    """Create a password-less account directly in the store."""
    def _make(username):
        return crud.create_user(db, username)
    return _make


@pytest.fixture
def anonymous_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client_for(app):
    """Sign up and log in ``username``; returns a client carrying its session cookie."""
    clients = []

    def _make(username, password=PASSWORD):
        client = TestClient(app)
        clients.append(client)
        response = client.post("/users", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        response = client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return client

    yield _make
    for client in clients:
        client.close()
