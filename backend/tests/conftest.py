import os
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from pprblog.cache import TaggedCache  # noqa: E402
from pprblog.config import Settings  # noqa: E402
from pprblog.database import utcnow  # noqa: E402
from pprblog.main import create_app  # noqa: E402
from pprblog.services.accounts import AccountService  # noqa: E402
from pprblog.services.queries import BlogQueries  # noqa: E402
from pprblog.services.sessions import SessionManager  # noqa: E402
from pprblog.storage import Storage  # noqa: E402

TEST_SECRET = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


class FakeClock:
    """Settable stand-in for ``utcnow``."""

    def __init__(self, now=None):
        self.now = now or utcnow().replace(microsecond=0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings():
    return Settings(
        secret_key=TEST_SECRET,
        database_url="sqlite://",
        environment="test",
        bcrypt_rounds=4,
        sweep_expired_sessions_on_startup=True,
        seed_demo_data=False,
    )


@pytest.fixture
def storage():
    storage = Storage.from_url("sqlite://")
    storage.create_tables()
    yield storage
    storage.dispose()


@pytest.fixture
def cache():
    return TaggedCache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(storage, settings, clock):
    return SessionManager(storage, settings, clock=clock)


@pytest.fixture
def accounts(storage, cache, settings):
    return AccountService(storage, cache, settings)


@pytest.fixture
def queries(storage, cache):
    return BlogQueries(storage, cache)


@pytest.fixture
def app(settings, storage):
    return create_app(settings=settings, storage=storage)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def signup(client):
    """Sign a user up through the API and return the response."""

    def _signup(name="Ann", email="ann@x.com", password="secret1"):
        response = client.post(
            "/api/auth/signup",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        return response

    return _signup


@pytest.fixture
def make_admin(storage):
    def _make_admin(user_id: int):
        storage.update_user(user_id, role="admin")

    return _make_admin
