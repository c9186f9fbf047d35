"""Shared pytest fixtures for the token auth API tests."""
from datetime import datetime, timedelta

import pytest

from api import create_app
from models.db_storage import DBStorage
from models.token_store import MemoryRefreshTokenStore, SQLRefreshTokenStore



class FakeClock:
    """Naive-UTC clock the tests can move forward."""

    def __init__(self, start=None):
        self.now = start or datetime(2030, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def storage(db_url):
    storage = DBStorage(db_url)
    storage.reload()
    yield storage
    storage.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request, clock, storage):
    """Each store test runs against both backends."""
    if request.param == "memory":
        return MemoryRefreshTokenStore(clock=clock)
    return SQLRefreshTokenStore(storage, clock=clock)


@pytest.fixture
def make_app(db_url):
    apps = []

    def _make(**overrides):
        settings = {"DATABASE_URL": db_url}
        settings.update(overrides)
        app = create_app("test", overrides=settings)
        apps.append(app)
        return app

    yield _make
    for app in apps:
        app.extensions["storage"].dispose()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()
