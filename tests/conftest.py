"""
Shared fixtures for the billing backend tests.
"""

import os

import pytest
from fastapi.testclient import TestClient

from billing_backend.app.core.config import Settings
from billing_backend.app.core.errors import StorageError
from billing_backend.app.main import create_app
from billing_backend.app.services.bill_store import BillStore


class FailingStore:
    """Store double whose every call fails like an unreachable database."""

    def __init__(self) -> None:
        self.calls = []

    def _fail(self, name):
        self.calls.append(name)
        raise StorageError("connection refused")

    def insert_one(self, record):
        self._fail("insert_one")

    def find_all(self):
        self._fail("find_all")

    def find_measurements(self, provider=None, city=None):
        self._fail("find_measurements")

    def count_by_provider(self):
        self._fail("count_by_provider")

    def ping(self):
        self._fail("ping")


@pytest.fixture
def db_path(tmp_path):
    return os.path.join(str(tmp_path), "bills.db")


@pytest.fixture
def store(db_path):
    bill_store = BillStore(db_path)
    bill_store.initialize()
    return bill_store


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def app_settings(db_path):
    return Settings(database_url=db_path, log_level="WARNING")


@pytest.fixture
def client(app_settings, store):
    app = create_app(app_settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def failing_client(app_settings, failing_store):
    app = create_app(app_settings, store=failing_store)
    with TestClient(app) as test_client:
        yield test_client
