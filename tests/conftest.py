"""Shared fixtures.

``STORAGE_BACKEND`` is forced to ``memory`` before the application is
imported so that importing ``lessons_api.app.main`` never touches a
SQLite file.
"""

import os

os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from lessons_api.app.core.db import MemoryStorage  # noqa: E402
from lessons_api.app.core.store import LocalStore  # noqa: E402
from lessons_api.app.main import create_app  # noqa: E402
from lessons_api.app.services.account_service import AccountService  # noqa: E402


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return LocalStore(storage, "test")


@pytest.fixture
def parent(store):
    return AccountService(store).register(
        {"email": "parent@example.com", "password": "secret", "name": "Jane Parent", "role": "parent"}
    )


@pytest.fixture
def tutor(store):
    return AccountService(store).register(
        {"email": "tutor@example.com", "password": "secret", "name": "Tom Tutor", "role": "tutor"}
    )


@pytest.fixture
def student(store):
    return AccountService(store).register(
        {"email": "student@example.com", "password": "secret", "name": "Sam Student", "role": "student"}
    )


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))
