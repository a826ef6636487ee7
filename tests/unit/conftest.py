"""Pytest configuration and fixtures for unit tests."""

import pytest

from reflectodo.core.local_store import LocalStore
from reflectodo.services.persistence import LocalStorageBackend, RemoteTableBackend
from reflectodo.services.task_store import TaskStore
from tests.unit.factories import TASKS_COLLECTION
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches reflectodo.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("reflectodo.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("reflectodo.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("reflectodo.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("reflectodo.core.db_client.list_records", in_memory_db.list_records)
    return in_memory_db


@pytest.fixture
def local_store(tmp_path):
    """SQLite-backed key-value store in a temporary directory."""
    return LocalStore(tmp_path / "reflectodo.sqlite3")


@pytest.fixture
def local_backend(local_store):
    return LocalStorageBackend(store=local_store, key="todos")


@pytest.fixture
def remote_backend(patched_db):
    return RemoteTableBackend(collection=TASKS_COLLECTION)


@pytest.fixture
async def store(local_backend):
    """Loaded task store over an empty local backend."""
    task_store = TaskStore(local_backend)
    await task_store.load()
    return task_store


@pytest.fixture
async def remote_store(remote_backend):
    """Loaded task store over the in-memory remote table."""
    task_store = TaskStore(remote_backend)
    await task_store.load()
    return task_store

