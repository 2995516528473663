"""Pytest configuration and shared fixtures for the test suite."""

from typing import Iterator
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fakes import FakeTarantoolSession

from kvstorage.api.app import create_app
from kvstorage.config import Settings, StorageConfig
from kvstorage.storage.connection import ConnectionManager, StorageCredentials
from kvstorage.storage.memory import InMemoryKVRepository
from kvstorage.storage.tarantool_repository import TarantoolKVRepository


@pytest.fixture
def fake_session() -> FakeTarantoolSession:
    """Create an empty fake engine session."""
    return FakeTarantoolSession()


@pytest.fixture
def connection(fake_session: FakeTarantoolSession) -> Iterator[ConnectionManager]:
    """Create a connection manager whose session is the fake engine.

    Yields:
        Connected manager, closed after the test
    """
    with patch("kvstorage.storage.connection.tarantool.Connection", return_value=fake_session):
        manager = ConnectionManager(
            "localhost:3301",
            StorageCredentials(username="storage", password="sesame"),
            drain_timeout=0.1,
        )
        manager.connect()
        yield manager
        manager.close()


@pytest.fixture
def tarantool_repository(connection: ConnectionManager) -> TarantoolKVRepository:
    """Create a Tarantool repository over the fake engine."""
    return TarantoolKVRepository(connection)


@pytest.fixture
def memory_repository() -> InMemoryKVRepository:
    """Create a fresh in-memory repository."""
    return InMemoryKVRepository()


@pytest.fixture
def memory_settings() -> Settings:
    """Settings selecting the in-memory backend."""
    return Settings(storage=StorageConfig(backend="memory"))


@pytest.fixture
def app(memory_settings: Settings, memory_repository: InMemoryKVRepository) -> FastAPI:
    """Create an application backed by the in-memory repository."""
    return create_app(settings=memory_settings, repository=memory_repository)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Create a test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
