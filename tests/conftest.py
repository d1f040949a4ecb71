"""Pytest fixtures for store, service and API tests."""

import pytest
from fastapi.testclient import TestClient

from petstore.api.main import create_app
from petstore.database.memory import InMemoryPetStore
from petstore.services.pet_service import PetService
from petstore.utils.config_loader import Settings


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryPetStore()


@pytest.fixture
def service(store):
    return PetService(store)


@pytest.fixture
def app(store):
    return create_app(repository=store, settings=Settings())


@pytest.fixture
def client(app):
    return TestClient(app)
