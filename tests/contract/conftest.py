"""Fixtures for consumer and provider contract tests."""

import pytest

from petstore.contracts import ContractBuilder, write_contract
from petstore.utils.server_thread import ServerThread
from petstore.utils.config_loader import Settings
from petstore.api.main import create_app

from fixture_repository import FixturePetRepository
from pet_interactions import CONSUMER, PROVIDER


@pytest.fixture
def pact_dir(tmp_path):
    return tmp_path / "pacts"


@pytest.fixture
def pact(pact_dir):
    """Collects the interactions a test declares and persists them afterwards."""
    builder = ContractBuilder(CONSUMER, PROVIDER)
    yield builder
    if builder.interactions:
        write_contract(builder.build(), pact_dir)


@pytest.fixture
def fixture_repository():
    return FixturePetRepository()


@pytest.fixture
def provider_server(fixture_repository):
    """Live pet API on a random local port, backed by the fixture repository."""
    app = create_app(repository=fixture_repository, settings=Settings(), provider_states_enabled=True)
    with ServerThread(app) as server:
        yield server
