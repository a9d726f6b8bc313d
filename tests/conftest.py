from collections.abc import Iterator

import pytest
from starlette.testclient import TestClient

from ledger_api.app import create_app
from ledger_api.app.storage import memory_storage
from ledger_api.core.entities.client import Client
from ledger_api.core.entities.transaction import Transaction


@pytest.fixture
def clients() -> dict[int, Client]:
    return {
        1: Client(limit=1000, balance=0),
        2: Client(limit=500, balance=0),
    }


@pytest.fixture
def transactions() -> list[Transaction]:
    return []


@pytest.fixture
def api(clients: dict[int, Client], transactions: list[Transaction]) -> Iterator[TestClient]:
    """HTTP client for an app backed by in-memory storage."""
    app = create_app(lifespan=lambda _: memory_storage(clients, transactions))
    with TestClient(app) as test_client:
        yield test_client
