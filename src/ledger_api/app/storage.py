from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import TypedDict

import asyncpg

from ..adapters.client_repository import ClientRepository
from ..adapters.errors import StorageError
from ..adapters.transaction_repository import TransactionRepository
from ..core.entities.client import Client
from ..core.entities.transaction import Transaction
from .adapters.in_memory_client_repository import InMemoryClientRepository
from .adapters.in_memory_transaction_repository import InMemoryTransactionRepository
from .adapters.postgres_client_repository import PostgresClientRepository
from .adapters.postgres_errors import STORAGE_EXCEPTIONS
from .adapters.postgres_transaction_repository import PostgresTransactionRepository
from .config import DatabaseSettings

logger = logging.getLogger(__name__)

SEED_CLIENTS = {
    1: Client(limit=100_000, balance=0),
    2: Client(limit=80_000, balance=0),
    3: Client(limit=1_000_000, balance=0),
    4: Client(limit=10_000_000, balance=0),
    5: Client(limit=500_000, balance=0),
}


class State(TypedDict):
    client_repository: ClientRepository
    transaction_repository: TransactionRepository


@asynccontextmanager
async def postgres_storage(settings: DatabaseSettings) -> AsyncIterator[State]:
    logger.info(
        "connecting to database %s at %s:%s", settings.name, settings.host, settings.port
    )
    try:
        pool = await asyncpg.create_pool(
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            max_inactive_connection_lifetime=0,
            host=settings.host,
            port=settings.port,
            database=settings.name,
            user=settings.user,
            password=str(settings.password),
        )
    except STORAGE_EXCEPTIONS as error:
        logger.critical("unable to connect to database", exc_info=True)
        raise StorageError("Unable to connect to database") from error

    async with pool:
        logger.info("connected to database")
        yield {
            "client_repository": PostgresClientRepository(pool),
            "transaction_repository": PostgresTransactionRepository(pool),
        }


@asynccontextmanager
async def memory_storage(
    clients: Mapping[int, Client] = SEED_CLIENTS,
    transactions: Iterable[Transaction] = (),
) -> AsyncIterator[State]:
    client_rows = dict(clients)
    transaction_rows = list(transactions)
    logger.info("using in-memory storage with %d clients", len(client_rows))
    yield {
        "client_repository": InMemoryClientRepository(client_rows),
        "transaction_repository": InMemoryTransactionRepository(
            client_rows, transaction_rows
        ),
    }
