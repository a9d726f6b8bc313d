import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TypeVar, Unpack

from returns.result import Failure, Result, Success

from ...adapters.errors import ClientDoesNotExistError, InsufficientFundsError
from ...adapters.transaction_repository import (
    RECENT_TRANSACTIONS,
    GetStatementProps,
    TransactionRepository,
)
from ...core.entities.client import Client
from ...core.entities.entity import Entity
from ...core.entities.statement import Statement
from ...core.entities.transaction import Transaction


class InMemoryTransactionRepository(TransactionRepository):
    """Process-local ledger.

    Each client gets its own ``asyncio.Lock`` standing in for the row lock
    PostgreSQL takes with ``SELECT ... FOR UPDATE``. Transactions are stored
    in insertion order and their list index is their id.
    """

    def __init__(
        self, clients: dict[int, Client], transactions: list[Transaction]
    ) -> None:
        self.__clients = clients
        self.__transactions = transactions
        self.__locks = {id: asyncio.Lock() for id in clients}

    def lock(self, client_id: int) -> asyncio.Lock:
        return self.__locks[client_id]

    async def create(
        self, transaction: Transaction
    ) -> Result[Entity[Client], ClientDoesNotExistError | InsufficientFundsError]:
        if transaction.client_id not in self.__locks:
            return Failure(ClientDoesNotExistError())

        async with self.lock(transaction.client_id):
            current = self.__clients[transaction.client_id]
            # a real backend round-trips here; let other writers run
            await asyncio.sleep(0)
            client = current.apply(transaction.operation, transaction.amount)
            if not client.within_limit():
                return Failure(InsufficientFundsError())

            self.__transactions.append(transaction)
            self.__clients[transaction.client_id] = client
            return Success(Entity(client, transaction.client_id))

    @asynccontextmanager
    async def get_statement(
        self, **props: Unpack[GetStatementProps]
    ) -> AsyncIterator[Result[Statement, ClientDoesNotExistError]]:
        id = props["id"]
        last = props.get("last", RECENT_TRANSACTIONS)
        if id not in self.__clients:
            yield Failure(ClientDoesNotExistError())
            return

        recent = sorted(
            reversed(
                [
                    Entity(transaction, index)
                    for index, transaction in enumerate(self.__transactions)
                    if transaction.client_id == id
                ]
            ),
            key=lambda entity: entity.props.created_at,
            reverse=True,
        )[0:last]
        yield Success(
            Statement(
                client=Entity(self.__clients[id], id),
                transactions=_iterate(recent),
            )
        )


T = TypeVar("T")


async def _iterate(items: Iterable[T]) -> AsyncIterator[T]:
    for item in items:
        yield item
