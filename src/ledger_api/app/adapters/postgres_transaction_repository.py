from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import AsyncContextManager, Optional, Unpack

from asyncpg import Pool, Record
from asyncpg.cursor import CursorFactory
from asyncpg.pool import PoolConnectionProxy
from asyncpg.transaction import Transaction as AsyncpgTransaction
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
from ...core.entities.transaction import Transaction, TransactionOperation
from .postgres_errors import MAX_CLIENT_ID, storage_errors

logger = logging.getLogger(__name__)


class PostgresTransactionRepository(TransactionRepository):
    def __init__(self, pool: Pool[Record]):
        self.__pool = pool

    async def create(
        self, transaction: Transaction
    ) -> Result[Entity[Client], ClientDoesNotExistError | InsufficientFundsError]:
        if transaction.client_id > MAX_CLIENT_ID:
            return Failure(ClientDoesNotExistError())
        with storage_errors("create transaction"):
            async with self.__pool.acquire() as connection:
                unit_of_work = connection.transaction()
                await unit_of_work.start()
                try:
                    result = await self.__apply(connection, transaction)
                except BaseException:
                    await unit_of_work.rollback()
                    raise

                match result:
                    case Success(_):
                        await unit_of_work.commit()
                    case Failure(error):
                        await unit_of_work.rollback()
                        logger.debug(
                            "transaction rejected for client %s: %s",
                            transaction.client_id,
                            error,
                        )
        return result

    async def __apply(
        self, connection: PoolConnectionProxy[Record], transaction: Transaction
    ) -> Result[Entity[Client], ClientDoesNotExistError | InsufficientFundsError]:
        client_prepare = await connection.prepare(
            """SELECT id, account_limit, balance FROM clients WHERE id = $1\n"""
            """FOR UPDATE\n""",
        )
        client_result = await client_prepare.fetchrow(transaction.client_id)
        if not client_result:
            return Failure(ClientDoesNotExistError())

        client = Client(
            limit=client_result["account_limit"], balance=client_result["balance"]
        ).apply(transaction.operation, transaction.amount)
        if not client.within_limit():
            return Failure(InsufficientFundsError())

        await connection.execute(
            """INSERT INTO transactions (client_id, amount, operation, description, created_at)\n"""
            """VALUES ($1, $2, $3, $4, $5)\n""",
            transaction.client_id,
            transaction.amount,
            transaction.operation.value,
            transaction.description,
            transaction.created_at,
        )
        await connection.execute(
            """UPDATE clients\n"""
            """SET balance = $2\n"""
            """WHERE id = $1\n""",
            transaction.client_id,
            client.balance,
        )
        return Success(Entity(client, client_result["id"]))

    def get_statement(
        self, **props: Unpack[GetStatementProps]
    ) -> AsyncContextManager[Result[Statement, ClientDoesNotExistError]]:
        if props["id"] > MAX_CLIENT_ID:
            return _missing_client()
        if "last" not in props:
            props["last"] = RECENT_TRANSACTIONS
        return GetStatementContextManager(self.__pool, **props)


class GetStatementContextManager:
    """Holds a read-only repeatable-read snapshot open while the caller
    iterates the transactions cursor, so the balance and the listed
    transactions always come from the same committed state."""

    __transaction: AsyncpgTransaction
    __connection: PoolConnectionProxy[Record]
    __started: bool

    def __init__(self, pool: Pool[Record], id: int, last: int):
        self.__pool = pool
        self.__id = id
        self.__last = last

    async def __aenter__(self) -> Result[Statement, ClientDoesNotExistError]:
        with storage_errors("open statement"):
            self.__connection = await self.__pool.acquire()
            self.__transaction = self.__connection.transaction(
                isolation="repeatable_read", readonly=True
            )
            self.__started = False
            try:
                await self.__transaction.start()
                self.__started = True
                return await self.__read()
            except BaseException:
                await self.__close(commit=False)
                raise

    async def __read(self) -> Result[Statement, ClientDoesNotExistError]:
        client_prepare = await self.__connection.prepare(
            """SELECT id, account_limit, balance FROM clients WHERE id = $1\n"""
        )
        cursor_prepare = await self.__connection.prepare(
            """SELECT id, client_id, amount, operation, description, created_at\n"""
            """FROM transactions\n"""
            """WHERE client_id = $1\n"""
            """ORDER BY created_at DESC\n"""
            """LIMIT $2\n""",
        )
        record = await client_prepare.fetchrow(self.__id)
        if not record:
            return Failure(ClientDoesNotExistError())

        cursor = cursor_prepare.cursor(self.__id, self.__last)
        return Success(
            Statement(
                client=Entity(
                    Client(record["account_limit"], record["balance"]), record["id"]
                ),
                transactions=GetTransactions(cursor),
            )
        )

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        with storage_errors("close statement"):
            await self.__close(commit=exc_type is None)

    async def __close(self, commit: bool) -> None:
        try:
            if self.__started:
                if commit:
                    await self.__transaction.commit()
                else:
                    await self.__transaction.rollback()
        finally:
            await self.__pool.release(self.__connection)


class GetTransactions:
    def __init__(self, cursor: CursorFactory[Record]):
        self.__cursor = aiter(cursor)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Entity[Transaction]:
        with storage_errors("read transactions"):
            record = await anext(self.__cursor)
        return Entity(
            Transaction(
                client_id=record["client_id"],
                amount=record["amount"],
                operation=TransactionOperation(record["operation"]),
                description=record["description"],
                created_at=record["created_at"],
            ),
            id=record["id"],
        )


@asynccontextmanager
async def _missing_client() -> AsyncIterator[Result[Statement, ClientDoesNotExistError]]:
    yield Failure(ClientDoesNotExistError())
