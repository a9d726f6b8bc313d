from __future__ import annotations

from asyncpg import Pool, Record
from returns.result import Failure, Result, Success

from ...adapters.client_repository import ClientRepository
from ...adapters.errors import ClientDoesNotExistError
from ...core.entities.client import Client
from ...core.entities.entity import Entity
from .postgres_errors import MAX_CLIENT_ID, storage_errors


class PostgresClientRepository(ClientRepository):
    def __init__(self, pool: Pool[Record]) -> None:
        self.__pool = pool

    async def get(self, id: int) -> Result[Entity[Client], ClientDoesNotExistError]:
        if id > MAX_CLIENT_ID:
            return Failure(ClientDoesNotExistError())
        with storage_errors("get client"):
            async with self.__pool.acquire() as connection:
                record = await connection.fetchrow(
                    """SELECT id, account_limit, balance FROM clients WHERE id = $1\n""",
                    id,
                )

        if not record:
            return Failure(ClientDoesNotExistError())
        return Success(
            Entity(Client(record["account_limit"], record["balance"]), record["id"])
        )
