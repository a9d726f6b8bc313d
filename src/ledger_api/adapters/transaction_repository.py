from typing import AsyncContextManager, NotRequired, Protocol, TypedDict, Unpack

from returns.result import Result

from ..core.entities.client import Client
from ..core.entities.entity import Entity
from ..core.entities.statement import Statement
from ..core.entities.transaction import Transaction
from .errors import ClientDoesNotExistError, InsufficientFundsError

RECENT_TRANSACTIONS = 10


class GetStatementProps(TypedDict):
    id: int
    last: NotRequired[int]


class TransactionRepository(Protocol):
    async def create(
        self, transaction: Transaction
    ) -> Result[Entity[Client], ClientDoesNotExistError | InsufficientFundsError]:
        """Apply ``transaction`` to its client and record it, all or nothing.

        Writers to the same client are serialized; the floor check runs after
        the lock is held. Raises ``StorageError`` when storage fails.
        """
        ...

    def get_statement(
        self, **props: Unpack[GetStatementProps]
    ) -> AsyncContextManager[Result[Statement, ClientDoesNotExistError]]: ...
