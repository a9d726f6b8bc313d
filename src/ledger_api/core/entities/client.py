from dataclasses import dataclass, replace
from operator import add, sub

from .transaction import TransactionOperation

OPERATION_MAP = {TransactionOperation.CREDIT: add, TransactionOperation.DEBIT: sub}


@dataclass(slots=True, frozen=True)
class Client:
    limit: int
    balance: int

    @property
    def floor(self) -> int:
        return self.limit * -1

    def apply(self, operation: TransactionOperation, amount: int) -> "Client":
        """Return the client as it would be after ``operation``, unchecked."""
        return replace(self, balance=OPERATION_MAP[operation](self.balance, amount))

    def within_limit(self) -> bool:
        return self.balance >= self.floor
