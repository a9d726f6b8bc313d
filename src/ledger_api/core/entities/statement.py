from collections.abc import AsyncIterable
from dataclasses import dataclass

from .client import Client
from .entity import Entity
from .transaction import Transaction


@dataclass(slots=True, frozen=True)
class Statement:
    """A client and its most recent transactions, read from one snapshot."""

    client: Entity[Client]
    transactions: AsyncIterable[Entity[Transaction]]
