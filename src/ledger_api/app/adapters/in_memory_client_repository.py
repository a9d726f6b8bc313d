from returns.result import Failure, Result, Success

from ...adapters.client_repository import ClientRepository
from ...adapters.errors import ClientDoesNotExistError
from ...core.entities.client import Client
from ...core.entities.entity import Entity


class InMemoryClientRepository(ClientRepository):
    def __init__(self, clients: dict[int, Client]) -> None:
        self.__clients = clients

    async def get(self, id: int) -> Result[Entity[Client], ClientDoesNotExistError]:
        if id not in self.__clients:
            return Failure(ClientDoesNotExistError())
        return Success(Entity(self.__clients[id], id))
