from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Callable

from starlette.applications import Starlette
from starlette.routing import Route

from ..adapters.errors import StorageError
from .config import StorageBackend, config, load_database_settings, load_settings
from .controllers.error_response import error_handler
from .controllers.get_statement_controller import get_statement_controller
from .controllers.make_transaction_controller import make_transaction_controller
from .storage import State, memory_storage, postgres_storage

DEBUG = config("DEBUG", cast=bool, default=False)

Lifespan = Callable[[Starlette], AbstractAsyncContextManager[State]]


@asynccontextmanager
async def lifespan(_: Starlette) -> AsyncIterator[State]:
    settings = load_settings()
    if settings.storage is StorageBackend.MEMORY:
        storage = memory_storage()
    else:
        storage = postgres_storage(load_database_settings())
    async with storage as state:
        yield state


def create_app(lifespan: Lifespan = lifespan, debug: bool = DEBUG) -> Starlette:
    return Starlette(
        debug=debug,
        routes=[
            Route(
                "/clients/{id}/transactions",
                make_transaction_controller,
                methods=["POST"],
            ),
            Route(
                "/clients/{id}/statement",
                get_statement_controller,
                methods=["GET"],
            ),
        ],
        exception_handlers={StorageError: error_handler, Exception: error_handler},
        lifespan=lifespan,
    )


app = create_app()
