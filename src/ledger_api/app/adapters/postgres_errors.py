import logging
from collections.abc import Iterator
from contextlib import contextmanager

from asyncpg.exceptions import InterfaceError, PostgresError

from ...adapters.errors import StorageError

logger = logging.getLogger(__name__)

STORAGE_EXCEPTIONS = (PostgresError, InterfaceError, OSError, TimeoutError)

# clients.id is an INTEGER column; larger ids cannot name a stored client
MAX_CLIENT_ID = 2**31 - 1


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except STORAGE_EXCEPTIONS as error:
        logger.error("storage failure during %s", operation, exc_info=True)
        raise StorageError() from error
