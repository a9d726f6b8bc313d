from returns.result import Failure, Result, Success

from ...adapters.errors import InvalidInputError


def parse_client_id(raw: str) -> Result[int, InvalidInputError]:
    """Client ids are plain ASCII digits; signs, spaces and zero are rejected."""
    if not (raw.isascii() and raw.isdigit()):
        return Failure(InvalidInputError())
    id = int(raw)
    if id <= 0:
        return Failure(InvalidInputError())
    return Success(id)
