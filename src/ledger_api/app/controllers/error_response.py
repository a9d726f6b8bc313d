from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from ...adapters.errors import (
    ClientDoesNotExistError,
    InsufficientFundsError,
    InvalidInputError,
    LedgerError,
    UnprocessableInputError,
)


def error_response(error: LedgerError) -> Response:
    match error:
        case InvalidInputError():
            status_code = 400
        case ClientDoesNotExistError():
            status_code = 404
        case UnprocessableInputError() | InsufficientFundsError():
            status_code = 422
        case _:
            status_code = 500
    return PlainTextResponse(str(error), status_code=status_code)


async def error_handler(_: Request, error: Exception) -> Response:
    if not isinstance(error, LedgerError):
        error = LedgerError()
    return error_response(error)
