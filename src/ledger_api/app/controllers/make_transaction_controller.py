import logging
from datetime import datetime, timezone
from typing import Any

import orjson
from jsonschema import Draft202012Validator, validators
from orjson import JSONDecodeError
from returns.pipeline import is_successful
from returns.result import Failure, Success
from starlette.requests import Request
from starlette.responses import Response

from ...adapters.errors import UnprocessableInputError
from ...adapters.transaction_repository import TransactionRepository
from ...core.entities.transaction import Transaction, TransactionOperation
from .client_id import parse_client_id
from .error_response import error_response
from .orjson_response import OrjsonResponse

logger = logging.getLogger(__name__)

MAX_AMOUNT = 2**31 - 1

PAYLOAD_SCHEMA = {
    "type": "object",
    "properties": {
        "amount": {"type": "integer", "minimum": 1, "maximum": MAX_AMOUNT},
        "operation": {"type": "string", "enum": [kind.value for kind in TransactionOperation]},
        "description": {"type": "string", "minLength": 1, "maxLength": 10},
    },
    "required": ["amount", "operation", "description"],
}

# JSON Schema counts 1.0 as an integer; amounts must be integral JSON numbers.
StrictValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine(
        "integer",
        lambda _, instance: isinstance(instance, int) and not isinstance(instance, bool),
    ),
)
payload_validator = StrictValidator(PAYLOAD_SCHEMA)


async def make_transaction_controller(request: Request) -> Response:
    id_result = parse_client_id(request.path_params["id"])
    if not is_successful(id_result):
        return error_response(id_result.failure())
    id = id_result.unwrap()

    try:
        payload = orjson.loads(await request.body())
    except JSONDecodeError:
        return error_response(UnprocessableInputError("Malformed body"))
    if not __validate_payload(payload):
        return error_response(UnprocessableInputError())

    transaction_repository: TransactionRepository = request.state.transaction_repository

    result = await transaction_repository.create(
        Transaction(
            id,
            payload["amount"],
            TransactionOperation(payload["operation"]),
            payload["description"],
            datetime.now(timezone.utc),
        )
    )
    match result:
        case Success(client):
            return OrjsonResponse(
                {"limit": client.props.limit, "balance": client.props.balance}
            )
        case Failure(error):
            return error_response(error)


def __validate_payload(payload: Any) -> bool:
    error = next(payload_validator.iter_errors(payload), None)
    if error is not None:
        logger.debug("payload rejected: %s", error.message)
        return False
    return True
