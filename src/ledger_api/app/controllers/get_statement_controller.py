from datetime import datetime, timezone

from returns.pipeline import is_successful
from returns.result import Failure, Success
from starlette.requests import Request
from starlette.responses import Response

from ...adapters.transaction_repository import (
    RECENT_TRANSACTIONS,
    TransactionRepository,
)
from .client_id import parse_client_id
from .error_response import error_response
from .orjson_response import OrjsonResponse


async def get_statement_controller(request: Request) -> Response:
    id_result = parse_client_id(request.path_params["id"])
    if not is_successful(id_result):
        return error_response(id_result.failure())
    id = id_result.unwrap()

    transaction_repository: TransactionRepository = request.state.transaction_repository
    async with transaction_repository.get_statement(
        id=id, last=RECENT_TRANSACTIONS
    ) as statement_result:
        match statement_result:
            case Success(statement):
                client = statement.client.props
                json_response = {
                    "balance": {
                        "date": datetime.now(timezone.utc).isoformat(
                            timespec="microseconds"
                        ),
                        "limit": client.limit,
                        "total": client.balance,
                    },
                    "last_transactions": [
                        {
                            "amount": transaction.props.amount,
                            "operation": transaction.props.operation.value,
                            "description": transaction.props.description,
                            "created_at": transaction.props.created_at.isoformat(
                                timespec="microseconds"
                            ),
                        }
                        async for transaction in statement.transactions
                    ],
                }
                return OrjsonResponse(json_response)
            case Failure(error):
                return error_response(error)
