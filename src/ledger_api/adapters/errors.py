class LedgerError(Exception):
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidInputError(LedgerError):
    message = "Invalid id"


class UnprocessableInputError(LedgerError):
    message = "Unprocessable input"


class ClientDoesNotExistError(LedgerError):
    message = "Client not found"


class InsufficientFundsError(LedgerError):
    message = "Insufficient funds"


class StorageError(LedgerError):
    """The storage backend failed; the unit of work was rolled back."""
