import asyncio
import random
from datetime import datetime, timedelta, timezone

import pytest
from returns.pipeline import is_successful
from returns.result import Failure, Success

from ledger_api.adapters.errors import ClientDoesNotExistError, InsufficientFundsError
from ledger_api.app.adapters.in_memory_client_repository import InMemoryClientRepository
from ledger_api.app.adapters.in_memory_transaction_repository import (
    InMemoryTransactionRepository,
)
from ledger_api.core.entities.client import Client
from ledger_api.core.entities.entity import Entity
from ledger_api.core.entities.transaction import Transaction, TransactionOperation

DEBIT = TransactionOperation.DEBIT
CREDIT = TransactionOperation.CREDIT


@pytest.fixture
def ledger():
    clients = {1: Client(limit=1000, balance=0), 2: Client(limit=100, balance=0)}
    transactions: list[Transaction] = []
    return (
        InMemoryClientRepository(clients),
        InMemoryTransactionRepository(clients, transactions),
    )


async def collect(transactions):
    return [transaction async for transaction in transactions]


class TestClientRepository:
    @pytest.mark.asyncio
    async def test_get_existing_client(self, ledger):
        client_repository, _ = ledger

        result = await client_repository.get(1)

        assert result.unwrap() == Entity(Client(limit=1000, balance=0), 1)

    @pytest.mark.asyncio
    async def test_get_missing_client(self, ledger):
        client_repository, _ = ledger

        result = await client_repository.get(99999)

        assert isinstance(result.failure(), ClientDoesNotExistError)


class TestCreate:
    @pytest.mark.asyncio
    async def test_debit_within_limit(self, ledger):
        client_repository, transaction_repository = ledger

        result = await transaction_repository.create(Transaction(1, 500, DEBIT, "rent"))

        assert result.unwrap() == Entity(Client(limit=1000, balance=-500), 1)
        assert (await client_repository.get(1)).unwrap().props.balance == -500

    @pytest.mark.asyncio
    async def test_debit_past_floor_changes_nothing(self, ledger):
        client_repository, transaction_repository = ledger
        await transaction_repository.create(Transaction(1, 500, DEBIT, "rent"))

        result = await transaction_repository.create(Transaction(1, 600, DEBIT, "car"))

        assert isinstance(result.failure(), InsufficientFundsError)
        assert (await client_repository.get(1)).unwrap().props.balance == -500
        async with transaction_repository.get_statement(id=1) as statement:
            recorded = await collect(statement.unwrap().transactions)
        assert [entity.props.description for entity in recorded] == ["rent"]

    @pytest.mark.asyncio
    async def test_debit_to_exact_floor(self, ledger):
        _, transaction_repository = ledger

        result = await transaction_repository.create(Transaction(2, 100, DEBIT, "all"))

        assert result.unwrap().props.balance == -100

    @pytest.mark.asyncio
    async def test_missing_client(self, ledger):
        _, transaction_repository = ledger

        result = await transaction_repository.create(Transaction(99999, 1, CREDIT, "x"))

        assert isinstance(result.failure(), ClientDoesNotExistError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(10))
    async def test_random_sequences_never_breach_floor(self, ledger, seed):
        client_repository, transaction_repository = ledger
        rng = random.Random(seed)
        expected = 0

        for step in range(200):
            operation = rng.choice([DEBIT, CREDIT])
            amount = rng.randint(1, 400)
            result = await transaction_repository.create(
                Transaction(1, amount, operation, f"s{step}")
            )
            client = (await client_repository.get(1)).unwrap().props

            match result:
                case Success(_):
                    expected += amount if operation is CREDIT else -amount
                case Failure(error):
                    assert isinstance(error, InsufficientFundsError)
                    assert expected - amount < -1000
            assert client.balance == expected
            assert client.balance >= client.floor


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_debits_serialize(self, ledger):
        client_repository, transaction_repository = ledger

        results = await asyncio.gather(
            *(
                transaction_repository.create(Transaction(2, 10, DEBIT, f"d{index}"))
                for index in range(50)
            )
        )

        accepted = [result for result in results if is_successful(result)]
        assert len(accepted) == 10
        assert (await client_repository.get(2)).unwrap().props.balance == -100
        assert sorted(result.unwrap().props.balance for result in accepted) == list(
            range(-100, 0, 10)
        )

    @pytest.mark.asyncio
    async def test_concurrent_mixed_operations_match_serial_application(self, ledger):
        client_repository, transaction_repository = ledger
        rng = random.Random(7)
        operations = [
            (rng.choice([DEBIT, CREDIT]), rng.randint(1, 300)) for _ in range(100)
        ]

        results = await asyncio.gather(
            *(
                transaction_repository.create(Transaction(1, amount, operation, "mix"))
                for operation, amount in operations
            )
        )

        final = (await client_repository.get(1)).unwrap().props.balance
        applied = sum(
            amount if operation is CREDIT else -amount
            for (operation, amount), result in zip(operations, results)
            if is_successful(result)
        )
        assert final == applied
        assert final >= -1000

    @pytest.mark.asyncio
    async def test_locked_client_does_not_block_other_clients(self, ledger):
        _, transaction_repository = ledger

        async with transaction_repository.lock(1):
            other = await asyncio.wait_for(
                transaction_repository.create(Transaction(2, 10, CREDIT, "free")),
                timeout=1,
            )
            with pytest.raises(TimeoutError):
                await asyncio.wait_for(
                    transaction_repository.create(Transaction(1, 10, CREDIT, "held")),
                    timeout=0.05,
                )

        assert other.unwrap().props.balance == 10


class TestGetStatement:
    @pytest.mark.asyncio
    async def test_missing_client(self, ledger):
        _, transaction_repository = ledger

        async with transaction_repository.get_statement(id=99999) as result:
            assert isinstance(result.failure(), ClientDoesNotExistError)

    @pytest.mark.asyncio
    async def test_newest_first_and_bounded(self, ledger):
        _, transaction_repository = ledger
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for index in range(12):
            await transaction_repository.create(
                Transaction(1, 1, CREDIT, f"t{index}", start + timedelta(minutes=index))
            )

        async with transaction_repository.get_statement(id=1, last=10) as result:
            statement = result.unwrap()
            recorded = await collect(statement.transactions)

        assert statement.client.props.balance == 12
        assert [entity.props.description for entity in recorded] == [
            f"t{index}" for index in range(11, 1, -1)
        ]

    @pytest.mark.asyncio
    async def test_equal_timestamps_list_latest_insert_first(self, ledger):
        _, transaction_repository = ledger
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for description in ("first", "second"):
            await transaction_repository.create(
                Transaction(1, 1, CREDIT, description, moment)
            )

        async with transaction_repository.get_statement(id=1) as result:
            recorded = await collect(result.unwrap().transactions)

        assert [entity.props.description for entity in recorded] == ["second", "first"]


class TestLocks:
    @pytest.mark.asyncio
    async def test_unknown_client_gets_no_lock(self, ledger):
        _, transaction_repository = ledger

        result = await transaction_repository.create(Transaction(99999, 1, CREDIT, "x"))

        assert isinstance(result.failure(), ClientDoesNotExistError)
        with pytest.raises(KeyError):
            transaction_repository.lock(99999)

    def test_locks_exist_for_provisioned_clients(self, ledger):
        _, transaction_repository = ledger

        assert transaction_repository.lock(1) is transaction_repository.lock(1)
        assert transaction_repository.lock(1) is not transaction_repository.lock(2)
