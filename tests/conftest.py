"""
Shared fixtures.

No real network: the remote store is the in-memory ledger service.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from bookkeeper.models.ledger import AccountType, CategoryKind, TransactionKind
from bookkeeper.models.remote import AccountRecord, CategoryRecord, TransactionRecord
from bookkeeper.orchestrator import BookkeepingService
from bookkeeper.services.storage import InMemoryLedgerService


CASH_ID = "1"
BANK_ID = "2"
SALARY_ID = "3"
FOOD_ID = "4"


def run(coro):
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


@pytest.fixture
def remote() -> InMemoryLedgerService:
    """Cash=1000, Bank=0, one income and one expense category."""
    return InMemoryLedgerService(
        accounts=[
            AccountRecord(id=1, name="Cash", type=AccountType.CASH, amount=Decimal("1000")),
            AccountRecord(id=2, name="Bank", type=AccountType.BANK, amount=Decimal("0")),
        ],
        categories=[
            CategoryRecord(id=3, name="Salary", type=CategoryKind.INCOME, color="#16a34a"),
            CategoryRecord(id=4, name="Food", type=CategoryKind.EXPENSE, color="#dc2626"),
        ],
    )


@pytest.fixture
def remote_with_items(remote: InMemoryLedgerService) -> InMemoryLedgerService:
    remote._insert(
        remote.transactions,
        TransactionRecord(
            id=10,
            kind=TransactionKind.COLLECT,
            account_id=1,
            amount=Decimal("300"),
            note="Ashif",
            occurred_on=date(2024, 5, 1),
        ),
    )
    remote._insert(
        remote.transactions,
        TransactionRecord(
            id=11,
            kind=TransactionKind.INCOME,
            category_id=3,
            account_id=2,
            amount=Decimal("500"),
            note="May salary",
            occurred_on=date(2024, 5, 2),
        ),
    )
    return remote


@pytest.fixture
def service(remote: InMemoryLedgerService) -> BookkeepingService:
    """A loaded service over the in-memory remote."""
    svc = BookkeepingService(remote)
    run(svc.load())
    return svc
