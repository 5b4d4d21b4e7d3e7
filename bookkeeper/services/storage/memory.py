"""
In-Memory Ledger Service

A process-local implementation of the ledger service interface.
Used by the test suite and for offline demos.

Supports failure injection: `fail_next(operation)` makes the next
call of that method raise a StorageError, and `offline = True` makes
every call raise ConnectionError.
"""

import asyncio
from typing import Optional

from bookkeeper.models.remote import (
    AccountRecord,
    CategoryRecord,
    TransactionRecord,
)
from bookkeeper.services.storage.interface import (
    ConnectionError,
    LedgerServiceInterface,
    NotFoundError,
    StorageError,
)


class InMemoryLedgerService(LedgerServiceInterface):
    """Dict-backed ledger service with integer ids."""

    def __init__(
        self,
        accounts: Optional[list[AccountRecord]] = None,
        categories: Optional[list[CategoryRecord]] = None,
        transactions: Optional[list[TransactionRecord]] = None,
        latency_seconds: float = 0.0,
    ):
        self._next_id = 1
        self.accounts: dict[int, AccountRecord] = {}
        self.categories: dict[int, CategoryRecord] = {}
        self.transactions: dict[int, TransactionRecord] = {}
        self.latency_seconds = latency_seconds
        self.offline = False
        self._failures: dict[str, int] = {}
        self.calls: list[str] = []

        for record in accounts or []:
            self._insert(self.accounts, record)
        for record in categories or []:
            self._insert(self.categories, record)
        for record in transactions or []:
            self._insert(self.transactions, record)

    def fail_next(self, operation: str, times: int = 1) -> None:
        """Make the next `times` calls to `operation` raise StorageError."""
        self._failures[operation] = self._failures.get(operation, 0) + times

    def _insert(self, table: dict, record) -> int:
        record_id = record.id if record.id is not None else self._next_id
        self._next_id = max(self._next_id, record_id) + 1
        table[record_id] = record.model_copy(update={"id": record_id})
        return record_id

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        if self.offline:
            raise ConnectionError(f"{operation}: ledger service is offline")
        remaining = self._failures.get(operation, 0)
        if remaining:
            self._failures[operation] = remaining - 1
            raise StorageError(f"{operation}: injected failure")

    @staticmethod
    def _replace(table: dict, record_id: int, record, name: str) -> bool:
        if record_id not in table:
            raise NotFoundError(f"{name} not found: {record_id}")
        table[record_id] = record.model_copy(update={"id": record_id})
        return True

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def list_accounts(self) -> list[AccountRecord]:
        await self._enter("list_accounts")
        return [r.model_copy() for r in self.accounts.values()]

    async def create_account(self, record: AccountRecord) -> int:
        await self._enter("create_account")
        return self._insert(self.accounts, record.model_copy(update={"id": None}))

    async def update_account(self, account_id: int, record: AccountRecord) -> bool:
        await self._enter("update_account")
        return self._replace(self.accounts, account_id, record, "Account")

    async def delete_account(self, account_id: int) -> bool:
        await self._enter("delete_account")
        return self.accounts.pop(account_id, None) is not None

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[CategoryRecord]:
        await self._enter("list_categories")
        return [r.model_copy() for r in self.categories.values()]

    async def create_category(self, record: CategoryRecord) -> int:
        await self._enter("create_category")
        return self._insert(self.categories, record.model_copy(update={"id": None}))

    async def update_category(self, category_id: int, record: CategoryRecord) -> bool:
        await self._enter("update_category")
        return self._replace(self.categories, category_id, record, "Category")

    async def delete_category(self, category_id: int) -> bool:
        await self._enter("delete_category")
        return self.categories.pop(category_id, None) is not None

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[TransactionRecord]:
        await self._enter("list_transactions")
        return [r.model_copy() for r in self.transactions.values()]

    async def create_transaction(self, record: TransactionRecord) -> int:
        await self._enter("create_transaction")
        return self._insert(self.transactions, record.model_copy(update={"id": None}))

    async def update_transaction(self, transaction_id: int, record: TransactionRecord) -> bool:
        await self._enter("update_transaction")
        return self._replace(self.transactions, transaction_id, record, "Transaction")

    async def delete_transaction(self, transaction_id: int) -> bool:
        await self._enter("delete_transaction")
        return self.transactions.pop(transaction_id, None) is not None
