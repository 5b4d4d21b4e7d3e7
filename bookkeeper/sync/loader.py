"""
Snapshot Loader

Fetches accounts, categories and transactions from the remote ledger
service and reshapes them into a LedgerSnapshot:

- transactions are partitioned by kind into collect/pay/income/expense
- accounts are keyed by normalized name, with an id -> key index
- wire ids become strings, `note` becomes the item name

Loading only ever builds a new snapshot; publishing it is the caller's
job. Safe to call any number of times.
"""

import asyncio
from typing import Optional

import structlog
from pydantic import ValidationError

from bookkeeper.models.ledger import (
    Account,
    Category,
    CollectItem,
    ExpenseItem,
    IncomeItem,
    LedgerSnapshot,
    PayItem,
    SnapshotSource,
    TransactionKind,
)
from bookkeeper.models.notification import NotificationBuilder
from bookkeeper.models.remote import AccountRecord, CategoryRecord, TransactionRecord
from bookkeeper.notifications import NotificationCenter
from bookkeeper.services.storage import LedgerServiceInterface, StorageError
from bookkeeper.sync.seed import seed_snapshot


logger = structlog.get_logger(__name__)


class SnapshotUnavailableError(Exception):
    """The remote store could not be loaded and no fallback is allowed."""
    pass


def _ref(value: Optional[int]) -> Optional[str]:
    return str(value) if value is not None else None


def account_from_record(record: AccountRecord) -> Account:
    return Account(
        id=str(record.id),
        name=record.name,
        type=record.type,
        balance=record.amount,
    )


def category_from_record(record: CategoryRecord) -> Category:
    return Category(
        id=str(record.id),
        name=record.name,
        kind=record.type,
        color=record.color,
    )


def item_from_record(record: TransactionRecord):
    """Map one transaction row to the item type for its kind."""
    common = {
        "id": str(record.id),
        "name": (record.note or "").strip() or record.kind.value.capitalize(),
        "amount": record.amount,
        "account_id": _ref(record.account_id),
        "occurred_on": record.occurred_on,
    }
    if record.kind == TransactionKind.COLLECT:
        return CollectItem(completed=record.completed, **common)
    if record.kind == TransactionKind.PAY:
        return PayItem(completed=record.completed, **common)
    if record.kind == TransactionKind.INCOME:
        return IncomeItem(category_id=_ref(record.category_id), **common)
    return ExpenseItem(category_id=_ref(record.category_id), **common)


def build_snapshot(
    accounts: list[AccountRecord],
    categories: list[CategoryRecord],
    transactions: list[TransactionRecord],
) -> LedgerSnapshot:
    """
    Assemble a snapshot from the three remote collections.

    Two accounts whose names normalize to the same key: the later one wins.
    """
    snapshot = LedgerSnapshot(source=SnapshotSource.REMOTE)

    for record in accounts:
        account = account_from_record(record)
        replaced = snapshot.accounts.get(account.key)
        if replaced is not None:
            logger.warning("account_key_collision", key=account.key, replaced_id=replaced.id)
            snapshot.account_index.pop(replaced.id, None)
        snapshot.accounts[account.key] = account
        snapshot.account_index[account.id] = account.key

    snapshot.categories = [category_from_record(r) for r in categories]

    for record in transactions:
        item = item_from_record(record)
        snapshot.items(record.kind).append(item)

    return snapshot


class SnapshotLoader:
    """
    Loads the authoritative snapshot from the remote ledger service.

    At startup an unreachable service yields the built-in seed snapshot
    (when `offline_seed_fallback` is on) instead of an error.
    """

    def __init__(
        self,
        service: LedgerServiceInterface,
        notifications: Optional[NotificationCenter] = None,
        offline_seed_fallback: bool = True,
    ):
        self._service = service
        self._notifications = notifications
        self._offline_seed_fallback = offline_seed_fallback

    async def fetch(self) -> LedgerSnapshot:
        """
        Fetch all three collections concurrently and build a snapshot.

        Raises:
            StorageError: If any fetch fails or a row cannot be mapped
        """
        accounts, categories, transactions = await asyncio.gather(
            self._service.list_accounts(),
            self._service.list_categories(),
            self._service.list_transactions(),
        )
        try:
            snapshot = build_snapshot(accounts, categories, transactions)
        except ValidationError as e:
            raise StorageError(f"Remote data could not be mapped: {e}")

        if self._notifications:
            self._notifications.notify(
                NotificationBuilder.snapshot_loaded(
                    account_count=len(snapshot.accounts),
                    item_count=sum(len(snapshot.items(k)) for k in TransactionKind),
                )
            )
        return snapshot

    async def load(self) -> LedgerSnapshot:
        """
        Fetch the snapshot, falling back to the seed on failure.

        Raises:
            SnapshotUnavailableError: If fetching fails and the seed
                fallback is disabled
        """
        try:
            return await self.fetch()
        except StorageError as e:
            logger.warning("snapshot_fetch_failed", error=str(e))
            if not self._offline_seed_fallback:
                raise SnapshotUnavailableError(f"Could not load ledger: {e}") from e

            if self._notifications:
                self._notifications.notify(NotificationBuilder.snapshot_fallback(str(e)))
            return seed_snapshot()
