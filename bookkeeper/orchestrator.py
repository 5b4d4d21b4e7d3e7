"""
Main Orchestrator for Bookkeeper

Defines the mutation entry points UI collaborators call: add / update /
delete for collect, pay, income, expense, categories and accounts, plus
mark-completed for collect and pay.

Each entry point:
1. Validates its input (pydantic) before touching anything
2. Builds one synchronous local change (items + balances together)
3. Builds the matching remote write
4. Hands both to the OptimisticUpdateController

DESIGN DECISION: The remote store keeps plain account amounts and has
no posting logic, so every transaction write also moves the amounts of
the accounts it touched. Only the operation's own deltas are added to
the amounts the server holds, never the optimistic snapshot's balances,
and the balance write and the transaction write undo each other on
failure. Balance writes are serialized per event loop.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog

from bookkeeper.analytics import totals_by_account, totals_by_category
from bookkeeper.config import get_settings, validate_all_settings
from bookkeeper.controller import OptimisticUpdateController
from bookkeeper.ledger import (
    AccountLedger,
    posting_of,
    reconcile_transfer,
)
from bookkeeper.models.ledger import (
    ITEM_TYPES,
    Account,
    Adjustment,
    AccountActivity,
    AccountType,
    Category,
    CategoryKind,
    CategoryTotal,
    ExpenseItem,
    IncomeItem,
    LedgerItem,
    LedgerSnapshot,
    LedgerTotals,
    ObligationItem,
    TransactionItem,
    TransactionKind,
)
from bookkeeper.models.remote import AccountRecord, CategoryRecord, TransactionRecord
from bookkeeper.notifications import NotificationCenter
from bookkeeper.services.storage import (
    HttpLedgerService,
    LedgerServiceInterface,
    StorageError,
)
from bookkeeper.state import LedgerStore
from bookkeeper.sync import SnapshotLoader


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, int, str]

T = TypeVar("T")

COMPLETION_KIND = {
    TransactionKind.COLLECT: TransactionKind.INCOME,
    TransactionKind.PAY: TransactionKind.EXPENSE,
}


def wire_id(value: Optional[str]) -> Optional[int]:
    """Server id for a local id, or None for temporary/unknown ids."""
    if value is None or not value.isdigit():
        return None
    return int(value)


def require_wire_id(value: str, what: str) -> int:
    remote_id = wire_id(value)
    if remote_id is None:
        raise StorageError(f"{what} {value} has not been saved to the ledger service yet")
    return remote_id


def transaction_record(item: LedgerItem) -> TransactionRecord:
    """Wire representation of an item."""
    return TransactionRecord(
        kind=item.kind,
        category_id=wire_id(item.category_id) if isinstance(item, TransactionItem) else None,
        account_id=wire_id(item.account_id),
        amount=item.amount,
        note=item.name,
        occurred_on=item.occurred_on,
        completed=item.completed if isinstance(item, ObligationItem) else False,
    )


def account_record(account: Account) -> AccountRecord:
    return AccountRecord(name=account.name, type=account.type, amount=account.balance)


def category_record(category: Category) -> CategoryRecord:
    return CategoryRecord(name=category.name, type=category.kind, color=category.color)


class BookkeepingService:
    """
    Owns the snapshot and exposes one async entry point per
    (entity, action) pair.
    """

    def __init__(
        self,
        service: LedgerServiceInterface,
        notifications: Optional[NotificationCenter] = None,
        offline_seed_fallback: bool = True,
        operation_timeout_seconds: Optional[float] = None,
    ):
        self._service = service
        self._notifications = notifications or NotificationCenter()
        self._store = LedgerStore()
        self._loader = SnapshotLoader(
            service,
            notifications=self._notifications,
            offline_seed_fallback=offline_seed_fallback,
        )
        self._controller = OptimisticUpdateController(
            self._store,
            self._loader,
            notifications=self._notifications,
            timeout_seconds=operation_timeout_seconds,
        )
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    # =========================================================================
    # READ SIDE
    # =========================================================================

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._store.snapshot

    @property
    def totals(self) -> LedgerTotals:
        return self._store.totals

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    @property
    def operation_loading(self) -> dict[str, bool]:
        return self._controller.operation_loading

    def is_loading(self, operation_key: str) -> bool:
        return self._controller.is_loading(operation_key)

    def account_activity(self) -> list[AccountActivity]:
        return totals_by_account(self.snapshot)

    def category_totals(self, kind: CategoryKind) -> list[CategoryTotal]:
        return totals_by_category(self.snapshot, kind)

    def balance_of(self, account_id: str) -> Optional[Decimal]:
        account = self.snapshot.find_account(account_id)
        return account.balance if account else None

    async def load(self) -> LedgerSnapshot:
        """Load the snapshot at startup (seed fallback applies)."""
        snapshot = await self._loader.load()
        self._store.replace(snapshot)
        return snapshot

    async def refresh(self) -> bool:
        """Resync from the server, keeping the current snapshot on failure."""
        return await self._controller.resync(operation_key="refresh")

    async def close(self) -> None:
        await self._service.close()

    # =========================================================================
    # SHARED HELPERS
    # =========================================================================

    def _balance_lock(self) -> asyncio.Lock:
        """Lock serializing read-modify-write of remote account amounts."""
        loop = asyncio.get_running_loop()
        if self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _server_accounts(self) -> dict[int, AccountRecord]:
        return {record.id: record for record in await self._service.list_accounts()}

    async def _restore_accounts(self, records: list[AccountRecord]) -> None:
        """Put account rows back as they were. Failures are logged, not raised."""
        for record in records:
            try:
                await self._service.update_account(record.id, record)
            except StorageError as e:
                logger.error("balance_restore_failed", account_id=record.id, error=str(e))

    async def _push_adjustments(self, adjustments: list[Adjustment]) -> list[AccountRecord]:
        """
        Add this operation's deltas to the server's current amounts.

        Only the operation's own adjustments are sent, so optimistic
        changes of other in-flight operations never reach the server.
        Returns the rows as they were before the write; if any write
        fails, the rows already written are restored first.
        """
        deltas: dict[int, Decimal] = {}
        for adjustment in adjustments:
            remote_id = wire_id(adjustment.account_id)
            if remote_id is not None:
                deltas[remote_id] = deltas.get(remote_id, Decimal("0")) + adjustment.delta
        deltas = {remote_id: delta for remote_id, delta in deltas.items() if delta != 0}
        if not deltas:
            return []

        server = await self._server_accounts()
        written: list[AccountRecord] = []
        try:
            for remote_id, delta in deltas.items():
                record = server.get(remote_id)
                if record is None:
                    logger.warning("balance_push_skipped_unknown_account", account_id=remote_id)
                    continue
                await self._service.update_account(
                    remote_id, record.model_copy(update={"amount": record.amount + delta})
                )
                written.append(record)
        except (Exception, asyncio.CancelledError):
            await self._restore_accounts(written)
            raise
        return written

    async def _write_with_balances(
        self,
        adjustments: list[Adjustment],
        write: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Push balance deltas, then perform the transaction write.

        If the write fails the pushed balances are restored, so the
        server never holds an item without its balance effect or the
        other way round.
        """
        async with self._balance_lock():
            previous = await self._push_adjustments(adjustments)
            try:
                return await write()
            except (Exception, asyncio.CancelledError):
                await self._restore_accounts(previous)
                raise

    def _rebind_item(self, kind: TransactionKind, temp_id: str, server_id: int) -> None:
        def change(snapshot: LedgerSnapshot) -> None:
            item = snapshot.find_item(kind, temp_id)
            if item is not None:
                item.id = str(server_id)

        self._store.mutate(change)

    # =========================================================================
    # ITEMS (generic over kind)
    # =========================================================================

    async def _add_item(self, item: LedgerItem) -> str:
        kind = item.kind

        def apply(snapshot: LedgerSnapshot) -> list[Adjustment]:
            snapshot.items(kind).append(item)
            return reconcile_transfer(AccountLedger(snapshot), kind, None, posting_of(item))

        async def remote(adjustments: list[Adjustment]) -> int:
            return await self._write_with_balances(
                adjustments,
                lambda: self._service.create_transaction(transaction_record(item)),
            )

        server_id = await self._controller.run(
            f"add-{kind.value}",
            apply,
            remote,
            on_success=lambda new_id: self._rebind_item(kind, item.id, new_id),
            error_message=f"Could not add {kind.value} item",
            success_message=f"{kind.value.capitalize()} item added",
        )
        return str(server_id)

    async def _update_item(self, kind: TransactionKind, item_id: str, **fields) -> Optional[LedgerItem]:
        existing = self.snapshot.find_item(kind, item_id)
        if existing is None:
            logger.warning("update_skipped_unknown_item", kind=kind.value, item_id=item_id)
            return None

        values = existing.model_dump()
        values.update({k: v for k, v in fields.items() if k != "occurred_on" or v is not None})
        updated = ITEM_TYPES[kind].model_validate(values)

        def apply(snapshot: LedgerSnapshot) -> list[Adjustment]:
            items = snapshot.items(kind)
            old = snapshot.find_item(kind, item_id)
            if old is None:
                return []
            items[items.index(old)] = updated
            return reconcile_transfer(
                AccountLedger(snapshot), kind, posting_of(old), posting_of(updated)
            )

        async def remote(adjustments: list[Adjustment]) -> bool:
            remote_id = require_wire_id(item_id, kind.value)
            return await self._write_with_balances(
                adjustments,
                lambda: self._service.update_transaction(remote_id, transaction_record(updated)),
            )

        await self._controller.run(
            f"update-{kind.value}",
            apply,
            remote,
            error_message=f"Could not update {kind.value} item",
            success_message=f"{kind.value.capitalize()} item updated",
        )
        return updated

    async def _delete_item(self, kind: TransactionKind, item_id: str) -> bool:
        if self.snapshot.find_item(kind, item_id) is None:
            logger.warning("delete_skipped_unknown_item", kind=kind.value, item_id=item_id)
            return False

        def apply(snapshot: LedgerSnapshot) -> list[Adjustment]:
            old = snapshot.find_item(kind, item_id)
            if old is None:
                return []
            snapshot.items(kind).remove(old)
            return reconcile_transfer(AccountLedger(snapshot), kind, posting_of(old), None)

        async def remote(adjustments: list[Adjustment]) -> bool:
            remote_id = require_wire_id(item_id, kind.value)
            return await self._write_with_balances(
                adjustments,
                lambda: self._service.delete_transaction(remote_id),
            )

        await self._controller.run(
            f"delete-{kind.value}",
            apply,
            remote,
            error_message=f"Could not delete {kind.value} item",
            success_message=f"{kind.value.capitalize()} item deleted",
        )
        return True

    async def _mark_completed(
        self,
        kind: TransactionKind,
        item_id: str,
        account_id: Optional[str],
        category_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Turn a pending collect/pay item into a posted income/expense.

        The earmark on the item's account is reversed and the full
        amount is posted against `account_id` (defaults to the item's own
        account). Completing an already-completed item does nothing.
        """
        existing = self.snapshot.find_item(kind, item_id)
        if existing is None:
            logger.warning("complete_skipped_unknown_item", kind=kind.value, item_id=item_id)
            return None
        if existing.completed:
            logger.info("complete_skipped_already_completed", kind=kind.value, item_id=item_id)
            return None

        posted_kind = COMPLETION_KIND[kind]
        posted = ITEM_TYPES[posted_kind](
            name=existing.name,
            amount=existing.amount,
            account_id=account_id or existing.account_id,
            category_id=category_id,
            occurred_on=date.today(),
        )
        completed = existing.model_copy(update={"completed": True})

        def apply(snapshot: LedgerSnapshot) -> list[Adjustment]:
            items = snapshot.items(kind)
            old = snapshot.find_item(kind, item_id)
            if old is None or old.completed:
                return []
            items[items.index(old)] = completed
            snapshot.items(posted_kind).append(posted)

            ledger = AccountLedger(snapshot)
            return (
                reconcile_transfer(ledger, kind, posting_of(old), None)
                + reconcile_transfer(ledger, posted_kind, None, posting_of(posted))
            )

        async def write(remote_id: int) -> int:
            await self._service.update_transaction(remote_id, transaction_record(completed))
            try:
                return await self._service.create_transaction(transaction_record(posted))
            except (Exception, asyncio.CancelledError):
                try:
                    await self._service.update_transaction(remote_id, transaction_record(existing))
                except StorageError as e:
                    logger.error("completion_restore_failed", item_id=item_id, error=str(e))
                raise

        async def remote(adjustments: list[Adjustment]) -> int:
            remote_id = require_wire_id(item_id, kind.value)
            return await self._write_with_balances(adjustments, lambda: write(remote_id))

        server_id = await self._controller.run(
            f"complete-{kind.value}",
            apply,
            remote,
            on_success=lambda new_id: self._rebind_item(posted_kind, posted.id, new_id),
            error_message=f"Could not complete {kind.value} item",
            success_message=f"{existing.name} marked as completed",
        )
        return str(server_id)

    # =========================================================================
    # COLLECT / PAY
    # =========================================================================

    async def add_collect(
        self,
        name: str,
        amount: Amount,
        account_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
    ) -> str:
        item = ITEM_TYPES[TransactionKind.COLLECT](
            name=name, amount=amount, account_id=account_id, occurred_on=occurred_on or date.today()
        )
        return await self._add_item(item)

    async def update_collect(
        self,
        item_id: str,
        name: str,
        amount: Amount,
        account_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
    ) -> Optional[LedgerItem]:
        return await self._update_item(
            TransactionKind.COLLECT, item_id,
            name=name, amount=amount, account_id=account_id, occurred_on=occurred_on,
        )

    async def delete_collect(self, item_id: str) -> bool:
        return await self._delete_item(TransactionKind.COLLECT, item_id)

    async def mark_collect_completed(
        self,
        item_id: str,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Optional[str]:
        return await self._mark_completed(TransactionKind.COLLECT, item_id, account_id, category_id)

    async def add_pay(
        self,
        name: str,
        amount: Amount,
        account_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
    ) -> str:
        item = ITEM_TYPES[TransactionKind.PAY](
            name=name, amount=amount, account_id=account_id, occurred_on=occurred_on or date.today()
        )
        return await self._add_item(item)

    async def update_pay(
        self,
        item_id: str,
        name: str,
        amount: Amount,
        account_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
    ) -> Optional[LedgerItem]:
        return await self._update_item(
            TransactionKind.PAY, item_id,
            name=name, amount=amount, account_id=account_id, occurred_on=occurred_on,
        )

    async def delete_pay(self, item_id: str) -> bool:
        return await self._delete_item(TransactionKind.PAY, item_id)

    async def mark_pay_completed(
        self,
        item_id: str,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Optional[str]:
        return await self._mark_completed(TransactionKind.PAY, item_id, account_id, category_id)

    # =========================================================================
    # INCOME / EXPENSE
    # =========================================================================

    async def add_income(
        self,
        name: str,
        amount: Amount,
        category_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
        account_id: Optional[str] = None,
    ) -> str:
        item = IncomeItem(
            name=name,
            amount=amount,
            category_id=category_id,
            occurred_on=occurred_on or date.today(),
            account_id=account_id,
        )
        return await self._add_item(item)

    async def update_income(
        self,
        item_id: str,
        name: str,
        amount: Amount,
        category_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
        account_id: Optional[str] = None,
    ) -> Optional[LedgerItem]:
        return await self._update_item(
            TransactionKind.INCOME, item_id,
            name=name, amount=amount, category_id=category_id,
            occurred_on=occurred_on, account_id=account_id,
        )

    async def delete_income(self, item_id: str) -> bool:
        return await self._delete_item(TransactionKind.INCOME, item_id)

    async def add_expense(
        self,
        name: str,
        amount: Amount,
        category_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
        account_id: Optional[str] = None,
    ) -> str:
        item = ExpenseItem(
            name=name,
            amount=amount,
            category_id=category_id,
            occurred_on=occurred_on or date.today(),
            account_id=account_id,
        )
        return await self._add_item(item)

    async def update_expense(
        self,
        item_id: str,
        name: str,
        amount: Amount,
        category_id: Optional[str] = None,
        occurred_on: Optional[date] = None,
        account_id: Optional[str] = None,
    ) -> Optional[LedgerItem]:
        return await self._update_item(
            TransactionKind.EXPENSE, item_id,
            name=name, amount=amount, category_id=category_id,
            occurred_on=occurred_on, account_id=account_id,
        )

    async def delete_expense(self, item_id: str) -> bool:
        return await self._delete_item(TransactionKind.EXPENSE, item_id)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    async def add_category(
        self,
        name: str,
        kind: CategoryKind,
        color: str = "#6b7280",
    ) -> str:
        category = Category(name=name, kind=kind, color=color)

        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.categories.append(category)

        async def remote(_: None) -> int:
            return await self._service.create_category(category_record(category))

        def rebind(server_id: int) -> None:
            def change(snapshot: LedgerSnapshot) -> None:
                for existing in snapshot.categories:
                    if existing.id == category.id:
                        existing.id = str(server_id)
                for item in snapshot.income + snapshot.expense:
                    if item.category_id == category.id:
                        item.category_id = str(server_id)

            self._store.mutate(change)

        server_id = await self._controller.run(
            "add-category",
            apply,
            remote,
            on_success=rebind,
            error_message="Could not add category",
            success_message=f"Category {category.name} added",
        )
        return str(server_id)

    async def update_category(
        self,
        category_id: str,
        name: str,
        kind: CategoryKind,
        color: str,
    ) -> Optional[Category]:
        existing = self.snapshot.find_category(category_id)
        if existing is None:
            logger.warning("update_skipped_unknown_category", category_id=category_id)
            return None
        updated = Category(id=category_id, name=name, kind=kind, color=color)

        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.categories = [
                updated if c.id == category_id else c for c in snapshot.categories
            ]

        async def remote(_: None) -> bool:
            return await self._service.update_category(
                require_wire_id(category_id, "category"), category_record(updated)
            )

        await self._controller.run(
            "update-category",
            apply,
            remote,
            error_message="Could not update category",
            success_message=f"Category {updated.name} updated",
        )
        return updated

    async def delete_category(self, category_id: str) -> bool:
        """
        Delete a category. Items that used it are detached, not deleted.
        """
        if self.snapshot.find_category(category_id) is None:
            logger.warning("delete_skipped_unknown_category", category_id=category_id)
            return False

        def apply(snapshot: LedgerSnapshot) -> list[LedgerItem]:
            snapshot.categories = [c for c in snapshot.categories if c.id != category_id]
            detached = []
            for item in snapshot.income + snapshot.expense:
                if item.category_id == category_id:
                    item.category_id = None
                    detached.append(item.model_copy())
            return detached

        async def remote(detached: list[LedgerItem]) -> bool:
            for item in detached:
                remote_id = wire_id(item.id)
                if remote_id is not None:
                    await self._service.update_transaction(remote_id, transaction_record(item))
            return await self._service.delete_category(require_wire_id(category_id, "category"))

        await self._controller.run(
            "delete-category",
            apply,
            remote,
            error_message="Could not delete category",
            success_message="Category deleted",
        )
        return True

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    async def add_account(
        self,
        name: str,
        type: AccountType,
        balance: Amount = Decimal("0"),
    ) -> str:
        account = Account(name=name, type=type, balance=balance)

        def apply(snapshot: LedgerSnapshot) -> None:
            AccountLedger(snapshot).create(account)

        async def remote(_: None) -> int:
            return await self._service.create_account(account_record(account))

        def rebind(server_id: int) -> None:
            self._store.mutate(
                lambda snapshot: AccountLedger(snapshot).rebind_id(account.id, str(server_id))
            )

        server_id = await self._controller.run(
            "add-account",
            apply,
            remote,
            on_success=rebind,
            error_message="Could not add account",
            success_message=f"Account {account.name} added",
        )
        return str(server_id)

    async def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[AccountType] = None,
        balance: Optional[Amount] = None,
    ) -> Optional[Account]:
        existing = self.snapshot.find_account(account_id)
        if existing is None:
            logger.warning("update_skipped_unknown_account", account_id=account_id)
            return None

        def apply(snapshot: LedgerSnapshot) -> Optional[Account]:
            return AccountLedger(snapshot).update(
                account_id,
                name=name,
                type=type,
                balance=Decimal(str(balance)) if balance is not None else None,
            )

        async def remote(updated: Optional[Account]) -> bool:
            if updated is None:
                return False
            remote_id = require_wire_id(account_id, "account")
            record = account_record(updated)
            async with self._balance_lock():
                if balance is None:
                    # keep whatever amount the server holds now
                    current = (await self._server_accounts()).get(remote_id)
                    if current is not None:
                        record = record.model_copy(update={"amount": current.amount})
                return await self._service.update_account(remote_id, record)

        await self._controller.run(
            "update-account",
            apply,
            remote,
            error_message="Could not update account",
            success_message="Account updated",
        )
        return self.snapshot.find_account(account_id)

    async def set_account_balance(self, account_id: str, balance: Amount) -> Optional[Account]:
        """Overwrite one account's balance (manual correction)."""
        if self.snapshot.find_account(account_id) is None:
            logger.warning("set_balance_skipped_unknown_account", account_id=account_id)
            return None
        new_balance = Decimal(str(balance))

        def apply(snapshot: LedgerSnapshot) -> Optional[Account]:
            ledger = AccountLedger(snapshot)
            ledger.set(account_id, new_balance)
            return snapshot.find_account(account_id)

        async def remote(account: Optional[Account]) -> bool:
            if account is None:
                return False
            remote_id = require_wire_id(account_id, "account")
            async with self._balance_lock():
                return await self._service.update_account(
                    remote_id, account_record(account)
                )

        await self._controller.run(
            "update-account",
            apply,
            remote,
            error_message="Could not update balance",
            success_message="Balance updated",
        )
        return self.snapshot.find_account(account_id)

    async def delete_account(self, account_id: str) -> bool:
        """
        Delete an account. Items that referenced it are detached
        (their account is cleared) both locally and remotely.
        """
        if self.snapshot.find_account(account_id) is None:
            logger.warning("delete_skipped_unknown_account", account_id=account_id)
            return False

        def apply(snapshot: LedgerSnapshot) -> list[LedgerItem]:
            ledger = AccountLedger(snapshot)
            referencing = ledger.items_referencing(account_id)
            ledger.delete(account_id)
            return [item.model_copy() for item in referencing]

        async def remote(detached: list[LedgerItem]) -> bool:
            for item in detached:
                remote_id = wire_id(item.id)
                if remote_id is not None:
                    await self._service.update_transaction(remote_id, transaction_record(item))
            return await self._service.delete_account(require_wire_id(account_id, "account"))

        await self._controller.run(
            "delete-account",
            apply,
            remote,
            error_message="Could not delete account",
            success_message="Account deleted",
        )
        return True


def create_app_components(
    service: Optional[LedgerServiceInterface] = None,
) -> BookkeepingService:
    """
    Factory function wiring the service from settings.

    Args:
        service: Remote ledger service to use. Defaults to the HTTP
                 service configured by LEDGER_API_* settings.
    """
    status = validate_all_settings()
    for name, ok in status.items():
        if ok is False:
            logger.warning("settings_invalid", setting=name, error=status.get(f"{name}_error"))

    settings = get_settings().app
    logging.basicConfig(level=settings.effective_log_level, format="%(message)s")
    logging.getLogger("bookkeeper").setLevel(settings.effective_log_level)
    return BookkeepingService(
        service or HttpLedgerService(),
        notifications=NotificationCenter(history_size=settings.notification_history_size),
        offline_seed_fallback=settings.offline_seed_fallback,
        operation_timeout_seconds=settings.operation_timeout_seconds,
    )
