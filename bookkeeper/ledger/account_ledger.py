"""
Account Ledger

Balance bookkeeping over a working copy of the snapshot.

Accounts are stored under their ledger key (normalized name) and
found by id through the snapshot's id -> key index, which the
snapshot loader builds once per load.

CRITICAL: A reference to an account that is not in the index is a
silent no-op. Items can outlive their account (deleted elsewhere,
stale snapshot) and that must never crash a mutation.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from bookkeeper.models.ledger import (
    Account,
    AccountType,
    Adjustment,
    LedgerSnapshot,
    TransactionKind,
)


logger = structlog.get_logger(__name__)


class AccountLedger:
    """
    Mutating view over a snapshot's accounts.

    Only ever wrap a forked (unpublished) snapshot; the owner swaps it
    in once the whole mutation has been applied.
    """

    def __init__(self, snapshot: LedgerSnapshot):
        self._snapshot = snapshot

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    def get(self, account_id: Optional[str]) -> Optional[Account]:
        return self._snapshot.find_account(account_id)

    def balance(self, account_id: Optional[str]) -> Optional[Decimal]:
        account = self.get(account_id)
        return account.balance if account else None

    def _store(self, account: Account) -> None:
        self._snapshot.accounts[account.key] = account
        self._snapshot.account_index[account.id] = account.key

    # -------------------------------------------------------------------------
    # Balances
    # -------------------------------------------------------------------------

    def adjust(self, account_id: Optional[str], delta: Decimal) -> bool:
        """
        Add `delta` to an account's balance.

        Returns False (and changes nothing) if the account is unknown.
        """
        account = self.get(account_id)
        if account is None:
            logger.debug("ledger_adjust_skipped", account_id=account_id, delta=str(delta))
            return False
        self._store(account.model_copy(update={"balance": account.balance + delta}))
        return True

    def set(self, account_id: Optional[str], balance: Decimal) -> bool:
        """Overwrite an account's balance. Unknown accounts are a no-op."""
        account = self.get(account_id)
        if account is None:
            logger.debug("ledger_set_skipped", account_id=account_id)
            return False
        self._store(account.model_copy(update={"balance": balance}))
        return True

    def apply(self, adjustments: Iterable[Adjustment]) -> list[str]:
        """
        Apply adjustments in order.

        Returns the ids of the accounts that actually changed.
        """
        touched = []
        for adjustment in adjustments:
            if self.adjust(adjustment.account_id, adjustment.delta):
                if adjustment.account_id not in touched:
                    touched.append(adjustment.account_id)
        return touched

    # -------------------------------------------------------------------------
    # Whole accounts
    # -------------------------------------------------------------------------

    def create(self, account: Account) -> Account:
        """
        Add an account.

        If another account already normalizes to the same key it is
        replaced (last write wins) and its id drops out of the index.
        """
        existing = self._snapshot.accounts.get(account.key)
        if existing is not None and existing.id != account.id:
            logger.warning(
                "ledger_key_collision",
                key=account.key,
                replaced_id=existing.id,
                new_id=account.id,
            )
            self._snapshot.account_index.pop(existing.id, None)
        self._store(account)
        return account

    def update(
        self,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[AccountType] = None,
        balance: Optional[Decimal] = None,
    ) -> Optional[Account]:
        """
        Replace an account's fields. A name change moves it to a new key.
        """
        account = self.get(account_id)
        if account is None:
            return None

        changes = {}
        if name is not None:
            changes["name"] = name
        if type is not None:
            changes["type"] = type
        if balance is not None:
            changes["balance"] = balance
        updated = Account.model_validate({**account.model_dump(), **changes})

        if updated.key != account.key:
            self._snapshot.accounts.pop(account.key, None)
            self._snapshot.account_index.pop(account.id, None)
            return self.create(updated)
        self._store(updated)
        return updated

    def delete(self, account_id: str) -> Optional[Account]:
        """
        Remove an account and detach every item that referenced it.

        Detached items keep their amounts but have no account, so later
        edits of them only apply the new side of a transfer.
        """
        account = self.get(account_id)
        if account is None:
            return None

        self._snapshot.accounts.pop(account.key, None)
        self._snapshot.account_index.pop(account.id, None)

        for kind in TransactionKind:
            for item in self._snapshot.items(kind):
                if item.account_id == account_id:
                    item.account_id = None
        return account

    def items_referencing(self, account_id: str) -> list:
        """Items that still reference an account id, across all kinds."""
        return [
            item
            for kind in TransactionKind
            for item in self._snapshot.items(kind)
            if item.account_id == account_id
        ]

    def rebind_id(self, old_id: str, new_id: str) -> None:
        """
        Swap a temporary account id for the server's id everywhere.
        """
        account = self.get(old_id)
        if account is None:
            return
        self._snapshot.account_index.pop(old_id, None)
        self._store(account.model_copy(update={"id": new_id}))

        for kind in TransactionKind:
            for item in self._snapshot.items(kind):
                if item.account_id == old_id:
                    item.account_id = new_id
