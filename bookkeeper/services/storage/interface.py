"""
Abstract Ledger Service Interface

DESIGN DECISION: We define an abstract interface for the remote store.
This allows us to:
1. Talk to the PHP REST backend over HTTP in production
2. Use in-memory storage for tests and offline demos
3. Keep the reconciliation logic decoupled from transport

Three collections, each with list/create/update/delete. Reads always
return the full current collection.
"""

from abc import ABC, abstractmethod

from bookkeeper.models.remote import (
    AccountRecord,
    CategoryRecord,
    TransactionRecord,
)


class LedgerServiceInterface(ABC):
    """
    Abstract interface for the remote ledger service.

    Any implementation (HTTP, in-memory, etc.) must implement these
    methods. Every method may raise StorageError.
    """

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_accounts(self) -> list[AccountRecord]:
        """Return every account."""
        pass

    @abstractmethod
    async def create_account(self, record: AccountRecord) -> int:
        """
        Create an account.

        Returns:
            The server-assigned id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_account(self, account_id: int, record: AccountRecord) -> bool:
        """
        Replace an account's fields.

        Raises:
            StorageError: If the write fails
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def delete_account(self, account_id: int) -> bool:
        """Delete an account by id."""
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_categories(self) -> list[CategoryRecord]:
        """Return every category."""
        pass

    @abstractmethod
    async def create_category(self, record: CategoryRecord) -> int:
        """Create a category and return its server id."""
        pass

    @abstractmethod
    async def update_category(self, category_id: int, record: CategoryRecord) -> bool:
        """Replace a category's fields."""
        pass

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool:
        """Delete a category by id."""
        pass

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(self) -> list[TransactionRecord]:
        """Return every transaction of every kind."""
        pass

    @abstractmethod
    async def create_transaction(self, record: TransactionRecord) -> int:
        """Create a transaction and return its server id."""
        pass

    @abstractmethod
    async def update_transaction(self, transaction_id: int, record: TransactionRecord) -> bool:
        """Replace a transaction's fields."""
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: int) -> bool:
        """Delete a transaction by id."""
        pass

    async def close(self) -> None:
        """Release any held resources. Default: nothing to release."""
        return None


class StorageError(Exception):
    """Base exception for remote store operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in the remote store."""
    pass


class ConnectionError(StorageError):
    """Could not reach the remote store."""
    pass
