"""Services package."""

from bookkeeper.services.storage import (
    ConnectionError,
    HttpLedgerService,
    InMemoryLedgerService,
    LedgerServiceInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "HttpLedgerService",
    "InMemoryLedgerService",
    "LedgerServiceInterface",
    "NotFoundError",
    "StorageError",
]
