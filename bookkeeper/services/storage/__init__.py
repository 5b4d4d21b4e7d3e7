"""
Storage Services Package

Provides the abstract interface to the remote ledger service and its
implementations: HTTP for production, in-memory for tests and demos.
"""

from bookkeeper.services.storage.interface import (
    ConnectionError,
    LedgerServiceInterface,
    NotFoundError,
    StorageError,
)
from bookkeeper.services.storage.http_service import HttpLedgerService
from bookkeeper.services.storage.memory import InMemoryLedgerService

__all__ = [
    # Interface
    "LedgerServiceInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "HttpLedgerService",
    "InMemoryLedgerService",
]
