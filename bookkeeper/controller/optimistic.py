"""
Optimistic Update Controller

Every mutation entry point goes through `run()`:

1. apply_locally   - synchronous, on a copy of the snapshot, published
                     before any network I/O
2. remote_call     - awaited; operation_loading[key] is True meanwhile
3a. success        - on_success(result), full resync, success toast
3b. failure        - error toast, full resync, OperationFailedError

DESIGN DECISION: There is no hand-written undo. A failed write is
discarded by reloading the server's snapshot. If that reload fails too,
the snapshot captured just before the local change is restored.

Operations under different keys may interleave freely. Operations
under the same key are NOT serialized here; callers disable the
triggering control while `is_loading(key)` is True.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from bookkeeper.models.ledger import LedgerSnapshot
from bookkeeper.models.notification import NotificationBuilder
from bookkeeper.notifications import NotificationCenter
from bookkeeper.services.storage import StorageError
from bookkeeper.state import LedgerStore
from bookkeeper.sync import SnapshotLoader


logger = structlog.get_logger(__name__)

L = TypeVar("L")
R = TypeVar("R")


class OperationFailedError(Exception):
    """
    A mutation's remote write failed (or timed out).

    The local change has already been discarded by the time this is
    raised. The underlying exception is chained as __cause__.
    """

    def __init__(self, message: str, operation_key: str):
        self.operation_key = operation_key
        super().__init__(message)


class OptimisticUpdateController:
    """
    Applies local changes immediately and confirms them remotely.
    """

    def __init__(
        self,
        store: LedgerStore,
        loader: SnapshotLoader,
        notifications: Optional[NotificationCenter] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self._store = store
        self._loader = loader
        self._notifications = notifications or NotificationCenter()
        self._timeout_seconds = timeout_seconds
        self._in_flight: dict[str, int] = {}

    # -------------------------------------------------------------------------
    # Loading flags
    # -------------------------------------------------------------------------

    @property
    def operation_loading(self) -> dict[str, bool]:
        """Operation key -> whether a remote call for it is pending."""
        return {key: count > 0 for key, count in self._in_flight.items()}

    def is_loading(self, operation_key: str) -> bool:
        return self._in_flight.get(operation_key, 0) > 0

    def _begin(self, operation_key: str) -> None:
        self._in_flight[operation_key] = self._in_flight.get(operation_key, 0) + 1

    def _end(self, operation_key: str) -> None:
        self._in_flight[operation_key] = max(0, self._in_flight.get(operation_key, 0) - 1)

    # -------------------------------------------------------------------------
    # Resync
    # -------------------------------------------------------------------------

    async def resync(
        self,
        rollback_to: Optional[LedgerSnapshot] = None,
        operation_key: Optional[str] = None,
    ) -> bool:
        """
        Replace the snapshot with the server's.

        If the server cannot be reached, `rollback_to` (when given) is
        published instead; otherwise the current snapshot is kept.

        Returns True if the server snapshot was adopted.
        """
        try:
            snapshot = await self._loader.fetch()
        except StorageError as e:
            logger.warning("resync_failed", operation_key=operation_key, error=str(e))
            if rollback_to is not None:
                self._store.replace(rollback_to)
                self._notifications.notify(
                    NotificationBuilder.rollback_restored(operation_key or "resync", str(e))
                )
            return False

        self._store.replace(snapshot)
        return True

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run(
        self,
        operation_key: str,
        apply_locally: Callable[[LedgerSnapshot], L],
        remote_call: Callable[[L], Awaitable[R]],
        on_success: Optional[Callable[[R], None]] = None,
        error_message: Optional[str] = None,
        success_message: Optional[str] = None,
    ) -> R:
        """
        Run one optimistic operation.

        Args:
            operation_key: Key for the loading flag (e.g. "add-income")
            apply_locally: Mutates a working copy of the snapshot; its
                return value is handed to remote_call
            remote_call: Performs the remote write
            on_success: Called with the remote result before the resync
                (typically swaps temporary ids for server ids)
            error_message: Text for the error notification
            success_message: Text for the success notification

        Returns:
            Whatever remote_call returned

        Raises:
            OperationFailedError: If the remote write failed or timed out
        """
        before = self._store.snapshot
        local_result = self._store.mutate(apply_locally)

        self._begin(operation_key)
        try:
            try:
                call = remote_call(local_result)
                if self._timeout_seconds:
                    result = await asyncio.wait_for(call, self._timeout_seconds)
                else:
                    result = await call
                if on_success is not None:
                    on_success(result)
            except asyncio.TimeoutError as e:
                message = error_message or f"{operation_key} timed out"
                self._notifications.notify(
                    NotificationBuilder.operation_timed_out(
                        operation_key, message, self._timeout_seconds
                    )
                )
                await self.resync(rollback_to=before, operation_key=operation_key)
                raise OperationFailedError(message, operation_key) from e
            except Exception as e:
                message = error_message or f"{operation_key} failed"
                logger.error("operation_failed", operation_key=operation_key, error=str(e))
                self._notifications.error(operation_key, message, str(e))
                await self.resync(rollback_to=before, operation_key=operation_key)
                raise OperationFailedError(message, operation_key) from e

            await self.resync(operation_key=operation_key)
            self._notifications.success(operation_key, success_message or f"{operation_key} done")
            return result
        finally:
            self._end(operation_key)
