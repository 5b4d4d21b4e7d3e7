"""
Ledger Store

The single owner of the current snapshot.

DESIGN DECISION: The snapshot is replaced as a whole, never edited in
place. `mutate()` hands a deep copy to the caller's function and only
publishes it if the function returns normally, so readers never see a
half-applied change and a failing mutation leaves nothing behind.

Totals are recomputed on every publish.
"""

from typing import Callable, Optional, TypeVar

import structlog

from bookkeeper.analytics import compute_totals
from bookkeeper.models.ledger import LedgerSnapshot, LedgerTotals


logger = structlog.get_logger(__name__)

T = TypeVar("T")

SnapshotListener = Callable[[LedgerSnapshot, LedgerTotals], None]


class LedgerStore:
    """Holds the published snapshot and its totals."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._snapshot = snapshot or LedgerSnapshot()
        self._totals = compute_totals(self._snapshot)
        self._listeners: list[SnapshotListener] = []
        self._version = 0

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    @property
    def totals(self) -> LedgerTotals:
        return self._totals

    @property
    def version(self) -> int:
        """Incremented on every publish."""
        return self._version

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace(self, snapshot: LedgerSnapshot) -> None:
        """Publish a new snapshot."""
        self._snapshot = snapshot
        self._totals = compute_totals(snapshot)
        self._version += 1

        for listener in list(self._listeners):
            try:
                listener(self._snapshot, self._totals)
            except Exception as e:
                logger.error("snapshot_listener_failed", error=str(e))

    def mutate(self, change: Callable[[LedgerSnapshot], T]) -> T:
        """
        Apply `change` to a copy of the snapshot and publish the copy.

        If `change` raises, nothing is published and the error propagates.
        """
        working = self._snapshot.fork()
        result = change(working)
        self.replace(working)
        return result
